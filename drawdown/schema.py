"""Plan schema dataclasses and JSON loading."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Any


class SchemaError(ValueError):
    """Raised when raw JSON cannot be parsed into schema objects."""


INCOME_TAX_TREATMENTS = {"benefit", "fully_taxable", "tax_free"}


def _expect_dict(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise SchemaError(f"{path}: expected object")
    return value


def _expect_list(value: Any, path: str) -> list[Any]:
    if not isinstance(value, list):
        raise SchemaError(f"{path}: expected array")
    return value


def _require(data: dict[str, Any], key: str, path: str) -> Any:
    if key not in data:
        raise SchemaError(f"{path}.{key}: missing required field")
    return data[key]


def _optional(data: dict[str, Any], key: str, default: Any = None) -> Any:
    return data.get(key, default)


def _number(value: Any, path: str) -> float:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SchemaError(f"{path}: expected number")
    return float(value)


def _optional_number(data: dict[str, Any], key: str, path: str, default: float | None = None) -> float | None:
    value = data.get(key)
    if value is None:
        return default
    return _number(value, f"{path}.{key}")


def _age(value: Any, path: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise SchemaError(f"{path}: expected integer age")
    return value


def _optional_age(data: dict[str, Any], key: str, path: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    return _age(value, f"{path}.{key}")


def _string(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise SchemaError(f"{path}: expected string")
    return value


@dataclass(slots=True, frozen=True)
class TaxBracket:
    lower: float
    upper: float | None
    rate: float


@dataclass(slots=True)
class Account:
    name: str
    type: str
    balance: float
    annual_contribution: float = 0.0
    contribution_growth_rate: float = 0.0
    return_rate: float = 0.0
    employer_match_percent: float | None = None
    employer_match_cap: float | None = None
    withdrawal_start_age: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "Account":
        return cls(
            name=_string(_require(data, "name", path), f"{path}.name"),
            type=_string(_require(data, "type", path), f"{path}.type"),
            balance=_number(_require(data, "balance", path), f"{path}.balance"),
            annual_contribution=_optional_number(data, "annual_contribution", path, 0.0),
            contribution_growth_rate=_optional_number(data, "contribution_growth_rate", path, 0.0),
            return_rate=_optional_number(data, "return_rate", path, 0.0),
            employer_match_percent=_optional_number(data, "employer_match_percent", path),
            employer_match_cap=_optional_number(data, "employer_match_cap", path),
            withdrawal_start_age=_optional_age(data, "withdrawal_start_age", path),
        )


@dataclass(slots=True)
class Profile:
    current_age: int
    retirement_age: int
    life_expectancy: int
    region: str | None = None
    filing_status: str = "single"
    regional_tax_rate: float = 0.0
    benefit_amount: float = 0.0
    benefit_start_age: int | None = None
    secondary_benefit_amount: float = 0.0
    secondary_benefit_start_age: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "profile", defaults: "Profile | None" = None) -> "Profile":
        """Parse a profile, filling omitted optional fields from ``defaults``."""
        fallback = defaults or cls(current_age=0, retirement_age=0, life_expectancy=0)
        region = _optional(data, "region", fallback.region)
        if region is not None:
            region = _string(region, f"{path}.region")
        start_age = _optional_age(data, "benefit_start_age", path)
        secondary_start_age = _optional_age(data, "secondary_benefit_start_age", path)
        return cls(
            current_age=_age(_require(data, "current_age", path), f"{path}.current_age"),
            retirement_age=_age(_require(data, "retirement_age", path), f"{path}.retirement_age"),
            life_expectancy=_age(_require(data, "life_expectancy", path), f"{path}.life_expectancy"),
            region=region,
            filing_status=_string(_optional(data, "filing_status", fallback.filing_status), f"{path}.filing_status"),
            regional_tax_rate=_optional_number(data, "regional_tax_rate", path, fallback.regional_tax_rate),
            benefit_amount=_optional_number(data, "benefit_amount", path, fallback.benefit_amount),
            benefit_start_age=start_age if start_age is not None else fallback.benefit_start_age,
            secondary_benefit_amount=_optional_number(
                data, "secondary_benefit_amount", path, fallback.secondary_benefit_amount
            ),
            secondary_benefit_start_age=(
                secondary_start_age if secondary_start_age is not None else fallback.secondary_benefit_start_age
            ),
        )


@dataclass(slots=True)
class Assumptions:
    inflation_rate: float = 0.03
    safe_withdrawal_rate: float = 0.04
    retirement_return_rate: float = 0.05

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "assumptions") -> "Assumptions":
        defaults = cls()
        return cls(
            inflation_rate=_optional_number(data, "inflation_rate", path, defaults.inflation_rate),
            safe_withdrawal_rate=_optional_number(data, "safe_withdrawal_rate", path, defaults.safe_withdrawal_rate),
            retirement_return_rate=_optional_number(
                data, "retirement_return_rate", path, defaults.retirement_return_rate
            ),
        )


@dataclass(slots=True)
class IncomeStream:
    name: str
    monthly_amount: float
    start_age: int
    tax_treatment: str = "fully_taxable"

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "IncomeStream":
        return cls(
            name=_string(_require(data, "name", path), f"{path}.name"),
            monthly_amount=_number(_require(data, "monthly_amount", path), f"{path}.monthly_amount"),
            start_age=_age(_require(data, "start_age", path), f"{path}.start_age"),
            tax_treatment=_string(_optional(data, "tax_treatment", "fully_taxable"), f"{path}.tax_treatment"),
        )


@dataclass(slots=True)
class YearBalances:
    age: int
    year: int
    balances: dict[str, float]
    total: float


@dataclass(slots=True)
class AccumulationResult:
    yearly_balances: list[YearBalances] = field(default_factory=list)
    final_balances: dict[str, float] = field(default_factory=dict)
    total_at_retirement: float = 0.0
    breakdown_by_group: dict[str, float] = field(default_factory=dict)


@dataclass(slots=True)
class Plan:
    country: str
    profile: Profile
    assumptions: Assumptions
    accounts: list[Account] = field(default_factory=list)
    income_streams: list[IncomeStream] = field(default_factory=list)
    start_year: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], profile_defaults: Profile | None = None) -> "Plan":
        country = _string(_require(data, "country", "plan"), "plan.country")
        profile = Profile.from_dict(_expect_dict(_require(data, "profile", "plan"), "profile"), defaults=profile_defaults)
        assumptions = Assumptions.from_dict(_expect_dict(_optional(data, "assumptions", {}), "assumptions"))
        accounts = [
            Account.from_dict(_expect_dict(item, f"accounts[{idx}]"), f"accounts[{idx}]")
            for idx, item in enumerate(_expect_list(_optional(data, "accounts", []), "accounts"))
        ]
        streams = [
            IncomeStream.from_dict(_expect_dict(item, f"income_streams[{idx}]"), f"income_streams[{idx}]")
            for idx, item in enumerate(_expect_list(_optional(data, "income_streams", []), "income_streams"))
        ]
        start_year = _optional(data, "start_year")
        if start_year is not None:
            start_year = _age(start_year, "plan.start_year")
        return cls(
            country=country,
            profile=profile,
            assumptions=assumptions,
            accounts=accounts,
            income_streams=streams,
            start_year=start_year,
        )


def load_plan(path: str | Path, profile_defaults: Any = None) -> Plan:
    """Load plan JSON into strongly-typed dataclasses.

    ``profile_defaults`` may be a Profile or a callable taking the country
    code and returning one (or None), used to fill omitted profile fields.
    """
    source = Path(path)
    raw = json.loads(source.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise SchemaError("plan: root must be a JSON object")
    defaults = profile_defaults
    if callable(profile_defaults):
        defaults = profile_defaults(raw.get("country"))
    return Plan.from_dict(raw, profile_defaults=defaults)
