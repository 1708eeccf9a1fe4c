import copy
import json
from pathlib import Path

from drawdown.schema import Account, Assumptions, Profile


def write_plan(tmp_path: Path, data: dict, filename: str = "plan.json") -> Path:
    path = tmp_path / filename
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def clone_plan(data: dict) -> dict:
    return copy.deepcopy(data)


def make_account(name: str, type: str, balance: float = 0.0, **overrides) -> Account:
    return Account(name=name, type=type, balance=balance, **overrides)


def make_profile(**overrides) -> Profile:
    values = {
        "current_age": 60,
        "retirement_age": 65,
        "life_expectancy": 90,
        "filing_status": "married_filing_jointly",
        "regional_tax_rate": 0.0,
    }
    values.update(overrides)
    return Profile(**values)


def make_assumptions(**overrides) -> Assumptions:
    values = {"inflation_rate": 0.0, "safe_withdrawal_rate": 0.04, "retirement_return_rate": 0.0}
    values.update(overrides)
    return Assumptions(**values)
