"""Government retirement benefits and user-defined income streams."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Iterable

from .schema import IncomeStream, Profile

CPP_STANDARD_AGE: Final[int] = 65
CPP_EARLIEST_AGE: Final[int] = 60
CPP_LATEST_AGE: Final[int] = 70
CPP_EARLY_REDUCTION_PER_MONTH: Final[float] = 0.006
CPP_LATE_INCREASE_PER_MONTH: Final[float] = 0.007
CPP_MAX_MONTHLY: Final[float] = 1_364.60

OAS_STANDARD_AGE: Final[int] = 65
OAS_LATEST_AGE: Final[int] = 70
OAS_DEFERRAL_INCREASE_PER_MONTH: Final[float] = 0.006
OAS_AGE_75_INCREASE: Final[float] = 0.10
OAS_MAX_MONTHLY: Final[float] = 713.34
OAS_RECOVERY_THRESHOLD: Final[float] = 90_997.0
OAS_RECOVERY_RATE: Final[float] = 0.15


@dataclass(slots=True, frozen=True)
class BenefitPayment:
    name: str
    age: int
    monthly_amount: float
    annual_amount: float


@dataclass(slots=True)
class IncomeStreamTotals:
    total: float = 0.0
    benefit: float = 0.0
    fully_taxable: float = 0.0
    tax_free: float = 0.0

    def scaled(self, factor: float) -> "IncomeStreamTotals":
        return IncomeStreamTotals(
            total=self.total * factor,
            benefit=self.benefit * factor,
            fully_taxable=self.fully_taxable * factor,
            tax_free=self.tax_free * factor,
        )


def inflation_factor(age: int, current_age: int, inflation_rate: float) -> float:
    """Growth multiplier from today's dollars to the dollars of ``age``."""
    return (1.0 + inflation_rate) ** (age - current_age)


def _payment(name: str, age: int, annual_amount: float) -> BenefitPayment:
    annual = max(0.0, annual_amount)
    return BenefitPayment(name=name, age=age, monthly_amount=annual / 12.0, annual_amount=annual)


def flat_benefit(name: str, annual_amount: float, start_age: int | None, age: int) -> list[BenefitPayment]:
    if start_age is None or annual_amount <= 0 or age < start_age:
        return []
    return [_payment(name, age, annual_amount)]


def us_retirement_benefits(profile: Profile, age: int) -> list[BenefitPayment]:
    return flat_benefit("social_security", profile.benefit_amount, profile.benefit_start_age, age)


def cpp_start_age(requested: int) -> int:
    return min(CPP_LATEST_AGE, max(CPP_EARLIEST_AGE, requested))


def cpp_adjustment(start_age: int) -> float:
    """Multiplier applied to the age-65 CPP amount for an earlier or later start."""
    months = (cpp_start_age(start_age) - CPP_STANDARD_AGE) * 12
    if months < 0:
        return 1.0 + months * CPP_EARLY_REDUCTION_PER_MONTH
    return 1.0 + months * CPP_LATE_INCREASE_PER_MONTH


def oas_start_age(requested: int) -> int:
    return min(OAS_LATEST_AGE, max(OAS_STANDARD_AGE, requested))


def oas_adjustment(start_age: int, age: int) -> float:
    months = (oas_start_age(start_age) - OAS_STANDARD_AGE) * 12
    factor = 1.0 + months * OAS_DEFERRAL_INCREASE_PER_MONTH
    if age >= 75:
        factor *= 1.0 + OAS_AGE_75_INCREASE
    return factor


def oas_recovery_tax(oas_annual: float, net_income: float) -> float:
    """OAS clawback on income above the recovery threshold, capped at the benefit."""
    excess = max(0.0, net_income - OAS_RECOVERY_THRESHOLD)
    return min(oas_annual, excess * OAS_RECOVERY_RATE)


def canadian_retirement_benefits(profile: Profile, age: int, net_income: float) -> list[BenefitPayment]:
    payments: list[BenefitPayment] = []

    if profile.benefit_start_age is not None and profile.benefit_amount > 0:
        start = cpp_start_age(profile.benefit_start_age)
        if age >= start:
            payments.append(_payment("cpp", age, profile.benefit_amount * cpp_adjustment(start)))

    if profile.secondary_benefit_start_age is not None and profile.secondary_benefit_amount > 0:
        start = oas_start_age(profile.secondary_benefit_start_age)
        if age >= start:
            oas = profile.secondary_benefit_amount * oas_adjustment(start, age)
            oas -= oas_recovery_tax(oas, net_income)
            payments.append(_payment("oas", age, oas))

    return payments


def income_stream_totals(streams: Iterable[IncomeStream], age: int) -> IncomeStreamTotals:
    """Sum active streams in today's dollars, bucketed by tax treatment."""
    totals = IncomeStreamTotals()
    for stream in streams:
        if age < stream.start_age:
            continue
        annual = stream.monthly_amount * 12.0
        totals.total += annual
        if stream.tax_treatment == "benefit":
            totals.benefit += annual
        elif stream.tax_treatment == "tax_free":
            totals.tax_free += annual
        else:
            totals.fully_taxable += annual
    return totals
