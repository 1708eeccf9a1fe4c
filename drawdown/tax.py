"""Tax computation helpers for US and Canadian ordinary and capital gains tax."""

from __future__ import annotations

from .schema import TaxBracket
from .tax_data import (
    CA_CAPITAL_GAINS_HIGH_INCLUSION_RATE,
    CA_CAPITAL_GAINS_INCLUSION_RATE,
    CA_CAPITAL_GAINS_INCLUSION_THRESHOLD,
    CA_DEFAULT_PROVINCE,
    CA_FEDERAL_BASIC_PERSONAL_AMOUNT,
    CA_FEDERAL_BRACKETS,
    CA_PROVINCIAL_BASIC_PERSONAL_AMOUNTS,
    CA_PROVINCIAL_BRACKETS,
    US_CAPITAL_GAINS_BRACKETS,
    US_FEDERAL_BRACKETS,
    US_STANDARD_DEDUCTIONS,
)


def to_brackets(table: list[tuple[float | None, float]]) -> list[TaxBracket]:
    """Expand (upper_bound, rate) rows into contiguous brackets starting at zero."""
    brackets: list[TaxBracket] = []
    lower = 0.0
    for upper, rate in table:
        brackets.append(TaxBracket(lower=lower, upper=upper, rate=rate))
        if upper is None:
            break
        lower = upper
    return brackets


def progressive_tax(income: float, brackets: list[TaxBracket]) -> float:
    if income <= 0:
        return 0.0

    tax = 0.0
    for bracket in brackets:
        if income <= bracket.lower:
            break
        width = float("inf") if bracket.upper is None else bracket.upper - bracket.lower
        tax += min(income - bracket.lower, width) * bracket.rate
    return max(0.0, tax)


def taxable_income(gross_income: float, deduction: float) -> float:
    return max(0.0, gross_income - deduction)


def flat_tax(income: float, rate: float) -> float:
    return max(0.0, income) * rate


def stacked_capital_gains_tax(gains: float, ordinary_taxable_income: float, brackets: list[TaxBracket]) -> float:
    """Tax gains stacked on top of ordinary taxable income.

    Low ordinary income leaves room in the 0% bracket that absorbs gains
    before any higher rate applies.
    """
    if gains <= 0:
        return 0.0

    tax = 0.0
    remaining = gains
    for bracket in brackets:
        if remaining <= 0:
            break
        start = max(bracket.lower, ordinary_taxable_income)
        room = remaining if bracket.upper is None else bracket.upper - start
        amount = max(0.0, min(remaining, room))
        tax += amount * bracket.rate
        remaining -= amount
    return tax


def included_capital_gains(
    gains: float,
    inclusion_rate: float = CA_CAPITAL_GAINS_INCLUSION_RATE,
    high_inclusion_rate: float = CA_CAPITAL_GAINS_HIGH_INCLUSION_RATE,
    threshold: float = CA_CAPITAL_GAINS_INCLUSION_THRESHOLD,
) -> float:
    """Return the portion of gains added to income under the inclusion model."""
    if gains <= 0:
        return 0.0
    base = min(gains, threshold)
    excess = max(0.0, gains - threshold)
    return base * inclusion_rate + excess * high_inclusion_rate


def _us_filing_status(filing_status: str | None) -> str:
    if filing_status in US_FEDERAL_BRACKETS:
        return filing_status
    return "single"


def us_standard_deduction(filing_status: str | None) -> float:
    return US_STANDARD_DEDUCTIONS[_us_filing_status(filing_status)]


def us_federal_income_tax(taxable: float, filing_status: str | None) -> float:
    """Ordinary federal tax on income that already has the deduction removed."""
    return progressive_tax(taxable, to_brackets(US_FEDERAL_BRACKETS[_us_filing_status(filing_status)]))


def us_capital_gains_tax(gains: float, ordinary_income: float, filing_status: str | None) -> float:
    status = _us_filing_status(filing_status)
    ordinary_taxable = taxable_income(ordinary_income, us_standard_deduction(status))
    return stacked_capital_gains_tax(gains, ordinary_taxable, to_brackets(US_CAPITAL_GAINS_BRACKETS[status]))


def ca_province(region: str | None) -> str:
    if region and region.upper() in CA_PROVINCIAL_BRACKETS:
        return region.upper()
    return CA_DEFAULT_PROVINCE


def ca_federal_tax(income: float) -> float:
    taxable = taxable_income(income, CA_FEDERAL_BASIC_PERSONAL_AMOUNT)
    return progressive_tax(taxable, to_brackets(CA_FEDERAL_BRACKETS))


def ca_provincial_tax(income: float, region: str | None) -> float:
    province = ca_province(region)
    taxable = taxable_income(income, CA_PROVINCIAL_BASIC_PERSONAL_AMOUNTS[province])
    return progressive_tax(taxable, to_brackets(CA_PROVINCIAL_BRACKETS[province]))


def ca_total_tax(ordinary_income: float, capital_gains: float, region: str | None) -> float:
    income = max(0.0, ordinary_income) + included_capital_gains(capital_gains)
    return ca_federal_tax(income) + ca_provincial_tax(income, region)


def ca_capital_gains_tax(gains: float, ordinary_income: float, region: str | None) -> float:
    """Federal plus provincial tax added by including gains on top of ordinary income."""
    if gains <= 0:
        return 0.0
    return max(0.0, ca_total_tax(ordinary_income, gains, region) - ca_total_tax(ordinary_income, 0.0, region))


def ca_provincial_capital_gains_tax(gains: float, ordinary_income: float, region: str | None) -> float:
    """Provincial part of :func:`ca_capital_gains_tax`."""
    if gains <= 0:
        return 0.0
    base = max(0.0, ordinary_income)
    with_gains = base + included_capital_gains(gains)
    return max(0.0, ca_provincial_tax(with_gains, region) - ca_provincial_tax(base, region))
