"""United States policy: federal brackets, flat state rate, RMDs and the 59.5 rule."""

from __future__ import annotations

from typing import Final

from .benefits import BenefitPayment, us_retirement_benefits
from .policy import AccountGroup, AccountTypeInfo, ContributionLimit, CountryPolicy, PenaltyInfo
from .rmd import RMD_START_AGE, compute_rmd_amount
from .schema import Profile
from .tax import (
    taxable_income,
    us_capital_gains_tax,
    us_federal_income_tax,
    us_standard_deduction,
)
from .tax_data import US_FEDERAL_BRACKETS, US_FILING_STATUSES

PENALTY_AGE: Final[float] = 59.5
PENALTY_RATE: Final[float] = 0.10

US_ACCOUNT_TYPES: Final[list[AccountTypeInfo]] = [
    AccountTypeInfo("traditional_401k", "Traditional 401(k)", "pretax", "Employer plan with pre-tax contributions"),
    AccountTypeInfo("roth_401k", "Roth 401(k)", "roth", "Employer plan with after-tax contributions"),
    AccountTypeInfo("traditional_ira", "Traditional IRA", "pretax", "Individual account with pre-tax contributions"),
    AccountTypeInfo("roth_ira", "Roth IRA", "roth", "Individual account with tax-free qualified withdrawals"),
    AccountTypeInfo("taxable", "Taxable Brokerage", "taxable", "Regular brokerage account taxed on realized gains"),
    AccountTypeInfo("hsa", "HSA", "hsa", "Health savings account, tax-free for medical expenses"),
]

TRADITIONAL_TYPES: Final[set[str]] = {"traditional_401k", "traditional_ira"}
EMPLOYER_MATCH_TYPES: Final[set[str]] = {"traditional_401k", "roth_401k"}

US_WITHDRAWAL_ORDER: Final[list[str]] = [
    "traditional_401k",
    "traditional_ira",
    "taxable",
    "roth_401k",
    "roth_ira",
    "hsa",
]

US_ACCOUNT_GROUPS: Final[list[AccountGroup]] = [
    AccountGroup("traditional", "Traditional", ("traditional_401k", "traditional_ira"), "Tax-deferred accounts"),
    AccountGroup("roth", "Roth", ("roth_401k", "roth_ira"), "Tax-free qualified withdrawals"),
    AccountGroup("taxable", "Taxable", ("taxable",), "Capital gains on withdrawal"),
    AccountGroup("hsa", "HSA", ("hsa",), "Tax-free for medical expenses"),
]

US_CONTRIBUTION_LIMITS: Final[dict[str, ContributionLimit]] = {
    "traditional_401k": ContributionLimit(annual=23_000.0),
    "roth_401k": ContributionLimit(annual=23_000.0),
    "traditional_ira": ContributionLimit(annual=7_000.0),
    "roth_ira": ContributionLimit(annual=7_000.0),
    "hsa": ContributionLimit(annual=4_150.0),
}


class UnitedStatesPolicy(CountryPolicy):
    code = "US"
    name = "United States"
    currency = "USD"
    minimum_withdrawal_age = RMD_START_AGE
    applies_flat_regional_rate = True

    def federal_tax(self, income: float, filing_status: str | None = None) -> float:
        return us_federal_income_tax(taxable_income(income, self.deduction(filing_status)), filing_status)

    def regional_tax(self, income: float, region: str | None) -> float:
        # State tax is a flat profile rate applied by the caller.
        return 0.0

    def capital_gains_tax(
        self,
        gains: float,
        ordinary_income: float,
        region: str | None,
        filing_status: str | None = None,
    ) -> float:
        return us_capital_gains_tax(gains, ordinary_income, filing_status)

    def retirement_benefits(self, profile: Profile, age: int, net_income: float) -> list[BenefitPayment]:
        return us_retirement_benefits(profile, age)

    def minimum_withdrawal(self, age: int, balance: float, account_type: str) -> float:
        if account_type not in TRADITIONAL_TYPES:
            return 0.0
        return compute_rmd_amount(balance, age)

    def is_traditional_account(self, account_type: str) -> bool:
        return account_type in TRADITIONAL_TYPES

    def penalty_info(self, account_type: str) -> PenaltyInfo:
        return PenaltyInfo(
            penalty_age=PENALTY_AGE,
            penalty_rate=PENALTY_RATE,
            applies_to_account_type=account_type in TRADITIONAL_TYPES,
        )

    def withdrawal_order(self) -> list[str]:
        return list(US_WITHDRAWAL_ORDER)

    def account_types(self) -> list[AccountTypeInfo]:
        return list(US_ACCOUNT_TYPES)

    def deduction(self, filing_status: str | None = None) -> float:
        return us_standard_deduction(filing_status)

    def bracket_fill_ceiling(self, filing_status: str | None = None) -> float:
        status = filing_status if filing_status in US_FEDERAL_BRACKETS else "single"
        second_bracket_top = US_FEDERAL_BRACKETS[status][1][0]
        return self.deduction(status) + second_bracket_top

    def default_profile(self) -> Profile:
        return Profile(
            current_age=35,
            retirement_age=65,
            life_expectancy=90,
            filing_status="married_filing_jointly",
            regional_tax_rate=0.05,
            benefit_amount=0.0,
            benefit_start_age=67,
        )

    def contribution_limits(self) -> dict[str, ContributionLimit]:
        return dict(US_CONTRIBUTION_LIMITS)

    def account_groups(self) -> list[AccountGroup]:
        return list(US_ACCOUNT_GROUPS)

    def filing_statuses(self) -> set[str]:
        return set(US_FILING_STATUSES)

    def supports_employer_match(self, account_type: str) -> bool:
        return account_type in EMPLOYER_MATCH_TYPES
