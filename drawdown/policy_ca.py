"""Canadian policy: federal and provincial brackets, CPP/OAS and RRIF minimums."""

from __future__ import annotations

from typing import Final

from .benefits import CPP_MAX_MONTHLY, OAS_MAX_MONTHLY, BenefitPayment, canadian_retirement_benefits
from .policy import (
    AccountGroup,
    AccountTypeInfo,
    ContributionLimit,
    ConversionRule,
    CountryPolicy,
    PenaltyInfo,
    Region,
)
from .rmd import RRIF_START_AGE, compute_rrif_minimum
from .schema import Profile
from .tax import (
    ca_capital_gains_tax,
    ca_federal_tax,
    ca_provincial_capital_gains_tax,
    ca_provincial_tax,
    included_capital_gains,
)
from .tax_data import CA_DEFAULT_PROVINCE, CA_FEDERAL_BASIC_PERSONAL_AMOUNT, CA_FEDERAL_BRACKETS, CA_PROVINCE_NAMES

CA_ACCOUNT_TYPES: Final[list[AccountTypeInfo]] = [
    AccountTypeInfo("rrsp", "RRSP", "pretax", "Registered Retirement Savings Plan"),
    AccountTypeInfo("tfsa", "TFSA", "roth", "Tax-Free Savings Account"),
    AccountTypeInfo("rrif", "RRIF", "pretax", "Registered Retirement Income Fund"),
    AccountTypeInfo("lira", "LIRA", "pretax", "Locked-In Retirement Account"),
    AccountTypeInfo("lif", "LIF", "pretax", "Life Income Fund"),
    # Qualifying FHSA withdrawals are tax-free.
    AccountTypeInfo("fhsa", "FHSA", "roth", "First Home Savings Account"),
    AccountTypeInfo("non_registered", "Non-Registered", "taxable", "Taxable account with capital gains inclusion"),
    AccountTypeInfo("employer_rrsp", "Employer RRSP", "pretax", "Group RRSP with employer matching"),
]

TRADITIONAL_TYPES: Final[set[str]] = {"rrsp", "rrif", "lira", "lif", "employer_rrsp"}

CA_WITHDRAWAL_ORDER: Final[list[str]] = [
    "rrif",
    "rrsp",
    "non_registered",
    "lif",
    "lira",
    "fhsa",
    "employer_rrsp",
    "tfsa",
]

CA_ACCOUNT_GROUPS: Final[list[AccountGroup]] = [
    AccountGroup("rrsp_rrif", "RRSP/RRIF", ("rrsp", "rrif", "employer_rrsp"), "RRSP converts to RRIF at 71"),
    AccountGroup("tfsa", "TFSA", ("tfsa",), "Tax-free growth and withdrawals"),
    AccountGroup("lira_lif", "LIRA/LIF", ("lira", "lif"), "Locked-in pension transfers"),
    AccountGroup("fhsa", "FHSA", ("fhsa",), "First Home Savings Account"),
    AccountGroup("non_registered", "Non-Registered", ("non_registered",), "Taxable investment accounts"),
]

RRSP_CONTRIBUTION_RATE: Final[float] = 0.18
RRSP_CONTRIBUTION_MAX: Final[float] = 31_560.0

CA_CONTRIBUTION_LIMITS: Final[dict[str, ContributionLimit]] = {
    "rrsp": ContributionLimit(annual=RRSP_CONTRIBUTION_MAX, percentage_of_income=RRSP_CONTRIBUTION_RATE),
    "employer_rrsp": ContributionLimit(annual=RRSP_CONTRIBUTION_MAX, percentage_of_income=RRSP_CONTRIBUTION_RATE),
    "tfsa": ContributionLimit(annual=7_000.0),
    "fhsa": ContributionLimit(annual=8_000.0, lifetime=40_000.0),
}


class CanadaPolicy(CountryPolicy):
    code = "CA"
    name = "Canada"
    currency = "CAD"
    minimum_withdrawal_age = RRIF_START_AGE

    def federal_tax(self, income: float, filing_status: str | None = None) -> float:
        return ca_federal_tax(income)

    def regional_tax(self, income: float, region: str | None) -> float:
        return ca_provincial_tax(income, region)

    def capital_gains_tax(
        self,
        gains: float,
        ordinary_income: float,
        region: str | None,
        filing_status: str | None = None,
    ) -> float:
        return ca_capital_gains_tax(gains, ordinary_income, region)

    def regional_capital_gains_tax(
        self,
        gains: float,
        ordinary_income: float,
        region: str | None,
        filing_status: str | None = None,
    ) -> float:
        return ca_provincial_capital_gains_tax(gains, ordinary_income, region)

    def net_income(self, ordinary_income: float, capital_gains: float) -> float:
        return max(0.0, ordinary_income) + included_capital_gains(capital_gains)

    def retirement_benefits(self, profile: Profile, age: int, net_income: float) -> list[BenefitPayment]:
        return canadian_retirement_benefits(profile, age, net_income)

    def minimum_withdrawal(self, age: int, balance: float, account_type: str) -> float:
        # RRSPs and LIRAs are assumed converted to RRIF/LIF by the conversion age.
        if account_type not in TRADITIONAL_TYPES:
            return 0.0
        return compute_rrif_minimum(balance, age)

    def is_traditional_account(self, account_type: str) -> bool:
        return account_type in TRADITIONAL_TYPES

    def penalty_info(self, account_type: str) -> PenaltyInfo:
        return PenaltyInfo(penalty_age=0.0, penalty_rate=0.0, applies_to_account_type=False)

    def early_withdrawal_penalty(self, amount: float, account_type: str, age: float) -> float:
        return 0.0

    def withdrawal_order(self) -> list[str]:
        return list(CA_WITHDRAWAL_ORDER)

    def account_types(self) -> list[AccountTypeInfo]:
        return list(CA_ACCOUNT_TYPES)

    def deduction(self, filing_status: str | None = None) -> float:
        return CA_FEDERAL_BASIC_PERSONAL_AMOUNT

    def bracket_fill_ceiling(self, filing_status: str | None = None) -> float:
        return self.deduction() + CA_FEDERAL_BRACKETS[1][0]

    def default_profile(self) -> Profile:
        return Profile(
            current_age=35,
            retirement_age=65,
            life_expectancy=90,
            region=CA_DEFAULT_PROVINCE,
            benefit_amount=round(CPP_MAX_MONTHLY * 12, 2),
            benefit_start_age=65,
            secondary_benefit_amount=round(OAS_MAX_MONTHLY * 12, 2),
            secondary_benefit_start_age=65,
        )

    def contribution_limits(self) -> dict[str, ContributionLimit]:
        return dict(CA_CONTRIBUTION_LIMITS)

    def account_groups(self) -> list[AccountGroup]:
        return list(CA_ACCOUNT_GROUPS)

    def regions(self) -> list[Region]:
        return [Region(code=code, name=name) for code, name in sorted(CA_PROVINCE_NAMES.items())]

    def mandatory_conversions(self) -> list[ConversionRule]:
        return [
            ConversionRule(
                from_account_type="rrsp",
                to_account_type="rrif",
                trigger_age=RRIF_START_AGE,
                description="RRSP must be converted to a RRIF by the end of the year you turn 71",
            ),
            ConversionRule(
                from_account_type="lira",
                to_account_type="lif",
                trigger_age=RRIF_START_AGE,
                description="LIRA must be converted to a LIF by the end of the year you turn 71",
            ),
        ]

    def supports_employer_match(self, account_type: str) -> bool:
        return account_type == "employer_rrsp"
