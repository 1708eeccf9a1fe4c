"""Country policy interface shared by every supported tax jurisdiction.

The withdrawal simulator only talks to a :class:`CountryPolicy`; anything
that differs between jurisdictions (tax math, benefits, minimum
withdrawals, penalties, account classification) lives behind it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from .benefits import BenefitPayment
from .schema import Profile


@dataclass(slots=True, frozen=True)
class PenaltyInfo:
    penalty_age: float
    penalty_rate: float
    applies_to_account_type: bool


@dataclass(slots=True, frozen=True)
class AccountTypeInfo:
    type: str
    label: str
    tax_treatment: str
    description: str


@dataclass(slots=True, frozen=True)
class AccountGroup:
    id: str
    label: str
    account_types: tuple[str, ...]
    description: str = ""


@dataclass(slots=True, frozen=True)
class ConversionRule:
    from_account_type: str
    to_account_type: str
    trigger_age: int
    description: str


@dataclass(slots=True, frozen=True)
class ContributionLimit:
    annual: float | None
    percentage_of_income: float | None = None
    lifetime: float | None = None


@dataclass(slots=True, frozen=True)
class Region:
    code: str
    name: str


class CountryPolicy(ABC):
    code: str
    name: str
    currency: str
    # First age at which traditional accounts owe a minimum withdrawal.
    minimum_withdrawal_age: int
    # The caller adds profile.regional_tax_rate on top of regional_tax().
    applies_flat_regional_rate: bool = False

    @abstractmethod
    def federal_tax(self, income: float, filing_status: str | None = None) -> float:
        """Ordinary federal tax on gross ordinary income."""

    @abstractmethod
    def regional_tax(self, income: float, region: str | None) -> float:
        """State or provincial tax on gross ordinary income."""

    @abstractmethod
    def capital_gains_tax(
        self,
        gains: float,
        ordinary_income: float,
        region: str | None,
        filing_status: str | None = None,
    ) -> float:
        """Tax attributable to realized gains given the year's ordinary income."""

    @abstractmethod
    def retirement_benefits(self, profile: Profile, age: int, net_income: float) -> list[BenefitPayment]:
        """Government benefits payable at ``age`` in today's dollars.

        ``net_income`` is the prior year's taxable income in today's dollars,
        for income-tested benefits.
        """

    @abstractmethod
    def minimum_withdrawal(self, age: int, balance: float, account_type: str) -> float:
        """Mandatory withdrawal for one account; 0 when none is due."""

    @abstractmethod
    def is_traditional_account(self, account_type: str) -> bool: ...

    @abstractmethod
    def penalty_info(self, account_type: str) -> PenaltyInfo: ...

    @abstractmethod
    def withdrawal_order(self) -> list[str]: ...

    @abstractmethod
    def account_types(self) -> list[AccountTypeInfo]: ...

    @abstractmethod
    def deduction(self, filing_status: str | None = None) -> float:
        """Standard deduction or basic personal amount."""

    @abstractmethod
    def bracket_fill_ceiling(self, filing_status: str | None = None) -> float:
        """Gross ordinary income that exactly fills the second-lowest bracket."""

    @abstractmethod
    def default_profile(self) -> Profile: ...

    @abstractmethod
    def contribution_limits(self) -> dict[str, ContributionLimit]: ...

    @abstractmethod
    def account_groups(self) -> list[AccountGroup]: ...

    def early_withdrawal_penalty(self, amount: float, account_type: str, age: float) -> float:
        info = self.penalty_info(account_type)
        if not info.applies_to_account_type or age >= info.penalty_age or amount <= 0:
            return 0.0
        return amount * info.penalty_rate

    def regional_capital_gains_tax(
        self,
        gains: float,
        ordinary_income: float,
        region: str | None,
        filing_status: str | None = None,
    ) -> float:
        """Share of ``capital_gains_tax`` owed to the region rather than federally."""
        return 0.0

    def net_income(self, ordinary_income: float, capital_gains: float) -> float:
        """Income counted by income-tested benefits."""
        return max(0.0, ordinary_income) + max(0.0, capital_gains)

    def regions(self) -> list[Region]:
        return []

    def filing_statuses(self) -> set[str]:
        return {"single"}

    def mandatory_conversions(self) -> list[ConversionRule]:
        return []

    def supports_employer_match(self, account_type: str) -> bool:
        return False

    def account_type_codes(self) -> set[str]:
        return {info.type for info in self.account_types()}

    def account_type_label(self, account_type: str) -> str:
        for info in self.account_types():
            if info.type == account_type:
                return info.label
        return account_type

    def tax_treatment(self, account_type: str) -> str:
        for info in self.account_types():
            if info.type == account_type:
                return info.tax_treatment
        return "pretax" if self.is_traditional_account(account_type) else "taxable"

    def has_minimum_withdrawal(self, account_type: str) -> bool:
        """True when the account type owes minimums once the policy's age is reached."""
        if not self.is_traditional_account(account_type):
            return False
        return self.minimum_withdrawal(self.minimum_withdrawal_age, 100_000.0, account_type) > 0

    def group_for(self, account_type: str) -> str | None:
        for group in self.account_groups():
            if account_type in group.account_types:
                return group.id
        return None
