"""Early withdrawal penalty scoring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .policy import CountryPolicy


@dataclass(slots=True, frozen=True)
class AccountWithdrawal:
    account: str
    account_type: str
    amount: float


@dataclass(slots=True, frozen=True)
class EarlyWithdrawalPenalty:
    account: str
    amount: float


def calculate_penalties(
    withdrawals: Iterable[AccountWithdrawal],
    age: float,
    policy: CountryPolicy,
) -> list[EarlyWithdrawalPenalty]:
    """Return one penalty per withdrawal taken before the policy's penalty age."""
    penalties: list[EarlyWithdrawalPenalty] = []
    for withdrawal in withdrawals:
        info = policy.penalty_info(withdrawal.account_type)
        if not info.applies_to_account_type or age >= info.penalty_age:
            continue
        amount = policy.early_withdrawal_penalty(withdrawal.amount, withdrawal.account_type, age)
        if amount > 0:
            penalties.append(EarlyWithdrawalPenalty(account=withdrawal.account, amount=amount))
    return penalties


def total_penalties(penalties: Iterable[EarlyWithdrawalPenalty]) -> float:
    return sum(p.amount for p in penalties)
