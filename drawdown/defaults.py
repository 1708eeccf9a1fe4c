"""Withdrawal-start age defaults, resolved once before a simulation runs."""

from __future__ import annotations

from dataclasses import replace
import math

from .policy import CountryPolicy
from .schema import Account


def _minimum_withdrawal_age(account: Account, policy: CountryPolicy) -> int | None:
    if policy.has_minimum_withdrawal(account.type):
        return policy.minimum_withdrawal_age
    return None


def default_withdrawal_age(account: Account, retirement_age: int, policy: CountryPolicy) -> int:
    """Penalty-free age for penalized types, else retirement; capped at the minimum-withdrawal age."""
    info = policy.penalty_info(account.type)
    start = math.ceil(info.penalty_age) if info.applies_to_account_type else retirement_age
    rmd_age = _minimum_withdrawal_age(account, policy)
    return min(start, rmd_age) if rmd_age is not None else start


def max_withdrawal_age(account: Account, life_expectancy: int, policy: CountryPolicy) -> int:
    """Latest allowed start age; accounts with minimums cannot start after they begin."""
    rmd_age = _minimum_withdrawal_age(account, policy)
    return rmd_age if rmd_age is not None else life_expectancy


def normalize_accounts(
    accounts: list[Account],
    retirement_age: int,
    life_expectancy: int,
    policy: CountryPolicy,
) -> list[Account]:
    """Return copies with ``withdrawal_start_age`` filled in and clamped."""
    normalized: list[Account] = []
    for account in accounts:
        latest = max_withdrawal_age(account, life_expectancy, policy)
        start = account.withdrawal_start_age
        if start is None:
            start = default_withdrawal_age(account, retirement_age, policy)
        normalized.append(replace(account, withdrawal_start_age=min(start, latest)))
    return normalized
