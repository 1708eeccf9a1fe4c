"""Pre-retirement balance projection."""

from __future__ import annotations

import logging

from .policy import CountryPolicy
from .schema import Account, AccumulationResult, Profile, YearBalances

logger = logging.getLogger(__name__)


def employer_match(account: Account, contribution: float, policy: CountryPolicy) -> float:
    if not account.employer_match_percent or not policy.supports_employer_match(account.type):
        return 0.0
    match = contribution * account.employer_match_percent
    if account.employer_match_cap is not None:
        match = min(match, account.employer_match_cap)
    return max(0.0, match)


def project_accumulation(
    accounts: list[Account],
    profile: Profile,
    policy: CountryPolicy,
    start_year: int,
) -> AccumulationResult:
    """Compound each account from today to the retirement age.

    Each year the balance grows at the account's return rate, then that
    year's contribution and employer match are added. Contributions grow by
    ``contribution_growth_rate`` after every year.
    """
    if not accounts:
        return AccumulationResult()

    years = max(0, profile.retirement_age - profile.current_age)
    balances = {account.name: max(0.0, account.balance) for account in accounts}
    yearly = [
        YearBalances(
            age=profile.current_age,
            year=start_year,
            balances=dict(balances),
            total=sum(balances.values()),
        )
    ]

    for offset in range(1, years + 1):
        for account in accounts:
            contribution = account.annual_contribution * (1.0 + account.contribution_growth_rate) ** (offset - 1)
            match = employer_match(account, contribution, policy)
            balances[account.name] = balances[account.name] * (1.0 + account.return_rate) + contribution + match
        yearly.append(
            YearBalances(
                age=profile.current_age + offset,
                year=start_year + offset,
                balances=dict(balances),
                total=sum(balances.values()),
            )
        )

    breakdown = {group.id: 0.0 for group in policy.account_groups()}
    for account in accounts:
        group_id = policy.group_for(account.type)
        if group_id is not None:
            breakdown[group_id] += balances[account.name]

    total = sum(balances.values())
    logger.debug("projected %d accounts over %d years to %.2f", len(accounts), years, total)
    return AccumulationResult(
        yearly_balances=yearly,
        final_balances=dict(balances),
        total_at_retirement=total,
        breakdown_by_group=breakdown,
    )
