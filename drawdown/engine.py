"""Year-by-year retirement drawdown simulation."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Iterable

from .benefits import income_stream_totals, inflation_factor
from .defaults import normalize_accounts
from .penalties import AccountWithdrawal, EarlyWithdrawalPenalty, calculate_penalties, total_penalties
from .policy import CountryPolicy
from .schema import Account, AccumulationResult, Assumptions, IncomeStream, Profile
from .tax import flat_tax
from .tax_data import BENEFIT_TAXABLE_FRACTION
from .withdrawals import allocate_withdrawals, build_working_states

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class YearlyWithdrawal:
    age: int
    year: int
    withdrawals: dict[str, float]
    remaining_balances: dict[str, float]
    realized_gains: dict[str, float]
    total_withdrawal: float
    benefit_income: float
    income_stream_income: float
    taxable_stream_income: float
    tax_free_income: float
    gross_income: float
    ordinary_income: float
    capital_gains: float
    # Already included in federal_tax and regional_tax.
    capital_gains_tax: float
    federal_tax: float
    regional_tax: float
    total_tax: float
    after_tax_income: float
    target_spending: float
    rmd_amount: float
    total_remaining_balance: float
    penalties: tuple[EarlyWithdrawalPenalty, ...] = ()
    total_penalties: float = 0.0


@dataclass(slots=True)
class RetirementResult:
    yearly_withdrawals: list[YearlyWithdrawal] = field(default_factory=list)
    portfolio_depletion_age: int | None = None
    lifetime_taxes_paid: float = 0.0
    sustainable_monthly_withdrawal: float = 0.0
    sustainable_annual_withdrawal: float = 0.0
    account_depletion_ages: dict[str, int | None] = field(default_factory=dict)


def simulate_retirement(
    accounts: list[Account],
    profile: Profile,
    assumptions: Assumptions,
    policy: CountryPolicy,
    accumulation: AccumulationResult,
    income_streams: Iterable[IncomeStream] = (),
    *,
    start_year: int,
) -> RetirementResult:
    """Simulate withdrawals from the retirement age through life expectancy.

    ``start_year`` is the calendar year at ``profile.current_age``. Working
    balances are seeded from ``accumulation.final_balances`` and discarded
    when the call returns.
    """
    streams = list(income_streams)
    normalized = normalize_accounts(accounts, profile.retirement_age, profile.life_expectancy, policy)
    states = build_working_states(normalized, accumulation.final_balances, policy)

    retirement_start_year = start_year + (profile.retirement_age - profile.current_age)
    sustainable_annual = accumulation.total_at_retirement * assumptions.safe_withdrawal_rate
    target_spending = sustainable_annual
    growth = max(0.0, 1.0 + assumptions.retirement_return_rate)
    bracket_ceiling = policy.bracket_fill_ceiling(profile.filing_status)

    yearly: list[YearlyWithdrawal] = []
    lifetime_taxes = 0.0
    portfolio_depletion_age: int | None = None
    depletion_ages: dict[str, int | None] = {state.name: None for state in states}
    prior_net_income_today = 0.0

    for offset in range(profile.life_expectancy - profile.retirement_age + 1):
        age = profile.retirement_age + offset
        year = retirement_start_year + offset

        # Step 1: depletion check on balances entering the year
        if sum(state.balance for state in states) <= 0 and portfolio_depletion_age is None:
            portfolio_depletion_age = age
            logger.info("portfolio depleted at age %d", age)
        for state in states:
            if state.balance <= 0 and depletion_ages[state.name] is None:
                depletion_ages[state.name] = age

        # Step 2: benefits and income streams, inflated from today
        factor = inflation_factor(age, profile.current_age, assumptions.inflation_rate)
        payments = policy.retirement_benefits(profile, age, prior_net_income_today)
        benefit_income = sum(p.annual_amount for p in payments) * factor
        stream_totals = income_stream_totals(streams, age).scaled(factor)
        non_portfolio_income = benefit_income + stream_totals.total

        # Step 3: per-account minimum withdrawals
        rmd_amount = sum(
            policy.minimum_withdrawal(age, state.balance, state.type)
            for state in states
            if policy.is_traditional_account(state.type)
        )

        # Step 4: taxable share of non-portfolio income
        non_portfolio_taxable = (
            benefit_income + stream_totals.benefit
        ) * BENEFIT_TAXABLE_FRACTION + stream_totals.fully_taxable

        # Step 5: allocation
        allocation = allocate_withdrawals(
            states=states,
            age=age,
            target_spending=target_spending,
            rmd_amount=rmd_amount,
            non_portfolio_income=non_portfolio_income,
            non_portfolio_taxable_income=non_portfolio_taxable,
            bracket_fill_ceiling=bracket_ceiling,
            depletion_ages=depletion_ages,
        )

        # Step 6: penalties
        penalties = calculate_penalties(
            (AccountWithdrawal(e.account, e.account_type, e.amount) for e in allocation.events),
            age,
            policy,
        )
        penalty_total = total_penalties(penalties)

        # Step 7: growth after withdrawals
        for state in states:
            state.balance *= growth

        # Step 8: taxes
        ordinary_income = allocation.traditional + non_portfolio_taxable
        capital_gains = allocation.taxable_gains
        capital_gains_tax = policy.capital_gains_tax(
            capital_gains, ordinary_income, profile.region, profile.filing_status
        )
        regional_gains_tax = policy.regional_capital_gains_tax(
            capital_gains, ordinary_income, profile.region, profile.filing_status
        )
        federal_tax = policy.federal_tax(ordinary_income, profile.filing_status) + (
            capital_gains_tax - regional_gains_tax
        )
        regional_tax = policy.regional_tax(ordinary_income, profile.region) + regional_gains_tax
        if policy.applies_flat_regional_rate:
            regional_tax += flat_tax(
                ordinary_income + capital_gains - policy.deduction(profile.filing_status),
                profile.regional_tax_rate,
            )
        total_tax = federal_tax + regional_tax + penalty_total
        lifetime_taxes += total_tax

        gross_income = allocation.total + non_portfolio_income
        remaining = {state.name: state.balance for state in states}
        realized_gains: dict[str, float] = {}
        for event in allocation.events:
            logger.debug("age %d %s: %.2f from %s", age, event.step, event.amount, event.account)
            if event.realized_gain > 0:
                realized_gains[event.account] = realized_gains.get(event.account, 0.0) + event.realized_gain

        # Step 9: emit and inflate spending
        yearly.append(
            YearlyWithdrawal(
                age=age,
                year=year,
                withdrawals=dict(allocation.by_account),
                remaining_balances=remaining,
                realized_gains=realized_gains,
                total_withdrawal=allocation.total,
                benefit_income=benefit_income,
                income_stream_income=stream_totals.total,
                taxable_stream_income=stream_totals.benefit + stream_totals.fully_taxable,
                tax_free_income=stream_totals.tax_free,
                gross_income=gross_income,
                ordinary_income=ordinary_income,
                capital_gains=capital_gains,
                capital_gains_tax=capital_gains_tax,
                federal_tax=federal_tax,
                regional_tax=regional_tax,
                total_tax=total_tax,
                after_tax_income=gross_income - total_tax,
                target_spending=target_spending,
                rmd_amount=rmd_amount,
                total_remaining_balance=sum(remaining.values()),
                penalties=tuple(penalties),
                total_penalties=penalty_total,
            )
        )
        logger.debug(
            "age %d: withdrew %.2f of target %.2f, tax %.2f",
            age,
            allocation.total,
            target_spending,
            total_tax,
        )

        net_income = policy.net_income(ordinary_income, capital_gains)
        prior_net_income_today = net_income / factor if factor > 0 else 0.0
        target_spending *= 1.0 + assumptions.inflation_rate

    return RetirementResult(
        yearly_withdrawals=yearly,
        portfolio_depletion_age=portfolio_depletion_age,
        lifetime_taxes_paid=lifetime_taxes,
        sustainable_monthly_withdrawal=sustainable_annual / 12.0,
        sustainable_annual_withdrawal=sustainable_annual,
        account_depletion_ages=depletion_ages,
    )
