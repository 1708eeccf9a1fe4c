"""Tax-aware allocation of a year's spending need across accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging

from .cost_basis import CostBasisTracker
from .policy import CountryPolicy
from .schema import Account

logger = logging.getLogger(__name__)

# Allocation buckets, in the order early-access fallback drains them.
TRADITIONAL = "traditional"
TAX_FREE = "tax_free"
TAXABLE = "taxable"
MEDICAL = "medical"
BUCKET_ORDER = (TRADITIONAL, TAX_FREE, TAXABLE, MEDICAL)

_TREATMENT_BUCKETS = {"pretax": TRADITIONAL, "roth": TAX_FREE, "taxable": TAXABLE, "hsa": MEDICAL}


@dataclass(slots=True)
class AccountWorkingState:
    name: str
    type: str
    bucket: str
    balance: float
    withdrawal_start_age: int
    cost_basis: CostBasisTracker = field(default_factory=CostBasisTracker)

    def available_at(self, age: int) -> bool:
        return age >= self.withdrawal_start_age


@dataclass(slots=True)
class WithdrawalEvent:
    account: str
    account_type: str
    amount: float
    realized_gain: float
    step: str


@dataclass(slots=True)
class AllocationResult:
    by_account: dict[str, float]
    events: list[WithdrawalEvent] = field(default_factory=list)
    total: float = 0.0
    traditional: float = 0.0
    tax_free: float = 0.0
    taxable: float = 0.0
    taxable_gains: float = 0.0
    medical: float = 0.0
    unmet_need: float = 0.0


def account_bucket(account_type: str, policy: CountryPolicy) -> str:
    if policy.is_traditional_account(account_type):
        return TRADITIONAL
    return _TREATMENT_BUCKETS.get(policy.tax_treatment(account_type), TAXABLE)


def build_working_states(
    accounts: list[Account],
    final_balances: dict[str, float],
    policy: CountryPolicy,
) -> list[AccountWorkingState]:
    """Seed fresh per-run state from normalized accounts and retirement balances."""
    states: list[AccountWorkingState] = []
    for account in accounts:
        balance = max(0.0, final_balances.get(account.name, 0.0))
        bucket = account_bucket(account.type, policy)
        states.append(
            AccountWorkingState(
                name=account.name,
                type=account.type,
                bucket=bucket,
                balance=balance,
                withdrawal_start_age=account.withdrawal_start_age or 0,
                cost_basis=CostBasisTracker.estimated(balance) if bucket == TAXABLE else CostBasisTracker(),
            )
        )
    return states


def _withdraw_from_accounts(
    *,
    amount: float,
    states: list[AccountWorkingState],
    result: AllocationResult,
    age: int,
    depletion_ages: dict[str, int | None],
    step: str,
) -> float:
    """Withdraw up to ``amount`` from states in order. Returns the amount withdrawn."""
    withdrawn = 0.0
    for state in states:
        remaining = amount - withdrawn
        if remaining <= 0:
            break
        if state.balance <= 0:
            continue

        take = min(state.balance, remaining)
        balance_before = state.balance
        state.balance -= take

        gain = 0.0
        if state.bucket == TAXABLE:
            gain = state.cost_basis.withdraw(take, balance_before)
            result.taxable_gains += gain

        result.by_account[state.name] = result.by_account.get(state.name, 0.0) + take
        result.events.append(
            WithdrawalEvent(account=state.name, account_type=state.type, amount=take, realized_gain=gain, step=step)
        )
        result.total += take
        if state.bucket == TRADITIONAL:
            result.traditional += take
        elif state.bucket == TAX_FREE:
            result.tax_free += take
        elif state.bucket == TAXABLE:
            result.taxable += take
        else:
            result.medical += take
        withdrawn += take

        if state.balance <= 0 and depletion_ages.get(state.name) is None:
            depletion_ages[state.name] = age
            logger.info("account '%s' depleted at age %d", state.name, age)

    return withdrawn


def allocate_withdrawals(
    *,
    states: list[AccountWorkingState],
    age: int,
    target_spending: float,
    rmd_amount: float,
    non_portfolio_income: float,
    non_portfolio_taxable_income: float,
    bracket_fill_ceiling: float,
    depletion_ages: dict[str, int | None],
) -> AllocationResult:
    """Decide this year's withdrawals, mutating ``states`` in place.

    Order: mandatory minimums, bracket-fill from traditional accounts,
    tax-free, taxable, medical, traditional overflow, then accounts not yet
    past their access age. Only that last step can trigger early-withdrawal
    penalties under default access ages.
    """
    result = AllocationResult(by_account={state.name: 0.0 for state in states})
    need = max(0.0, target_spending - non_portfolio_income)

    available = [state for state in states if state.available_at(age)]
    by_bucket = {bucket: [s for s in available if s.bucket == bucket] for bucket in BUCKET_ORDER}

    def draw(amount: float, pool: list[AccountWorkingState], step: str) -> float:
        return _withdraw_from_accounts(
            amount=amount,
            states=pool,
            result=result,
            age=age,
            depletion_ages=depletion_ages,
            step=step,
        )

    # Step 1: mandatory minimums
    if rmd_amount > 0:
        taken = draw(rmd_amount, by_bucket[TRADITIONAL], "minimum")
        need = max(0.0, need - taken)

    # Step 2: fill the low brackets with traditional income
    room = max(0.0, bracket_fill_ceiling - (result.traditional + non_portfolio_taxable_income))
    if need > 0 and room > 0:
        need -= draw(min(room, need), by_bucket[TRADITIONAL], "bracket_fill")

    # Steps 3-5: tax-free, taxable, then medical accounts
    for bucket in (TAX_FREE, TAXABLE, MEDICAL):
        if need <= 0:
            break
        need -= draw(need, by_bucket[bucket], bucket)

    # Step 6: traditional beyond the bracket-fill target
    if need > 0:
        need -= draw(need, by_bucket[TRADITIONAL], "overflow")

    # Step 7: accounts not yet at their access age
    if need > 0:
        locked = [state for state in states if not state.available_at(age)]
        for bucket in BUCKET_ORDER:
            if need <= 0:
                break
            pool = [state for state in locked if state.bucket == bucket]
            need -= draw(need, pool, "early_access")
        if need > 0:
            logger.debug("age %d: %.2f of spending need left unmet", age, need)

    result.unmet_need = max(0.0, need)
    return result
