"""Simulation orchestration: accumulation followed by drawdown, memoized."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import asdict, dataclass
from datetime import date
import hashlib
import json
import logging

from .accumulation import project_accumulation
from .countries import get_policy
from .engine import RetirementResult, simulate_retirement
from .policy import CountryPolicy
from .schema import AccumulationResult, Plan

logger = logging.getLogger(__name__)

CACHE_SIZE = 32


@dataclass(slots=True)
class PlanResult:
    accumulation: AccumulationResult
    retirement: RetirementResult


_cache: OrderedDict[str, PlanResult] = OrderedDict()


def plan_fingerprint(plan: Plan, policy: CountryPolicy, start_year: int) -> str:
    """Structural hash of everything a run depends on."""
    payload = {
        "plan": asdict(plan),
        "policy": f"{type(policy).__module__}.{type(policy).__qualname__}:{policy.code}",
        "start_year": start_year,
    }
    encoded = json.dumps(payload, sort_keys=True).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def clear_cache() -> None:
    _cache.clear()


def run_plan(
    plan: Plan,
    *,
    policy: CountryPolicy | None = None,
    start_year: int | None = None,
    use_cache: bool = True,
) -> PlanResult:
    """Project balances to retirement and simulate the drawdown.

    Identical inputs return the cached result object, so callers must treat
    results as read-only.
    """
    policy = policy or get_policy(plan.country)
    year = start_year or plan.start_year or date.today().year

    key = plan_fingerprint(plan, policy, year)
    if use_cache and key in _cache:
        _cache.move_to_end(key)
        logger.debug("cache hit for plan %s", key[:12])
        return _cache[key]

    accumulation = project_accumulation(plan.accounts, plan.profile, policy, year)
    if not plan.accounts or accumulation.total_at_retirement == 0:
        retirement = RetirementResult(account_depletion_ages={})
    else:
        retirement = simulate_retirement(
            plan.accounts,
            plan.profile,
            plan.assumptions,
            policy,
            accumulation,
            plan.income_streams,
            start_year=year,
        )
    result = PlanResult(accumulation=accumulation, retirement=retirement)

    if use_cache:
        _cache[key] = result
        if len(_cache) > CACHE_SIZE:
            _cache.popitem(last=False)
    return result
