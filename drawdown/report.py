"""Plain-text summaries and JSON export of simulation results."""

from __future__ import annotations

from dataclasses import asdict
import json
from pathlib import Path
from typing import Any

from .policy import CountryPolicy
from .schema import Plan
from .simulation import PlanResult


def _money(value: float) -> str:
    return f"${value:,.0f}"


def summary_lines(plan: Plan, result: PlanResult, policy: CountryPolicy) -> list[str]:
    accumulation = result.accumulation
    retirement = result.retirement
    lines = [
        f"Country: {policy.name} ({policy.currency})",
        f"Total at retirement (age {plan.profile.retirement_age}): {_money(accumulation.total_at_retirement)}",
    ]
    for group in policy.account_groups():
        amount = accumulation.breakdown_by_group.get(group.id, 0.0)
        if amount > 0:
            lines.append(f"  {group.label}: {_money(amount)}")
    lines.append(
        f"Sustainable withdrawal: {_money(retirement.sustainable_annual_withdrawal)}/yr "
        f"({_money(retirement.sustainable_monthly_withdrawal)}/mo)"
    )
    lines.append(f"Lifetime taxes paid: {_money(retirement.lifetime_taxes_paid)}")
    if retirement.yearly_withdrawals:
        penalties = sum(row.total_penalties for row in retirement.yearly_withdrawals)
        last = retirement.yearly_withdrawals[-1]
        lines.append(f"Early withdrawal penalties: {_money(penalties)}")
        lines.append(f"Ending balance (age {last.age}): {_money(last.total_remaining_balance)}")
    if retirement.portfolio_depletion_age is None:
        lines.append("Portfolio depletion: never")
    else:
        lines.append(f"Portfolio depletion: age {retirement.portfolio_depletion_age}")
    return lines


def table_lines(result: PlanResult) -> list[str]:
    header = f"{'Age':>4} {'Year':>5} {'Target':>12} {'Withdrawn':>12} {'Benefits':>12} {'Tax':>10} {'After tax':>12} {'Balance':>14}"
    lines = [header, "-" * len(header)]
    for row in result.retirement.yearly_withdrawals:
        lines.append(
            f"{row.age:>4} {row.year:>5} {row.target_spending:>12,.0f} {row.total_withdrawal:>12,.0f} "
            f"{row.benefit_income + row.income_stream_income:>12,.0f} {row.total_tax:>10,.0f} "
            f"{row.after_tax_income:>12,.0f} {row.total_remaining_balance:>14,.0f}"
        )
    return lines


def result_payload(plan: Plan, result: PlanResult) -> dict[str, Any]:
    return {
        "country": plan.country,
        "accumulation": asdict(result.accumulation),
        "retirement": asdict(result.retirement),
    }


def write_result(path: str | Path, plan: Plan, result: PlanResult) -> None:
    payload = result_payload(plan, result)
    Path(path).write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
