"""Semantic validation for plans, run by the caller before simulating."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .countries import UnknownCountryError, available_countries, get_policy
from .defaults import max_withdrawal_age
from .schema import INCOME_TAX_TREATMENTS, Plan

RATE_FIELDS = ("inflation_rate", "safe_withdrawal_rate", "retirement_return_rate")


@dataclass(slots=True)
class ValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _check_enum(result: ValidationResult, path: str, value: str, allowed: Iterable[str]) -> None:
    allowed_set = set(allowed)
    if value not in allowed_set:
        expected = ", ".join(sorted(allowed_set))
        result.errors.append(f"{path}: '{value}' is not valid; expected one of [{expected}]")


def _check_rate(result: ValidationResult, path: str, value: float | None) -> None:
    if value is not None and abs(value) > 1:
        result.warnings.append(f"{path}: {value} looks like a percentage; rates are decimals (0.05 = 5%)")


def _check_non_negative(result: ValidationResult, path: str, value: float | None) -> None:
    if value is not None and value < 0:
        result.errors.append(f"{path}: must be >= 0")


def validate_plan(plan: Plan) -> ValidationResult:
    result = ValidationResult()
    profile = plan.profile

    if not profile.current_age < profile.retirement_age:
        result.errors.append("profile.current_age/profile.retirement_age: current_age must be < retirement_age")
    if not profile.retirement_age < profile.life_expectancy:
        result.errors.append("profile.retirement_age/profile.life_expectancy: retirement_age must be < life_expectancy")

    for name in RATE_FIELDS:
        _check_rate(result, f"assumptions.{name}", getattr(plan.assumptions, name))
    _check_rate(result, "profile.regional_tax_rate", profile.regional_tax_rate)
    _check_non_negative(result, "profile.benefit_amount", profile.benefit_amount)
    _check_non_negative(result, "profile.secondary_benefit_amount", profile.secondary_benefit_amount)

    try:
        policy = get_policy(plan.country)
    except UnknownCountryError:
        _check_enum(result, "country", plan.country, available_countries())
        policy = None

    if policy is not None:
        _check_enum(result, "profile.filing_status", profile.filing_status, policy.filing_statuses())
        region_codes = {region.code for region in policy.regions()}
        if region_codes and profile.region is not None:
            _check_enum(result, "profile.region", profile.region.upper(), region_codes)
        if profile.regional_tax_rate and not policy.applies_flat_regional_rate:
            result.warnings.append(
                f"profile.regional_tax_rate: ignored for {policy.code}; regional tax comes from profile.region"
            )

    account_names: set[str] = set()
    for idx, account in enumerate(plan.accounts):
        base = f"accounts[{idx}]"
        if account.name in account_names:
            result.errors.append(f"{base}.name: duplicate account name '{account.name}'")
        account_names.add(account.name)

        _check_non_negative(result, f"{base}.balance", account.balance)
        _check_non_negative(result, f"{base}.annual_contribution", account.annual_contribution)
        _check_rate(result, f"{base}.return_rate", account.return_rate)
        _check_rate(result, f"{base}.contribution_growth_rate", account.contribution_growth_rate)
        _check_rate(result, f"{base}.employer_match_percent", account.employer_match_percent)

        if policy is None:
            continue
        _check_enum(result, f"{base}.type", account.type, policy.account_type_codes())
        if account.type not in policy.account_type_codes():
            continue

        limit = policy.contribution_limits().get(account.type)
        if limit is not None and limit.annual is not None and account.annual_contribution > limit.annual:
            result.warnings.append(
                f"{base}.annual_contribution: {account.annual_contribution:,.0f} exceeds the "
                f"{limit.annual:,.0f} annual limit for {policy.account_type_label(account.type)}"
            )
        if account.employer_match_percent and not policy.supports_employer_match(account.type):
            result.warnings.append(
                f"{base}.employer_match_percent: {policy.account_type_label(account.type)} does not support employer match"
            )
        if account.withdrawal_start_age is not None:
            latest = max_withdrawal_age(account, profile.life_expectancy, policy)
            if account.withdrawal_start_age > latest:
                result.warnings.append(
                    f"{base}.withdrawal_start_age: {account.withdrawal_start_age} is after the latest allowed age "
                    f"{latest}; withdrawals will start at {latest}"
                )

    for idx, stream in enumerate(plan.income_streams):
        base = f"income_streams[{idx}]"
        _check_enum(result, f"{base}.tax_treatment", stream.tax_treatment, INCOME_TAX_TREATMENTS)
        _check_non_negative(result, f"{base}.monthly_amount", stream.monthly_amount)

    if not plan.accounts:
        result.warnings.append("accounts: no accounts defined; nothing to simulate")

    return result
