"""Scenario tests for the year-by-year drawdown simulation."""

from dataclasses import asdict
import json

import pytest

from drawdown.accumulation import project_accumulation
from drawdown.engine import simulate_retirement
from drawdown.policy_ca import CanadaPolicy
from drawdown.policy_us import UnitedStatesPolicy
from drawdown.schema import IncomeStream
from drawdown.tax import ca_federal_tax, ca_provincial_tax, included_capital_gains
from tests.helpers import make_account, make_assumptions, make_profile


def _run(accounts, profile, assumptions, policy=None, streams=()):
    policy = policy or UnitedStatesPolicy()
    accumulation = project_accumulation(accounts, profile, policy, start_year=2025)
    return simulate_retirement(
        accounts, profile, assumptions, policy, accumulation, streams, start_year=2025
    )


def test_one_row_per_age_inclusive():
    profile = make_profile(current_age=35, retirement_age=40, life_expectancy=100)
    result = _run([make_account("Roth", "roth_ira", 1_000_000)], profile, make_assumptions())
    rows = result.yearly_withdrawals
    assert len(rows) == 61
    assert rows[0].age == 40 and rows[-1].age == 100
    assert rows[0].year == 2030
    assert rows[-1].year == 2090


def test_sustainable_withdrawal_from_total_at_retirement():
    profile = make_profile(current_age=64, retirement_age=65)
    result = _run([make_account("Roth", "roth_ira", 1_000_000)], profile, make_assumptions())
    assert result.sustainable_annual_withdrawal == pytest.approx(40_000)
    assert result.sustainable_monthly_withdrawal == pytest.approx(3_333.33, abs=0.01)


def test_growth_applied_after_withdrawal():
    profile = make_profile(current_age=64, retirement_age=65, life_expectancy=66)
    assumptions = make_assumptions(safe_withdrawal_rate=0.10, retirement_return_rate=0.10)
    result = _run([make_account("Roth", "roth_ira", 100_000)], profile, assumptions)
    first = result.yearly_withdrawals[0]
    assert first.total_withdrawal == pytest.approx(10_000)
    assert first.remaining_balances["Roth"] == pytest.approx(99_000)


def test_target_spending_inflates_each_year():
    profile = make_profile(current_age=64, retirement_age=65, life_expectancy=75)
    assumptions = make_assumptions(inflation_rate=0.03)
    rows = _run([make_account("Roth", "roth_ira", 1_000_000)], profile, assumptions).yearly_withdrawals
    for prev, nxt in zip(rows, rows[1:]):
        assert nxt.target_spending == pytest.approx(prev.target_spending * 1.03)


def test_small_portfolio_depletes_before_80():
    profile = make_profile(current_age=64, retirement_age=65, life_expectancy=90)
    assumptions = make_assumptions(safe_withdrawal_rate=0.10, inflation_rate=0.03)
    result = _run([make_account("Roth", "roth_ira", 50_000)], profile, assumptions)
    depleted = result.portfolio_depletion_age
    assert depleted is not None and depleted < 80
    assert result.account_depletion_ages["Roth"] <= depleted

    for row in result.yearly_withdrawals:
        if row.age < depleted - 1:
            assert row.total_remaining_balance > 0
        if row.age >= depleted:
            assert row.total_remaining_balance <= 0
            assert row.total_withdrawal == 0.0


def test_large_portfolio_never_depletes():
    profile = make_profile(current_age=64, retirement_age=65, life_expectancy=90)
    assumptions = make_assumptions(inflation_rate=0.03, retirement_return_rate=0.05)
    result = _run([make_account("Roth", "roth_ira", 2_000_000)], profile, assumptions)
    assert result.portfolio_depletion_age is None
    assert result.account_depletion_ages == {"Roth": None}


def test_rmd_floor_at_73():
    profile = make_profile(current_age=72, retirement_age=73, life_expectancy=80)
    assumptions = make_assumptions(safe_withdrawal_rate=0.01)
    result = _run([make_account("IRA", "traditional_ira", 2_000_000)], profile, assumptions)
    first = result.yearly_withdrawals[0]
    assert first.rmd_amount == pytest.approx(75_471.70, abs=0.01)
    assert first.total_withdrawal == pytest.approx(first.rmd_amount)
    for row in result.yearly_withdrawals:
        assert row.total_withdrawal >= row.rmd_amount - 1e-6


def test_rmd_computed_per_account():
    profile = make_profile(current_age=72, retirement_age=73, life_expectancy=74)
    assumptions = make_assumptions(safe_withdrawal_rate=0.0)
    accounts = [
        make_account("401k", "traditional_401k", 530_000),
        make_account("IRA", "traditional_ira", 265_000),
        make_account("Roth", "roth_ira", 500_000),
    ]
    first = _run(accounts, profile, assumptions).yearly_withdrawals[0]
    assert first.rmd_amount == pytest.approx(30_000)
    assert first.withdrawals["401k"] == pytest.approx(30_000)
    assert first.withdrawals["Roth"] == 0.0


def test_benefit_inflated_from_current_age_while_spending_from_retirement():
    # Known interaction: benefits compound from today, spending only from retirement,
    # so early retirement years can show benefits above the spending target.
    profile = make_profile(current_age=60, retirement_age=67, benefit_amount=30_000, benefit_start_age=67)
    assumptions = make_assumptions(inflation_rate=0.03)
    result = _run([make_account("Roth", "roth_ira", 500_000)], profile, assumptions)
    first = result.yearly_withdrawals[0]
    assert first.benefit_income == pytest.approx(30_000 * 1.03**7)
    assert first.target_spending == pytest.approx(500_000 * 0.04)
    assert first.benefit_income > first.target_spending
    assert first.total_withdrawal == 0.0


def test_us_taxes_with_flat_state_rate():
    profile = make_profile(current_age=64, retirement_age=65, regional_tax_rate=0.05)
    result = _run([make_account("IRA", "traditional_ira", 1_250_000)], profile, make_assumptions())
    first = result.yearly_withdrawals[0]
    assert first.withdrawals["IRA"] == pytest.approx(50_000)
    assert first.federal_tax == pytest.approx(2_080)
    assert first.regional_tax == pytest.approx(1_040)
    assert first.total_tax == pytest.approx(3_120)
    assert first.after_tax_income == pytest.approx(46_880)


def test_benefit_income_is_85_percent_taxable():
    profile = make_profile(current_age=64, retirement_age=65, benefit_amount=20_000, benefit_start_age=65)
    result = _run([make_account("IRA", "traditional_ira", 1_250_000)], profile, make_assumptions())
    first = result.yearly_withdrawals[0]
    assert first.total_withdrawal == pytest.approx(30_000)
    assert first.ordinary_income == pytest.approx(30_000 + 17_000)
    assert first.gross_income == pytest.approx(50_000)


def test_income_streams_by_tax_treatment():
    profile = make_profile(current_age=64, retirement_age=65)
    streams = [
        IncomeStream(name="Pension", monthly_amount=1_000, start_age=65, tax_treatment="fully_taxable"),
        IncomeStream(name="Annuity", monthly_amount=500, start_age=65, tax_treatment="tax_free"),
        IncomeStream(name="Later", monthly_amount=700, start_age=80, tax_treatment="fully_taxable"),
    ]
    result = _run([make_account("IRA", "traditional_ira", 1_250_000)], profile, make_assumptions(), streams=streams)
    first = result.yearly_withdrawals[0]
    assert first.income_stream_income == pytest.approx(18_000)
    assert first.tax_free_income == pytest.approx(6_000)
    assert first.total_withdrawal == pytest.approx(32_000)
    assert first.ordinary_income == pytest.approx(32_000 + 12_000)


def test_taxable_gains_absorbed_by_zero_bracket():
    profile = make_profile(current_age=64, retirement_age=65, regional_tax_rate=0.05)
    result = _run([make_account("Brokerage", "taxable", 1_000_000)], profile, make_assumptions())
    first = result.yearly_withdrawals[0]
    assert first.capital_gains == pytest.approx(20_000)
    assert first.capital_gains_tax == 0.0
    assert first.total_tax == 0.0
    assert first.after_tax_income == pytest.approx(40_000)


def test_early_retirement_uses_taxable_before_locked_ira():
    profile = make_profile(current_age=54, retirement_age=55, life_expectancy=70)
    accounts = [
        make_account("IRA", "traditional_ira", 600_000, withdrawal_start_age=60),
        make_account("Brokerage", "taxable", 600_000),
    ]
    result = _run(accounts, profile, make_assumptions())
    first = result.yearly_withdrawals[0]
    assert first.withdrawals["IRA"] == 0.0
    assert first.total_penalties == 0.0
    assert all(row.total_penalties == 0.0 for row in result.yearly_withdrawals)


def test_penalties_only_before_penalty_age():
    profile = make_profile(current_age=49, retirement_age=50, life_expectancy=70)
    accounts = [
        make_account("Brokerage", "taxable", 200_000),
        make_account("IRA", "traditional_ira", 1_000_000),
    ]
    result = _run(accounts, profile, make_assumptions())
    rows = {row.age: row for row in result.yearly_withdrawals}
    assert any(rows[age].total_penalties > 0 for age in range(50, 60))
    assert rows[60].total_penalties == 0.0
    assert rows[61].total_penalties == 0.0
    for row in result.yearly_withdrawals:
        for penalty in row.penalties:
            assert penalty.account == "IRA"
            assert penalty.amount == pytest.approx(row.withdrawals["IRA"] * 0.10)
        assert row.total_tax >= row.total_penalties


def test_canadian_scenario():
    profile = make_profile(current_age=64, retirement_age=65, life_expectancy=80, region="ON", filing_status="single")
    accounts = [make_account("RRSP", "rrsp", 500_000), make_account("TFSA", "tfsa", 100_000)]
    result = _run(accounts, profile, make_assumptions(), policy=CanadaPolicy())
    rows = {row.age: row for row in result.yearly_withdrawals}
    assert rows[65].regional_tax > 0
    assert rows[65].rmd_amount == 0.0
    assert rows[71].rmd_amount > 0
    assert all(row.total_penalties == 0.0 for row in rows.values())


def _oas_profile():
    return make_profile(
        current_age=64,
        retirement_age=65,
        life_expectancy=70,
        filing_status="single",
        secondary_benefit_amount=8_000,
        secondary_benefit_start_age=65,
    )


def test_oas_kept_when_living_off_tfsa():
    accounts = [make_account("TFSA", "tfsa", 5_000_000)]
    rows = _run(accounts, _oas_profile(), make_assumptions(), policy=CanadaPolicy()).yearly_withdrawals
    assert rows[1].total_withdrawal > 150_000
    assert rows[1].ordinary_income == pytest.approx(6_800)
    assert rows[1].benefit_income == pytest.approx(8_000)


def test_oas_clawed_back_after_large_rrif_year():
    accounts = [make_account("RRIF", "rrif", 5_000_000)]
    rows = _run(accounts, _oas_profile(), make_assumptions(), policy=CanadaPolicy()).yearly_withdrawals
    assert rows[0].benefit_income == pytest.approx(8_000)
    assert rows[1].benefit_income == 0.0


def test_canadian_gains_tax_split_between_federal_and_provincial():
    profile = make_profile(current_age=64, retirement_age=65, life_expectancy=66, region="BC", filing_status="single")
    accounts = [make_account("Investments", "non_registered", 10_000_000)]
    first = _run(accounts, profile, make_assumptions(), policy=CanadaPolicy()).yearly_withdrawals[0]

    assert first.capital_gains == pytest.approx(200_000)
    assert first.realized_gains == {"Investments": pytest.approx(200_000)}
    included = included_capital_gains(first.capital_gains)
    assert first.federal_tax == pytest.approx(ca_federal_tax(included))
    assert first.regional_tax == pytest.approx(ca_provincial_tax(included, "BC"))
    assert first.capital_gains_tax == pytest.approx(first.federal_tax + first.regional_tax)


def test_invariants_hold_every_year():
    profile = make_profile(
        current_age=45, retirement_age=58, life_expectancy=95, benefit_amount=30_000, benefit_start_age=67
    )
    accounts = [
        make_account("401k", "traditional_401k", 400_000, annual_contribution=20_000, return_rate=0.06),
        make_account("Roth", "roth_ira", 80_000, return_rate=0.06),
        make_account("Brokerage", "taxable", 60_000, return_rate=0.05),
        make_account("HSA", "hsa", 20_000, return_rate=0.05),
    ]
    assumptions = make_assumptions(inflation_rate=0.03, retirement_return_rate=0.04, safe_withdrawal_rate=0.05)
    result = _run(accounts, profile, assumptions)
    for row in result.yearly_withdrawals:
        assert row.total_withdrawal == pytest.approx(sum(row.withdrawals.values()))
        assert all(balance >= 0 for balance in row.remaining_balances.values())
        if row.rmd_amount > 0:
            assert row.total_withdrawal >= row.rmd_amount - 1e-6
        assert row.total_tax == pytest.approx(row.federal_tax + row.regional_tax + row.total_penalties)
    assert result.lifetime_taxes_paid == pytest.approx(sum(r.total_tax for r in result.yearly_withdrawals))


def test_deterministic_output():
    profile = make_profile(current_age=50, retirement_age=60, benefit_amount=25_000, benefit_start_age=67)
    accounts = [
        make_account("IRA", "traditional_ira", 500_000, return_rate=0.06),
        make_account("Brokerage", "taxable", 200_000, return_rate=0.05),
    ]
    assumptions = make_assumptions(inflation_rate=0.025, retirement_return_rate=0.05)
    first = _run(accounts, profile, assumptions)
    second = _run(accounts, profile, assumptions)
    assert json.dumps(asdict(first), sort_keys=True) == json.dumps(asdict(second), sort_keys=True)


def test_input_accounts_not_mutated():
    profile = make_profile(current_age=64, retirement_age=65)
    accounts = [make_account("IRA", "traditional_ira", 100_000)]
    _run(accounts, profile, make_assumptions())
    assert accounts[0].balance == 100_000
    assert accounts[0].withdrawal_start_age is None
