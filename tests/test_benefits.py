import pytest

from drawdown.benefits import (
    OAS_RECOVERY_THRESHOLD,
    canadian_retirement_benefits,
    cpp_adjustment,
    flat_benefit,
    income_stream_totals,
    inflation_factor,
    oas_adjustment,
    oas_recovery_tax,
    us_retirement_benefits,
)
from drawdown.schema import IncomeStream
from tests.helpers import make_profile


def test_us_benefit_starts_at_configured_age():
    profile = make_profile(benefit_amount=30_000, benefit_start_age=67)
    assert us_retirement_benefits(profile, 66) == []

    payments = us_retirement_benefits(profile, 67)
    assert len(payments) == 1
    assert payments[0].name == "social_security"
    assert payments[0].annual_amount == pytest.approx(30_000)
    assert payments[0].monthly_amount == pytest.approx(2_500)


def test_flat_benefit_requires_start_age_and_amount():
    assert flat_benefit("x", 10_000, None, 70) == []
    assert flat_benefit("x", 0, 65, 70) == []


def test_inflation_factor_is_relative_to_current_age():
    assert inflation_factor(67, 60, 0.03) == pytest.approx(1.03**7)
    assert inflation_factor(60, 60, 0.03) == 1.0


def test_cpp_adjustment_early_and_late():
    assert cpp_adjustment(65) == pytest.approx(1.0)
    assert cpp_adjustment(60) == pytest.approx(0.64)
    assert cpp_adjustment(70) == pytest.approx(1.42)
    # Outside the allowed window the nearest allowed age applies
    assert cpp_adjustment(55) == pytest.approx(0.64)
    assert cpp_adjustment(75) == pytest.approx(1.42)


def test_oas_deferral_and_age_75_increase():
    assert oas_adjustment(65, 65) == pytest.approx(1.0)
    assert oas_adjustment(70, 70) == pytest.approx(1.36)
    assert oas_adjustment(65, 75) == pytest.approx(1.10)


def test_oas_recovery_tax_is_capped_at_benefit():
    assert oas_recovery_tax(8_000, OAS_RECOVERY_THRESHOLD) == 0.0
    assert oas_recovery_tax(8_000, OAS_RECOVERY_THRESHOLD + 10_000) == pytest.approx(1_500)
    assert oas_recovery_tax(8_000, OAS_RECOVERY_THRESHOLD + 1_000_000) == pytest.approx(8_000)


def test_canadian_benefits_have_independent_start_ages():
    profile = make_profile(
        benefit_amount=12_000,
        benefit_start_age=65,
        secondary_benefit_amount=8_000,
        secondary_benefit_start_age=70,
    )
    at_65 = canadian_retirement_benefits(profile, 65, 0.0)
    assert [p.name for p in at_65] == ["cpp"]

    at_70 = canadian_retirement_benefits(profile, 70, 0.0)
    assert [p.name for p in at_70] == ["cpp", "oas"]
    assert at_70[1].annual_amount == pytest.approx(8_000 * 1.36)


def test_oas_clawed_back_for_high_income():
    profile = make_profile(secondary_benefit_amount=8_000, secondary_benefit_start_age=65)
    low = canadian_retirement_benefits(profile, 66, 50_000)
    high = canadian_retirement_benefits(profile, 66, 200_000)
    assert low[0].annual_amount == pytest.approx(8_000)
    assert high[0].annual_amount == 0.0


def test_income_streams_bucketed_by_tax_treatment():
    streams = [
        IncomeStream(name="Pension", monthly_amount=1_000, start_age=65, tax_treatment="fully_taxable"),
        IncomeStream(name="Survivor", monthly_amount=500, start_age=60, tax_treatment="benefit"),
        IncomeStream(name="Gift", monthly_amount=200, start_age=70, tax_treatment="tax_free"),
    ]
    totals = income_stream_totals(streams, 66)
    assert totals.total == pytest.approx(18_000)
    assert totals.fully_taxable == pytest.approx(12_000)
    assert totals.benefit == pytest.approx(6_000)
    assert totals.tax_free == 0.0

    later = income_stream_totals(streams, 70).scaled(2.0)
    assert later.total == pytest.approx(2 * 20_400)
    assert later.tax_free == pytest.approx(4_800)
    assert later.benefit / later.total == pytest.approx(6_000 / 20_400)


def test_no_streams_yield_zero():
    assert income_stream_totals([], 80).total == 0.0
