from drawdown.countries import default_profile_for
from drawdown.schema import Plan
from drawdown.validate import validate_plan
from tests.helpers import clone_plan


def _validate(data: dict):
    plan = Plan.from_dict(data, profile_defaults=default_profile_for(data.get("country")))
    return validate_plan(plan)


def test_sample_plans_are_valid(sample_plan_dict, sample_plan_ca_dict):
    us = _validate(sample_plan_dict)
    ca = _validate(sample_plan_ca_dict)
    assert us.is_valid, us.errors
    assert ca.is_valid, ca.errors


def test_age_ordering_errors(sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    data["profile"]["retirement_age"] = data["profile"]["current_age"]
    data["profile"]["life_expectancy"] = 40
    result = _validate(data)
    assert any("current_age must be < retirement_age" in e for e in result.errors)
    assert any("retirement_age must be < life_expectancy" in e for e in result.errors)


def test_unknown_country(sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    data["country"] = "MX"
    result = _validate(data)
    assert "country: 'MX' is not valid; expected one of [CA, US]" in result.errors


def test_account_type_must_belong_to_country(sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    data["accounts"][0]["type"] = "tfsa"
    result = _validate(data)
    assert any(e.startswith("accounts[0].type: 'tfsa' is not valid") for e in result.errors)


def test_duplicate_account_names(sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    data["accounts"][1]["name"] = data["accounts"][0]["name"]
    result = _validate(data)
    assert "accounts[1].name: duplicate account name 'Work 401k'" in result.errors


def test_negative_balance_is_error(sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    data["accounts"][2]["balance"] = -1
    result = _validate(data)
    assert "accounts[2].balance: must be >= 0" in result.errors


def test_unknown_stream_tax_treatment(sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    data["income_streams"][0]["tax_treatment"] = "mostly_taxable"
    result = _validate(data)
    assert any(e.startswith("income_streams[0].tax_treatment") for e in result.errors)


def test_unknown_filing_status(sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    data["profile"]["filing_status"] = "qualifying_widow"
    result = _validate(data)
    assert any(e.startswith("profile.filing_status") for e in result.errors)


def test_unknown_province(sample_plan_ca_dict):
    data = clone_plan(sample_plan_ca_dict)
    data["profile"]["region"] = "XX"
    result = _validate(data)
    assert any(e.startswith("profile.region: 'XX' is not valid") for e in result.errors)


def test_percentage_rates_warn(sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    data["assumptions"]["inflation_rate"] = 3
    result = _validate(data)
    assert result.is_valid
    assert any(w.startswith("assumptions.inflation_rate") for w in result.warnings)


def test_contribution_over_limit_warns(sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    data["accounts"][2]["annual_contribution"] = 20_000
    result = _validate(data)
    assert result.is_valid
    assert any("exceeds the 7,000 annual limit for Roth IRA" in w for w in result.warnings)


def test_employer_match_on_ira_warns(sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    data["accounts"][1]["employer_match_percent"] = 0.5
    result = _validate(data)
    assert any("does not support employer match" in w for w in result.warnings)


def test_withdrawal_start_after_rmd_age_warns(sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    data["accounts"][1]["withdrawal_start_age"] = 80
    result = _validate(data)
    assert result.is_valid
    assert any("after the latest allowed age 73" in w for w in result.warnings)


def test_regional_rate_ignored_in_canada_warns(sample_plan_ca_dict):
    data = clone_plan(sample_plan_ca_dict)
    data["profile"]["regional_tax_rate"] = 0.05
    result = _validate(data)
    assert any(w.startswith("profile.regional_tax_rate") for w in result.warnings)
