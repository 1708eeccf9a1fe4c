import json
from pathlib import Path

import pytest

from drawdown.countries import get_policy
from drawdown.simulation import clear_cache


@pytest.fixture
def sample_plan_dict() -> dict:
    return json.loads(Path("sample_plan.json").read_text(encoding="utf-8"))


@pytest.fixture
def sample_plan_ca_dict() -> dict:
    return json.loads(Path("sample_plan_ca.json").read_text(encoding="utf-8"))


@pytest.fixture
def us_policy():
    return get_policy("US")


@pytest.fixture
def ca_policy():
    return get_policy("CA")


@pytest.fixture(autouse=True)
def _fresh_cache():
    clear_cache()
    yield
    clear_cache()
