# tests/conftest.py
from __future__ import annotations

import pytest

from deal_analyzer.core.finance import evaluate_deal, run_deal_model
from tests.utils import make_deal_inputs


# -------- Deal fixtures --------
@pytest.fixture
def scenario_metrics():
    """Evaluate the reference scenario (no sensitivity grid)."""

    def _factory(**overrides):
        return evaluate_deal(make_deal_inputs(**overrides))

    return _factory


@pytest.fixture
def full_metrics():
    """Full engine run on the reference scenario with default axes."""
    return run_deal_model(make_deal_inputs())


# -------- Environment isolation --------
@pytest.fixture(autouse=True)
def _clear_deal_env(monkeypatch):
    for name in ("DEAL_ANALYZER_PRICE_MULTIPLIERS", "DEAL_ANALYZER_CAP_RATES", "DEAL_ANALYZER_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    yield
