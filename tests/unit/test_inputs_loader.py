# tests/unit/test_inputs_loader.py
from __future__ import annotations

import json
from pathlib import Path

import pytest

from deal_analyzer.core.finance import evaluate_deal
from deal_analyzer.core.finance.errors import InvalidInputError
from deal_analyzer.inputs.inputs import AppInputs, InputsLoader, load_inputs, translate_saved_deal
from deal_analyzer.schemas.models import DEFAULT_PRICE_MULTIPLIERS

FLAT = {
    "unitCount": 2,
    "purchasePrice": 300_000,
    "marketCapRate": 0.06,
    "rentRoll": [{"unitId": "1", "marketRent": 1_500}, {"unitId": "2", "marketRent": 1_500}],
    "expenseBreakdown": {"insurance": 3_000},
}

SAVED_DEAL = {
    "assumptions": {"unitCount": 2, "purchasePrice": 300_000, "marketCapRate": 0.06, "vacancyRate": 0.05},
    "unitTypes": [{"id": 1, "name": "1BR", "marketRent": 1_450}],
    "rentRoll": [
        {"unit": "1A", "unitTypeId": 1, "currentRent": 1_250, "proFormaRent": 1_400},
        {"unit": "1B", "currentRent": 1_300, "proFormaRent": 1_500, "isVacant": True},
    ],
    "expenses": {"propertyTax": 6_000, "insurance": 2_000},
    "rehabBudgetSections": {
        "exterior": [{"category": "Windows", "perUnitCost": 400, "quantity": 10, "totalCost": 99_999}],
        "kitchens": [],
    },
    "closingCosts": {"title": 1_500, "sellerCredit": -500},
    "holdingCosts": {"electric": 100},
    "exitAnalysis": {"saleFactor": 1.02, "saleCostsPercent": 0.05, "holdPeriodYears": 3},
}


def _write(tmp_path: Path, payload: dict, name: str = "deal.json") -> Path:
    p = tmp_path / name
    p.write_text(json.dumps(payload), encoding="utf-8")
    return p


def test_load_flat_shape(tmp_path: Path):
    cfg = InputsLoader().load(_write(tmp_path, FLAT))
    assert isinstance(cfg, AppInputs)
    assert cfg.deal.unit_count == 2
    assert cfg.deal.expense_breakdown == {"insurance": 3_000}
    assert cfg.options.price_multipliers == DEFAULT_PRICE_MULTIPLIERS


def test_load_structured_shape_with_options(tmp_path: Path):
    payload = {"deal": FLAT, "options": {"priceMultipliers": [0.9, 1.0], "capRates": [0.05]}}
    cfg = load_inputs(_write(tmp_path, payload))
    assert cfg.options.price_multipliers == (0.9, 1.0)
    assert cfg.options.cap_rates == (0.05,)


def test_saved_deal_translation():
    deal = translate_saved_deal(SAVED_DEAL)
    roll = deal["rentRoll"]
    # Unit type market rent wins over pro forma rent
    assert roll[0]["marketRent"] == 1_450
    assert roll[0]["unitId"] == "1A"
    # No unit type -> pro forma rent; vacancy flag maps to occupied
    assert roll[1]["marketRent"] == 1_500
    assert roll[1]["occupied"] is False
    assert "totalCost" not in deal["rehabBudgetSections"]["exterior"][0]
    assert deal["expenseBreakdown"] == SAVED_DEAL["expenses"]
    assert deal["exitAssumptions"]["holdPeriodYears"] == 3


def test_saved_deal_loads_and_recomputes_rehab_total(tmp_path: Path):
    cfg = InputsLoader().load(_write(tmp_path, SAVED_DEAL))
    item = cfg.deal.rehab_budget_sections["exterior"][0]
    assert item.total_cost == pytest.approx(4_000.0)

    metrics = evaluate_deal(cfg.deal)
    # 10% contingency on the 4,000 subtotal
    assert metrics.total_rehab == pytest.approx(4_400.0)
    assert metrics.total_closing_costs == pytest.approx(1_000.0)
    assert metrics.gross_rental_income == pytest.approx((1_450 + 1_500) * 12)


def test_load_json_text():
    cfg = InputsLoader().load_json(json.dumps(FLAT))
    assert cfg.deal.purchase_price == 300_000


def test_load_json_rejects_garbage():
    with pytest.raises(InvalidInputError):
        InputsLoader().load_json("{not json")
    with pytest.raises(InvalidInputError):
        InputsLoader().load_json("[1, 2]")


def test_invalid_values_surface_as_invalid_input(tmp_path: Path):
    bad = {**FLAT, "expenseBreakdown": {"insurance": -1}}
    with pytest.raises(InvalidInputError) as ei:
        InputsLoader().load(_write(tmp_path, bad))
    assert any("expenseBreakdown" in f for f in ei.value.fields)


def test_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        InputsLoader().load(tmp_path / "nope.json")


def test_default_search_path(tmp_path: Path, monkeypatch):
    (tmp_path / "data").mkdir()
    _write(tmp_path / "data", FLAT)
    monkeypatch.chdir(tmp_path)
    cfg = InputsLoader().load()
    assert cfg.deal.unit_count == 2


def test_default_search_path_missing(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(FileNotFoundError):
        InputsLoader().load()


def test_non_json_suffix_rejected(tmp_path: Path):
    p = tmp_path / "deal.yaml"
    p.write_text("unitCount: 2", encoding="utf-8")
    with pytest.raises(InvalidInputError):
        InputsLoader().load(p)


def test_env_overrides_axes(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("DEAL_ANALYZER_PRICE_MULTIPLIERS", "0.8, 1.0, 1.2")
    monkeypatch.setenv("DEAL_ANALYZER_CAP_RATES", "0.05,0.06")
    cfg = InputsLoader().load(_write(tmp_path, FLAT))
    assert cfg.options.price_multipliers == (0.8, 1.0, 1.2)
    assert cfg.options.cap_rates == (0.05, 0.06)


def test_bad_env_overrides_are_ignored(tmp_path: Path, monkeypatch, caplog):
    monkeypatch.setenv("DEAL_ANALYZER_PRICE_MULTIPLIERS", "cheap,expensive")
    monkeypatch.setenv("DEAL_ANALYZER_CAP_RATES", "0.0")
    with caplog.at_level("WARNING", logger="deal_analyzer"):
        cfg = InputsLoader().load(_write(tmp_path, FLAT))
    assert cfg.options.price_multipliers == DEFAULT_PRICE_MULTIPLIERS
    assert cfg.options.cap_rates[0] == pytest.approx(0.045)
    assert "ignoring" in caplog.text


def test_with_overrides_returns_new_instance():
    loader = InputsLoader()
    cfg = loader.load_json(json.dumps(FLAT))
    new = loader.with_overrides(cfg, cap_rates=(0.07,))
    assert new is not cfg
    assert new.options.cap_rates == (0.07,)
    assert cfg.options.cap_rates != (0.07,)
    assert loader.with_overrides(cfg) is cfg


def test_saved_deal_holding_costs_are_period_totals():
    # Dashboard defaults: totals for the whole hold, not monthly amounts
    payload = {
        "assumptions": {"unitCount": 8, "purchasePrice": 1_500_000, "loanTermYears": 2},
        "holdingCosts": {"electric": 2_400, "water": 1_800, "gas": 1_200, "interest": 9_600, "title": 3_000},
    }
    cfg = InputsLoader().load_json(json.dumps(payload))
    assert cfg.deal.holding_months == 1
    assert evaluate_deal(cfg.deal).total_holding_costs == pytest.approx(18_000.0)


def test_saved_deal_applies_dashboard_rates():
    cfg = InputsLoader().load_json(json.dumps(SAVED_DEAL))
    assert cfg.deal.management_fee_rate == pytest.approx(0.08)
    assert cfg.deal.rehab_contingency_rate == pytest.approx(0.10)
    metrics = evaluate_deal(cfg.deal)
    assert metrics.management_fee == pytest.approx(metrics.effective_gross_income * 0.08)


def test_saved_deal_keeps_explicit_rates_and_months():
    assumptions = {
        **SAVED_DEAL["assumptions"],
        "managementFeeRate": 0.05,
        "rehab_contingency_rate": 0.0,
        "holdingMonths": 6,
    }
    deal = translate_saved_deal({**SAVED_DEAL, "assumptions": assumptions})
    assert deal["managementFeeRate"] == 0.05
    assert "rehabContingencyRate" not in deal
    assert deal["holdingMonths"] == 6


def test_flat_shape_holding_costs_stay_monthly():
    cfg = InputsLoader().load_json(json.dumps({**FLAT, "holdingCosts": {"electric": 100}}))
    assert cfg.deal.holding_months is None
    assert evaluate_deal(cfg.deal).total_holding_costs == pytest.approx(100 * 24)
