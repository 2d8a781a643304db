# deal_analyzer/inputs/inputs.py
"""
Inputs loader for the deal model.

Goals
-----
- Deterministic, file-first inputs with validation via Pydantic.
- Accept the saved-deal JSON written by the dashboard (assumptions / rentRoll /
  expenses / rehabBudgetSections / closingCosts / holdingCosts / exitAnalysis).
- Structured shape that also carries analysis options (sensitivity axes).
- Minimal environment-variable overrides for CI/CLI convenience.

Supported JSON shapes
---------------------
1) Flat (root = DealInputs, camelCase or snake_case keys)
   { "unitCount": 8, "purchasePrice": 1500000, ... }

2) Structured (root = AppInputs)
   {
     "deal": { ... DealInputs ... },
     "options": { "priceMultipliers": [0.9, 1.0, 1.1], "capRates": [0.05, 0.055] }
   }

3) Saved deal (dashboard export)
   {
     "assumptions": { "unitCount": 8, "purchasePrice": 1500000, ... },
     "unitTypes": [ { "id": 1, "marketRent": 1450 } ],
     "rentRoll": [ { "unit": "1", "unitTypeId": 1, "currentRent": 1250, "proFormaRent": 1450 } ],
     "expenses": { ... }, "rehabBudgetSections": { ... }, "closingCosts": { ... },
     "holdingCosts": { ... }, "exitAnalysis": { ... }, "otherIncome": { ... }
   }

Environment overrides (optional)
--------------------------------
- DEAL_ANALYZER_PRICE_MULTIPLIERS -> AppInputs.options.price_multipliers (comma-separated)
- DEAL_ANALYZER_CAP_RATES         -> AppInputs.options.cap_rates (comma-separated)

Notes
-----
- This module does not hit the network and never writes files.
- Validation failures surface as InvalidInputError with field-level reasons.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, Field

from deal_analyzer.core.debug import get_logger
from deal_analyzer.core.finance.errors import InvalidInputError, input_error_guard
from deal_analyzer.schemas.models import AnalysisOptions, DealInputs

logger = get_logger(__name__)

SAVED_DEAL_MANAGEMENT_FEE_RATE = 0.08
SAVED_DEAL_REHAB_CONTINGENCY_RATE = 0.10

# ----------------------------
# Pydantic model for structured inputs
# ----------------------------


class AppInputs(BaseModel):
    """
    Full input payload.

    Attributes:
        deal:    The validated DealInputs snapshot.
        options: Sensitivity grid and scenario table axes.
    """

    deal: DealInputs
    options: AnalysisOptions = Field(default_factory=AnalysisOptions)

    model_config = ConfigDict(frozen=True)


# ----------------------------
# Loader
# ----------------------------


@dataclass(frozen=True)
class InputsLoader:
    """
    File-first inputs loader with light env overrides.

    Default search (when path=None):
        1) ./data/deal.json
        2) ./deal.json
    """

    env_prefix: str = "DEAL_ANALYZER_"

    # ---------- Public API ----------

    def load(self, path: str | Path | None = None) -> AppInputs:
        p = self._resolve_path(path)
        raw = self._read_json_file(p)
        return self._finish(raw)

    def load_json(self, text: str) -> AppInputs:
        """Load inputs from a JSON string (any supported shape)."""
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidInputError.for_field("<json>", f"invalid JSON payload: {e}") from e
        if not isinstance(raw, dict):
            raise InvalidInputError.for_field("<json>", "root must be an object")
        return self._finish(raw)

    def with_overrides(
        self,
        cfg: AppInputs,
        *,
        price_multipliers: tuple[float, ...] | None = None,
        cap_rates: tuple[float, ...] | None = None,
    ) -> AppInputs:
        """
        Return a *new* AppInputs with provided non-null overrides applied to the options.
        Does not mutate the original instance.
        """
        updates: dict[str, Any] = {}
        if price_multipliers is not None:
            updates["price_multipliers"] = tuple(price_multipliers)
        if cap_rates is not None:
            updates["cap_rates"] = tuple(cap_rates)

        if not updates:
            return cfg

        merged = {**cfg.options.model_dump(), **updates}
        with input_error_guard():
            options = AnalysisOptions.model_validate(merged)
        return cfg.model_copy(update={"options": options})

    # ---------- Internals ----------

    def _finish(self, raw: dict[str, Any]) -> AppInputs:
        data = self._normalize_shape(raw)
        cfg = self._parse_root(data)
        return self._apply_env_overrides(cfg)

    def _resolve_path(self, path: str | Path | None) -> Path:
        if path is not None:
            p = Path(path)
            if not p.exists():
                raise FileNotFoundError(f"Inputs file not found: {p}")
            return p

        for candidate in (Path("data/deal.json"), Path("deal.json")):
            if candidate.exists():
                return candidate
        raise FileNotFoundError("No inputs path provided and no default inputs found. Looked for ./data/deal.json and ./deal.json.")

    def _read_json_file(self, p: Path) -> dict[str, Any]:
        if p.suffix.lower() != ".json":
            raise InvalidInputError.for_field("<file>", f"unsupported inputs format for {p.name}; only .json is supported")
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise InvalidInputError.for_field("<file>", f"invalid JSON in {p}: {e}") from e
        if not isinstance(data, dict):
            raise InvalidInputError.for_field("<file>", "root must be an object")
        return cast(dict[str, Any], data)

    def _normalize_shape(self, raw: dict[str, Any]) -> dict[str, Any]:
        if "deal" in raw:
            return raw  # already structured
        if "assumptions" in raw:
            logger.info("translating saved-deal payload into DealInputs")
            return {"deal": translate_saved_deal(raw)}
        return {"deal": raw}

    def _parse_root(self, data: dict[str, Any]) -> AppInputs:
        with input_error_guard():
            return AppInputs.model_validate(data)

    def _apply_env_overrides(self, cfg: AppInputs) -> AppInputs:
        prefix = self.env_prefix
        price_multipliers = self._env_floats(f"{prefix}PRICE_MULTIPLIERS")
        cap_rates = self._env_floats(f"{prefix}CAP_RATES")
        try:
            return self.with_overrides(cfg, price_multipliers=price_multipliers, cap_rates=cap_rates)
        except InvalidInputError as exc:
            # Keep the validated file options when the environment carries bad axes
            logger.warning("ignoring environment sensitivity overrides: %s", exc)
            return cfg

    @staticmethod
    def _env_floats(name: str) -> tuple[float, ...] | None:
        text = os.getenv(name)
        if not text:
            return None
        try:
            return tuple(float(part) for part in text.split(",") if part.strip())
        except ValueError:
            logger.warning("ignoring %s=%r: not a comma-separated list of numbers", name, text)
            return None


# ----------------------------
# Saved-deal translation
# ----------------------------


def translate_saved_deal(raw: dict[str, Any]) -> dict[str, Any]:
    """
    Flatten a dashboard saved-deal payload into DealInputs keys.

    Rent roll rows take their market rent from the matching unit type when one
    exists, else from `proFormaRent`. `isVacant` maps to `occupied`. A stored
    `totalCost` on rehab items is dropped; it is always recomputed.

    Saved holding costs are period totals, so they accrue over a single month
    unless the payload sets `holdingMonths`. The dashboard's 8% management fee
    and 10% rehab contingency apply unless the payload sets its own rates.
    """
    deal: dict[str, Any] = dict(raw.get("assumptions") or {})

    unit_types = {ut.get("id"): ut for ut in raw.get("unitTypes") or [] if isinstance(ut, dict)}
    rent_roll = []
    for i, row in enumerate(raw.get("rentRoll") or [], start=1):
        unit_type = unit_types.get(row.get("unitTypeId"))
        market_rent = unit_type.get("marketRent") if unit_type else None
        if market_rent is None:
            market_rent = row.get("marketRent", row.get("proFormaRent", 0.0))
        rent_roll.append(
            {
                "unitId": str(row.get("unit") or row.get("unitNumber") or row.get("unitId") or row.get("id") or i),
                "currentRent": row.get("currentRent") or 0.0,
                "marketRent": market_rent,
                "occupied": not bool(row.get("isVacant", False)),
            }
        )
    if rent_roll:
        deal["rentRoll"] = rent_roll

    sections = raw.get("rehabBudgetSections") or {}
    if sections:
        deal["rehabBudgetSections"] = {
            name: [{k: v for k, v in item.items() if k != "totalCost"} for item in items or []]
            for name, items in sections.items()
        }

    for src_key, dst_key in (
        ("expenses", "expenseBreakdown"),
        ("closingCosts", "closingCosts"),
        ("holdingCosts", "holdingCosts"),
        ("otherIncome", "otherIncome"),
        ("exitAnalysis", "exitAssumptions"),
    ):
        if raw.get(src_key):
            deal[dst_key] = raw[src_key]

    # Saved holding costs are totals for the whole holding period, not monthly amounts
    if "holdingCosts" in deal and not _has_key(deal, "holdingMonths", "holding_months"):
        deal["holdingMonths"] = 1

    # Rates the dashboard always applies
    for camel, snake, rate in (
        ("managementFeeRate", "management_fee_rate", SAVED_DEAL_MANAGEMENT_FEE_RATE),
        ("rehabContingencyRate", "rehab_contingency_rate", SAVED_DEAL_REHAB_CONTINGENCY_RATE),
    ):
        if not _has_key(deal, camel, snake):
            deal[camel] = rate

    return deal


def _has_key(data: dict[str, Any], *keys: str) -> bool:
    return any(k in data for k in keys)


# ----------------------------
# Convenience function
# ----------------------------


def load_inputs(path: str | Path | None = None) -> AppInputs:
    """Convenience wrapper for one-shot callers."""
    return InputsLoader().load(path)
