# deal_analyzer/core/finance/sensitivity.py
"""
Sensitivity grid and scenario tables.

Every cell is an independent recomputation from a copy of the base snapshot;
no state is shared between cells, so evaluation order does not matter.
"""

from __future__ import annotations

from collections.abc import Sequence

from deal_analyzer.core.debug import get_logger
from deal_analyzer.schemas.models import (
    AnalysisOptions,
    CapRateValuationRow,
    DealInputs,
    DealMetrics,
    RateImpactRow,
    RentSensitivityRow,
    ScenarioTables,
    SensitivityGrid,
)

from .amortization import compute_debt_service
from .errors import InvalidInputError
from .model import evaluate_deal

logger = get_logger(__name__)


def _check_axis(name: str, values: Sequence[float]) -> list[float]:
    bad = [v for v in values if v <= 0]
    if bad:
        raise InvalidInputError.for_field(name, f"values must be > 0 (got {bad})")
    return [float(v) for v in values]


def compute_sensitivity(
    base_inputs: DealInputs,
    price_multipliers: Sequence[float],
    cap_rates: Sequence[float],
) -> SensitivityGrid:
    """
    IRR across purchase price and market cap rate perturbations.

    grid.irr[i][j] is the IRR with purchase_price * price_multipliers[i] and
    market_cap_rate = cap_rates[j], every other input held at its base value.
    """
    rows = _check_axis("price_multipliers", price_multipliers)
    cols = _check_axis("cap_rates", cap_rates)

    grid = [
        [
            evaluate_deal(
                base_inputs.model_copy(
                    update={"purchase_price": base_inputs.purchase_price * m, "market_cap_rate": cap}
                )
            ).irr
            for cap in cols
        ]
        for m in rows
    ]
    logger.debug("sensitivity grid computed: %dx%d", len(rows), len(cols))
    return SensitivityGrid(price_multipliers=rows, cap_rates=cols, irr=grid)


def rent_sensitivity(base_inputs: DealInputs, rent_multipliers: Sequence[float]) -> list[RentSensitivityRow]:
    """NOI and net cash flow with every market rent scaled by each multiplier."""
    out: list[RentSensitivityRow] = []
    for m in _check_axis("rent_multipliers", rent_multipliers):
        scaled = tuple(u.model_copy(update={"market_rent": u.market_rent * m}) for u in base_inputs.rent_roll)
        metrics = evaluate_deal(base_inputs.model_copy(update={"rent_roll": scaled}))
        out.append(RentSensitivityRow(rent_multiplier=m, noi=metrics.noi, net_cash_flow=metrics.net_cash_flow))
    return out


def cap_rate_valuation(base_metrics: DealMetrics, cap_rates: Sequence[float]) -> list[CapRateValuationRow]:
    """Implied value of the base NOI at each cap rate, and profit over the all-in cost."""
    out: list[CapRateValuationRow] = []
    for cap in _check_axis("valuation_cap_rates", cap_rates):
        value = base_metrics.noi / cap
        out.append(CapRateValuationRow(cap_rate=cap, implied_value=value, profit=value - base_metrics.all_in_cost))
    return out


def interest_rate_impact(
    base_inputs: DealInputs, base_metrics: DealMetrics, interest_rates: Sequence[float]
) -> list[RateImpactRow]:
    """Acquisition loan payment and resulting cash flow at alternative rates (amortizing over the loan term)."""
    out: list[RateImpactRow] = []
    for rate in interest_rates:
        if rate < 0:
            raise InvalidInputError.for_field("interest_rates", f"rates must be >= 0 (got {rate})")
        ds = compute_debt_service(base_metrics.loan_amount, rate, base_inputs.loan_term_years, "amortizing")
        out.append(
            RateImpactRow(
                interest_rate=rate,
                monthly_payment=ds.monthly_payment,
                annual_payment=ds.annual_payment,
                net_cash_flow=base_metrics.noi - ds.annual_payment,
            )
        )
    return out


def compute_scenarios(base_inputs: DealInputs, base_metrics: DealMetrics, options: AnalysisOptions) -> ScenarioTables:
    return ScenarioTables(
        rent=rent_sensitivity(base_inputs, options.rent_multipliers),
        cap_rate=cap_rate_valuation(base_metrics, options.valuation_cap_rates),
        interest_rate=interest_rate_impact(base_inputs, base_metrics, options.interest_rates),
    )
