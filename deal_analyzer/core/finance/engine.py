# deal_analyzer/core/finance/engine.py
from __future__ import annotations

from deal_analyzer.core.debug import get_logger
from deal_analyzer.schemas.models import AnalysisOptions, DealInputs, DealMetrics

from .model import evaluate_deal
from .sensitivity import compute_scenarios, compute_sensitivity

logger = get_logger(__name__)


def run_deal_model(inputs: DealInputs, *, options: AnalysisOptions | None = None) -> DealMetrics:
    """
    Single entry point: DealInputs snapshot -> DealMetrics.

    Runs the base evaluation, then the IRR sensitivity grid and the scenario
    tables on the axes in `options` (defaults when None). Pure and synchronous;
    the only side effect is debug logging.

    Raises:
        InvalidInputError: only for caller mistakes the snapshot's own validation
            cannot catch (e.g. a non-positive grid axis passed directly).
    """
    opts = options or AnalysisOptions()
    base = evaluate_deal(inputs)
    grid = compute_sensitivity(inputs, opts.price_multipliers, opts.cap_rates)
    scenarios = compute_scenarios(inputs, base, opts)
    logger.debug(
        "deal evaluated: noi=%.2f arv=%.2f cash_out=%.2f irr=%s risk=%s",
        base.noi,
        base.arv,
        base.cash_out,
        base.irr,
        base.risk.level,
    )
    return base.model_copy(update={"sensitivity": grid, "scenarios": scenarios})
