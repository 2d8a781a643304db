# tests/utils.py
from __future__ import annotations

from typing import Any

from deal_analyzer.inputs.samples import (
    sample_closing_costs,
    sample_expenses,
    sample_holding_costs,
    sample_rehab_sections,
)
from deal_analyzer.schemas.models import DealInputs, ExitAssumptions, RehabLineItem, RentRollUnit

# -----------------------------
# Scenario constants
# -----------------------------

SCENARIO_PRICE = 1_500_000.0
SCENARIO_UNITS = 8
SCENARIO_MARKET_RENT = 2_700.0  # 8 x 2,700 = 21,600 / month
SCENARIO_GROSS = 259_200.0
SCENARIO_EGI = 246_240.0
SCENARIO_OPEX = 122_000.0
SCENARIO_NOI = 124_240.0
SCENARIO_ARV = 124_240.0 / 0.055
SCENARIO_REHAB = 160_000.0


# -----------------------------
# Factories
# -----------------------------


def make_rent_roll(
    num_units: int = SCENARIO_UNITS,
    market_rent: float = SCENARIO_MARKET_RENT,
    occupied: bool = True,
) -> tuple[RentRollUnit, ...]:
    return tuple(
        RentRollUnit(unit_id=str(i), current_rent=market_rent - 200.0, market_rent=market_rent, occupied=occupied)
        for i in range(1, num_units + 1)
    )


def make_rehab_item(category: str = "Windows", per_unit_cost: float = 3_750.0, quantity: float = 8) -> RehabLineItem:
    return RehabLineItem(category=category, per_unit_cost=per_unit_cost, quantity=quantity)


def make_exit(sale_factor: float = 1.0, sale_costs_percent: float = 0.06, hold_period_years: float = 2.0) -> ExitAssumptions:
    return ExitAssumptions(sale_factor=sale_factor, sale_costs_percent=sale_costs_percent, hold_period_years=hold_period_years)


def make_deal_inputs(**overrides: Any) -> DealInputs:
    """
    The reference scenario: 1.5M purchase, 80% loan, 160k rehab, 5.5% cap,
    5% vacancy, 8 units at 21,600/month, 122k opex. Keyword overrides use
    snake_case field names.
    """
    fields: dict[str, Any] = {
        "unit_count": SCENARIO_UNITS,
        "purchase_price": SCENARIO_PRICE,
        "loan_percentage": 0.80,
        "interest_rate": 0.0875,
        "loan_term_years": 2,
        "vacancy_rate": 0.05,
        "market_cap_rate": 0.055,
        "refinance_ltv": 0.75,
        "refinance_interest_rate": 0.065,
        "refinance_closing_cost_percent": 0.02,
        "dscr_threshold": 1.25,
        "rent_roll": make_rent_roll(),
        "expense_breakdown": sample_expenses(),
        "closing_costs": sample_closing_costs(),
        "holding_costs": sample_holding_costs(),
        "rehab_budget_sections": sample_rehab_sections(),
        "exit_assumptions": make_exit(),
    }
    fields.update(overrides)
    return DealInputs(**fields)


def make_all_cash_inputs(**overrides: Any) -> DealInputs:
    """No acquisition loan and no refinance: a deal with zero debt service."""
    base: dict[str, Any] = {"loan_percentage": 0.0, "refinance_ltv": 0.0}
    base.update(overrides)
    return make_deal_inputs(**base)
