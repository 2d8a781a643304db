# deal_analyzer/inputs/samples.py
"""Canonical sample deal: an 8-unit value-add acquisition with a cash-out refinance."""

from __future__ import annotations

from deal_analyzer.schemas.models import DealInputs, ExitAssumptions, RehabLineItem, RentRollUnit

SAMPLE_UNIT_COUNT = 8


def sample_rent_roll(unit_count: int = SAMPLE_UNIT_COUNT, market_rent: float = 2700.0) -> tuple[RentRollUnit, ...]:
    """Uniform rent roll; in-place rents sit $200 below market."""
    return tuple(
        RentRollUnit(unit_id=str(i), current_rent=market_rent - 200.0, market_rent=market_rent, occupied=True)
        for i in range(1, unit_count + 1)
    )


def sample_expenses() -> dict[str, float]:
    # Annual; totals 122,000
    return {
        "propertyTax": 36_000.0,
        "insurance": 17_000.0,
        "maintenance": 24_000.0,
        "waterSewerTrash": 12_000.0,
        "capitalReserves": 9_600.0,
        "utilities": 7_200.0,
        "other": 16_200.0,
    }


def sample_rehab_sections(units: int = SAMPLE_UNIT_COUNT) -> dict[str, tuple[RehabLineItem, ...]]:
    # Totals 160,000 for 8 units
    def item(category: str, cost: float, qty: float) -> RehabLineItem:
        return RehabLineItem(category=category, per_unit_cost=cost, quantity=qty)

    return {
        "exterior": (
            item("Demolition", 1_500.0, units),
            item("Permits", 5_000.0, 1),
            item("Windows", 3_750.0, units),
            item("Landscaping", 5_000.0, 1),
        ),
        "generalInterior": (
            item("Drywall", 3_500.0, units),
            item("Flooring", 2_500.0, units),
            item("Paint", 1_000.0, units),
        ),
        "kitchens": (
            item("Cabinets", 2_250.0, units),
            item("Appliances", 1_000.0, units),
        ),
        "bathrooms": (
            item("Vanity/Mirror", 650.0, units),
            item("Tile", 1_250.0, units),
            item("Toilet", 350.0, units),
        ),
        "finishings": (item("Fixtures", 1_000.0, units),),
    }


def sample_closing_costs() -> dict[str, float]:
    return {
        "titleInsurance": 4_500.0,
        "appraisalFee": 800.0,
        "legalFees": 2_500.0,
        "transferTax": 8_000.0,
        "miscellaneous": 2_200.0,
        "sellerCredit": -5_000.0,
    }


def sample_holding_costs() -> dict[str, float]:
    # Monthly
    return {"electric": 200.0, "water": 150.0, "gas": 100.0}


def build_sample_inputs() -> DealInputs:
    """Return the baseline deal used for demos and tests."""
    return DealInputs(
        unit_count=SAMPLE_UNIT_COUNT,
        purchase_price=1_500_000.0,
        loan_percentage=0.80,
        interest_rate=0.0875,
        loan_term_years=2,
        acquisition_payment_mode="interest-only",
        vacancy_rate=0.05,
        market_cap_rate=0.055,
        refinance_ltv=0.75,
        refinance_interest_rate=0.065,
        refinance_closing_cost_percent=0.02,
        refinance_term_years=30,
        dscr_threshold=1.25,
        rent_roll=sample_rent_roll(),
        expense_breakdown=sample_expenses(),
        closing_costs=sample_closing_costs(),
        holding_costs=sample_holding_costs(),
        rehab_budget_sections=sample_rehab_sections(),
        exit_assumptions=ExitAssumptions(sale_factor=1.0, sale_costs_percent=0.06, hold_period_years=2),
    )
