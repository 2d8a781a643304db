# deal_analyzer/core/finance/valuation.py
from __future__ import annotations

from deal_analyzer.schemas.models import Valuation

from .errors import InvalidInputError


def compute_valuation(
    effective_gross_income: float,
    total_operating_expenses: float,
    market_cap_rate: float,
    purchase_price: float,
    loan_percentage: float,
    refinance_ltv: float,
    refinance_closing_cost_percent: float,
) -> Valuation:
    """
    NOI -> ARV -> refinance sizing -> cash-out.

    Rules:
      - ARV = NOI / market cap rate. A non-positive cap rate is rejected
        (DealInputs validation normally stops it upstream).
      - The refinance loan is sized off ARV and floored at zero: a negative-NOI
        deal supports no permanent loan.
      - Cash-out may be negative, meaning the owner brings cash to the refinance.
    """
    if market_cap_rate <= 0:
        raise InvalidInputError.for_field("market_cap_rate", "must be > 0 to derive ARV")

    noi = effective_gross_income - total_operating_expenses
    arv = noi / market_cap_rate

    loan_amount = purchase_price * loan_percentage
    refinance_loan_amount = max(0.0, arv * refinance_ltv)
    refinance_closing_costs = refinance_loan_amount * refinance_closing_cost_percent
    cash_out = refinance_loan_amount - loan_amount - refinance_closing_costs

    return Valuation(
        noi=noi,
        arv=arv,
        loan_amount=loan_amount,
        refinance_loan_amount=refinance_loan_amount,
        refinance_closing_costs=refinance_closing_costs,
        cash_out=cash_out,
    )
