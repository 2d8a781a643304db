# deal_analyzer/core/finance/__init__.py

from .aggregation import aggregate_expenses, aggregate_income
from .amortization import compute_debt_service, monthly_payment, remaining_balance
from .engine import run_deal_model
from .errors import DealModelError, InvalidInputError, validate_deal_inputs
from .model import evaluate_deal
from .returns import compute_returns, compute_risk_flags
from .sensitivity import compute_sensitivity
from .valuation import compute_valuation

__all__ = [
    "run_deal_model",
    "evaluate_deal",
    "compute_debt_service",
    "monthly_payment",
    "remaining_balance",
    "aggregate_income",
    "aggregate_expenses",
    "compute_valuation",
    "compute_returns",
    "compute_risk_flags",
    "compute_sensitivity",
    "DealModelError",
    "InvalidInputError",
    "validate_deal_inputs",
]
