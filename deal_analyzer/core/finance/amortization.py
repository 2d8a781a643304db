# deal_analyzer/core/finance/amortization.py
from __future__ import annotations

import math

from deal_analyzer.schemas.models import DebtService, PaymentMode

from .errors import InvalidInputError

_EPS = 1e-6  # for floating cleanup


def monthly_payment(principal: float, annual_rate: float, term_years: int, mode: PaymentMode = "amortizing") -> float:
    """
    Monthly payment for a fixed-rate loan.

    Formula (amortizing, standard annuity):
        PMT = r * P / (1 - (1 + r)^-n)

    Where:
        P = principal
        r = monthly rate = annual_rate / 12
        n = number of monthly payments = term_years * 12

    The negative exponent keeps very high rates and very long terms finite:
    the payment tends to P * r instead of overflowing.

    Interest-only:
        PMT = P * r

    Edge cases (all return a number, never raise):
        - principal <= 0 or annual_rate < 0 -> 0.0 (all-cash deal)
        - amortizing with n <= 0 -> 0.0
        - amortizing with r == 0 (or below float resolution) -> principal / n
    """
    if principal <= 0 or annual_rate < 0:
        return 0.0

    r = annual_rate / 12.0
    if mode == "interest-only":
        return principal * r

    n = term_years * 12
    if n <= 0:
        return 0.0

    discount = 1.0 - (1.0 + r) ** (-n) if r > 0 else 0.0
    if discount <= 0:
        return principal / n
    return r * principal / discount


def compute_debt_service(principal: float, annual_rate: float, term_years: int, mode: PaymentMode) -> DebtService:
    """Monthly and annual debt service for one loan."""
    pmt = monthly_payment(principal, annual_rate, term_years, mode)
    if not math.isfinite(pmt * 12.0):
        raise InvalidInputError.for_field("annual_rate", f"debt service is not finite at rate {annual_rate!r}")
    return DebtService(monthly_payment=pmt, annual_payment=pmt * 12.0)


def remaining_balance(principal: float, annual_rate: float, term_years: int, months_elapsed: int) -> float:
    """
    Outstanding principal of an amortizing loan after `months_elapsed` payments.

    Closed form, written with non-positive exponents only:
        B_k = P * (1 - (1 + r)^(k - n)) / (1 - (1 + r)^-n)
    with the zero-rate case reducing to P * (1 - k / n). Clamped to [0, P].
    """
    if principal <= 0:
        return 0.0
    n = term_years * 12
    if n <= 0 or months_elapsed <= 0:
        return float(principal)
    k = min(months_elapsed, n)

    r = max(annual_rate, 0.0) / 12.0
    discount = 1.0 - (1.0 + r) ** (-n) if r > 0 else 0.0
    if discount <= 0:
        bal = principal * (1.0 - k / n)
    else:
        bal = principal * (1.0 - (1.0 + r) ** (k - n)) / discount

    # Clean tiny residual drift
    if bal < _EPS:
        return 0.0
    return min(bal, float(principal))
