# tests/__init__.py
"""
Expose common test utilities so tests can import directly:
    from tests import make_deal_inputs, make_rent_roll
"""

from .utils import make_all_cash_inputs, make_deal_inputs, make_rent_roll

__all__ = ["make_deal_inputs", "make_all_cash_inputs", "make_rent_roll"]
