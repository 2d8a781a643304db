# deal_analyzer/core/finance/aggregation.py
from __future__ import annotations

from collections.abc import Iterable, Mapping

from deal_analyzer.schemas.models import IncomeSummary, RehabLineItem, RentRollUnit

from .errors import InvalidInputError


def aggregate_income(
    rent_roll: Iterable[RentRollUnit],
    vacancy_rate: float,
    other_income: Mapping[str, float] | None = None,
) -> IncomeSummary:
    """
    Annualize the rent roll.

    Gross counts every configured unit at market rent; current occupancy does not
    reduce it. Vacancy is applied once, as a single rate.
    """
    if not 0.0 <= vacancy_rate <= 1.0:
        raise InvalidInputError.for_field("vacancy_rate", "must be between 0 and 1")

    gross = sum(u.market_rent for u in rent_roll) * 12.0
    vacancy_loss = gross * vacancy_rate
    other = sum_costs(other_income or {}, field="other_income", allow_negative=False)
    return IncomeSummary(
        gross_rental_income=gross,
        vacancy_loss=vacancy_loss,
        other_income=other,
        effective_gross_income=gross - vacancy_loss + other,
    )


def aggregate_expenses(expense_breakdown: Mapping[str, float]) -> float:
    """Total annual operating expenses. Every category must be >= 0."""
    return sum_costs(expense_breakdown, field="expense_breakdown", allow_negative=False)


def sum_costs(costs: Mapping[str, float], *, field: str = "costs", allow_negative: bool = True) -> float:
    """Sum a category -> amount mapping, optionally rejecting negative entries (credits)."""
    if not allow_negative:
        bad = sorted(name for name, amount in costs.items() if amount < 0)
        if bad:
            raise InvalidInputError([(f"{field}.{name}", "must be >= 0") for name in bad])
    return float(sum(costs.values()))


def rehab_subtotal(sections: Mapping[str, Iterable[RehabLineItem]]) -> float:
    return float(sum(item.total_cost for items in sections.values() for item in items))


def total_rehab(
    sections: Mapping[str, Iterable[RehabLineItem]],
    contingency_rate: float = 0.0,
    fallback: float = 0.0,
) -> float:
    """
    Rehab budget including contingency.

    The itemized sections win; the lump-sum `fallback` is used only when no
    section carries a line item.
    """
    subtotal = rehab_subtotal(sections) if any(True for items in sections.values() for _ in items) else fallback
    return subtotal * (1.0 + contingency_rate)


def total_holding_costs(monthly_costs: Mapping[str, float], months: int) -> float:
    """Monthly holding costs accrued over the holding period."""
    return sum_costs(monthly_costs, field="holding_costs", allow_negative=False) * max(months, 0)
