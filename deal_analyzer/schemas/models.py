# deal_analyzer/schemas/models.py

from __future__ import annotations

import math
from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

PaymentMode = Literal["interest-only", "amortizing"]
RiskLevel = Literal["Low", "Moderate", "High"]

DEFAULT_PRICE_MULTIPLIERS: tuple[float, ...] = (0.90, 0.95, 1.00, 1.05, 1.10)
DEFAULT_SENSITIVITY_CAP_RATES: tuple[float, ...] = (0.045, 0.05, 0.055, 0.06, 0.065)
DEFAULT_RENT_MULTIPLIERS: tuple[float, ...] = (0.90, 0.95, 1.00, 1.05, 1.10)
DEFAULT_VALUATION_CAP_RATES: tuple[float, ...] = (0.04, 0.045, 0.05, 0.055, 0.06)
DEFAULT_IMPACT_RATES: tuple[float, ...] = (0.035, 0.04, 0.045, 0.05, 0.055)


class _Snapshot(BaseModel):
    """
    Immutable base for inputs and outputs.

    Accepts the original UI's camelCase keys as well as snake_case names, and
    rejects NaN/Infinity so no non-finite number enters the model.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
        extra="ignore",
    )


def _non_negative_amounts(label: str, amounts: Mapping[str, float]) -> Mapping[str, float]:
    bad = [name for name, amount in amounts.items() if amount < 0]
    if bad:
        raise ValueError(f"{label} amounts must be >= 0 (negative: {', '.join(sorted(bad))})")
    return amounts


def _empty_mapping() -> Mapping[str, Any]:
    return MappingProxyType({})


# =========================
# Tagged metric
# =========================


class MetricStatus(str, Enum):
    OK = "ok"
    UNDEFINED = "undefined"
    NO_DEBT = "no_debt"


class Metric(BaseModel):
    """
    A ratio that may be mathematically undefined for the given inputs.

    Callers render `format()` (which yields "N/A" for anything not ok) instead of
    formatting a raw float, so NaN/Infinity never reach a report or an export.
    """

    value: float | None = Field(None, description="Metric value when status is 'ok'; None otherwise.")
    status: MetricStatus = Field(MetricStatus.OK, description="'ok', 'undefined', or 'no_debt'.")
    reason: str | None = Field(None, description="Why the metric is not defined (None when ok).")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def ok(cls, value: float) -> Metric:
        value = float(value)
        if not math.isfinite(value):
            return cls.undefined("non-finite result")
        return cls(value=value)

    @classmethod
    def undefined(cls, reason: str) -> Metric:
        return cls(value=None, status=MetricStatus.UNDEFINED, reason=reason)

    @classmethod
    def no_debt(cls) -> Metric:
        return cls(value=None, status=MetricStatus.NO_DEBT, reason="no debt service")

    @property
    def is_defined(self) -> bool:
        return self.status is MetricStatus.OK

    def or_else(self, default: float) -> float:
        return self.value if self.value is not None and self.is_defined else default

    def format(self, spec: str = ".2%", na: str = "N/A") -> str:
        if not self.is_defined or self.value is None:
            return na
        return format(self.value, spec)

    def __str__(self) -> str:
        return self.format(".4f")


# =========================
# Core inputs
# =========================


class RentRollUnit(_Snapshot):
    """One unit on the rent roll. Rents are MONTHLY."""

    unit_id: str = Field(..., description="Unit label (e.g., '1', '2A').")
    current_rent: float = Field(0.0, ge=0, description="In-place monthly rent.")
    market_rent: float = Field(..., ge=0, description="Monthly market (pro forma) rent used for underwriting.")
    occupied: bool = Field(True, description="Whether the unit is currently leased. Does not reduce gross income.")


class RehabLineItem(_Snapshot):
    """One rehab budget line. total_cost is derived, never stored."""

    category: str = Field(..., description="Line item label (e.g., 'Windows').")
    per_unit_cost: float = Field(..., ge=0, description="Cost per unit of quantity.")
    quantity: float = Field(1.0, ge=0, description="Number of units of work (doors, windows, apartments).")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_cost(self) -> float:
        return self.per_unit_cost * self.quantity


class ExitAssumptions(_Snapshot):
    """Sale assumptions at the end of the hold period."""

    sale_factor: float = Field(1.0, gt=0, description="Multiplier applied to ARV to get the sale price.")
    sale_costs_percent: float = Field(0.06, ge=0, le=1, description="Broker, legal and closing fees as a fraction of sale price.")
    hold_period_years: float = Field(2.0, gt=0, description="Years held after refinance before sale.")


class DealInputs(_Snapshot):
    """
    Immutable snapshot of every underwriting input. A new instance is built on
    every edit; metrics are recomputed from scratch.
    """

    unit_count: int = Field(..., ge=0, description="Number of units in the property.")
    purchase_price: float = Field(..., ge=0, description="Contract price.")
    rehab_cost: float = Field(
        0.0, ge=0, description="Lump-sum rehab estimate, used only when no rehab budget sections are supplied."
    )

    # Acquisition (bridge) financing
    loan_percentage: float = Field(0.80, ge=0, le=1, description="Acquisition loan as a fraction of purchase price.")
    interest_rate: float = Field(0.0875, ge=0, description="Acquisition loan annual rate as a fraction.")
    loan_term_years: int = Field(2, gt=0, description="Acquisition loan term in years.")
    acquisition_payment_mode: PaymentMode = Field("interest-only", description="Bridge loan payment mode.")

    # Operations / market
    vacancy_rate: float = Field(0.05, ge=0, le=1, description="Vacancy applied as a single rate to gross rent.")
    market_cap_rate: float = Field(0.055, gt=0, description="Market cap rate used to derive ARV from NOI.")
    management_fee_rate: float = Field(0.0, ge=0, le=1, description="Management fee as a fraction of effective gross income.")

    # Refinance (permanent loan)
    refinance_ltv: float = Field(0.75, ge=0, le=1, alias="refinanceLTV", description="Refinance loan as a fraction of ARV.")
    refinance_interest_rate: float = Field(0.065, ge=0, description="Permanent loan annual rate.")
    refinance_closing_cost_percent: float = Field(0.02, ge=0, description="Refinance closing costs as a fraction of the new loan.")
    refinance_term_years: int = Field(30, gt=0, description="Permanent loan amortization term in years.")

    dscr_threshold: float = Field(1.25, gt=0, description="Lender minimum DSCR.")

    rent_roll: tuple[RentRollUnit, ...] = Field(default_factory=tuple, description="Ordered per-unit rents.")
    other_income: Mapping[str, float] = Field(default_factory=_empty_mapping, description="Annual non-rent income by category.")
    expense_breakdown: Mapping[str, float] = Field(
        default_factory=_empty_mapping, description="Annual operating expenses by category."
    )
    closing_costs: Mapping[str, float] = Field(
        default_factory=_empty_mapping, description="One-time acquisition costs by category. Negative entries are credits."
    )
    holding_costs: Mapping[str, float] = Field(default_factory=_empty_mapping, description="MONTHLY holding costs by category.")
    holding_months: int | None = Field(
        None, ge=0, description="Months holding costs accrue. None means the acquisition loan term."
    )
    rehab_budget_sections: Mapping[str, tuple[RehabLineItem, ...]] = Field(
        default_factory=_empty_mapping, description="Rehab budget grouped by section (exterior, kitchens, ...)."
    )
    rehab_contingency_rate: float = Field(0.0, ge=0, le=1, description="Contingency buffer on the rehab subtotal.")
    exit_assumptions: ExitAssumptions = Field(default_factory=ExitAssumptions, description="Sale assumptions.")

    @field_validator("expense_breakdown")
    @classmethod
    def _expenses_non_negative(cls, v: Mapping[str, float]) -> Mapping[str, float]:
        return _non_negative_amounts("expense", v)

    @field_validator("holding_costs")
    @classmethod
    def _holding_non_negative(cls, v: Mapping[str, float]) -> Mapping[str, float]:
        return _non_negative_amounts("holding cost", v)

    @field_validator("other_income")
    @classmethod
    def _other_income_non_negative(cls, v: Mapping[str, float]) -> Mapping[str, float]:
        return _non_negative_amounts("other income", v)

    # Read-only views so the snapshot cannot be edited through its mappings
    @field_validator("other_income", "expense_breakdown", "closing_costs", "holding_costs", "rehab_budget_sections")
    @classmethod
    def _freeze_mapping(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(v))

    @field_serializer("other_income", "expense_breakdown", "closing_costs", "holding_costs", "rehab_budget_sections")
    def _dump_mapping(self, v: Mapping[str, Any]) -> dict[str, Any]:
        return dict(v)

    @property
    def effective_holding_months(self) -> int:
        return self.holding_months if self.holding_months is not None else self.loan_term_years * 12


class AnalysisOptions(_Snapshot):
    """Axes for the sensitivity grid and scenario tables."""

    price_multipliers: tuple[float, ...] = Field(DEFAULT_PRICE_MULTIPLIERS, description="Purchase price multipliers (grid rows).")
    cap_rates: tuple[float, ...] = Field(DEFAULT_SENSITIVITY_CAP_RATES, description="Market cap rates (grid columns).")
    rent_multipliers: tuple[float, ...] = Field(DEFAULT_RENT_MULTIPLIERS, description="Rent multipliers for the rent table.")
    valuation_cap_rates: tuple[float, ...] = Field(DEFAULT_VALUATION_CAP_RATES, description="Cap rates for the valuation table.")
    interest_rates: tuple[float, ...] = Field(DEFAULT_IMPACT_RATES, description="Acquisition rates for the rate impact table.")

    @field_validator("price_multipliers", "cap_rates", "rent_multipliers", "valuation_cap_rates")
    @classmethod
    def _positive(cls, v: tuple[float, ...]) -> tuple[float, ...]:
        if any(x <= 0 for x in v):
            raise ValueError("values must be > 0")
        return v

    @field_validator("interest_rates")
    @classmethod
    def _non_negative(cls, v: tuple[float, ...]) -> tuple[float, ...]:
        if any(x < 0 for x in v):
            raise ValueError("rates must be >= 0")
        return v


# =========================
# Computed outputs
# =========================


class DebtService(_Snapshot):
    monthly_payment: float = Field(..., description="Monthly payment (interest-only or P&I).")
    annual_payment: float = Field(..., description="12 x monthly payment.")


class IncomeSummary(_Snapshot):
    gross_rental_income: float = Field(..., description="Annualized market rent across all units, before vacancy.")
    vacancy_loss: float = Field(..., description="gross_rental_income x vacancy_rate.")
    other_income: float = Field(0.0, description="Annual non-rent income.")
    effective_gross_income: float = Field(..., description="Gross less vacancy plus other income.")


class Valuation(_Snapshot):
    noi: float = Field(..., description="Net Operating Income: EGI - operating expenses.")
    arv: float = Field(..., description="After-Repair Value: NOI / market cap rate.")
    loan_amount: float = Field(..., description="Acquisition loan: purchase price x loan percentage.")
    refinance_loan_amount: float = Field(..., description="Permanent loan sized at refinance LTV of ARV (floored at 0).")
    refinance_closing_costs: float = Field(..., description="Refinance closing costs.")
    cash_out: float = Field(..., description="Refi loan - acquisition loan - refi closing costs. Negative means cash in.")


class RiskFlags(_Snapshot):
    is_speculative: bool = Field(..., description="ARV below all-in cost.")
    dscr_warning: bool = Field(..., description="DSCR below the lender threshold.")
    occupancy_risk: bool = Field(..., description="Vacancy rate above 10%.")


class Returns(_Snapshot):
    net_cash_flow: float = Field(..., description="NOI - post-refinance annual debt service.")
    cash_on_cash_return: Metric = Field(..., description="Net cash flow / cash left in the deal after refinance.")
    dscr: Metric = Field(..., description="NOI / annual debt service; 'no_debt' when there is none.")
    irr: Metric = Field(..., description="(total_profit / total_cash_invested)^(1/hold) - 1.")
    total_profit: float = Field(..., description="Cash-out + net cash flow over the hold period.")
    ltv: Metric = Field(..., description="Acquisition loan / ARV.")
    ltc: Metric = Field(..., description="Acquisition loan / all-in cost.")


class RiskAssessment(_Snapshot):
    score: int = Field(..., ge=0, description="Weighted count of triggered warnings.")
    level: RiskLevel = Field(..., description="'Low', 'Moderate' or 'High'.")
    warnings: list[str] = Field(default_factory=list, description="Human-readable triggered warnings.")
    flags: RiskFlags = Field(..., description="Derived boolean risk flags.")


class ExitAnalysis(_Snapshot):
    sale_price: float = Field(..., description="ARV x sale factor.")
    sale_costs: float = Field(..., description="Sale price x sale costs percent.")
    debt_payoff: float = Field(..., description="Outstanding permanent loan balance at sale.")
    net_proceeds: float = Field(..., description="Sale price - sale costs - debt payoff.")
    cash_flow_over_hold: float = Field(..., description="Net cash flow x hold period years.")
    total_return: float = Field(..., description="Net proceeds + cash flow over hold.")
    roi_on_sale: Metric = Field(..., description="(total return - capital required) / capital required.")


class SensitivityGrid(_Snapshot):
    """grid[i][j] = IRR at purchase_price x price_multipliers[i] and market cap rate cap_rates[j]."""

    price_multipliers: list[float] = Field(..., description="Row axis.")
    cap_rates: list[float] = Field(..., description="Column axis.")
    irr: list[list[Metric]] = Field(..., description="IRR per (price multiplier, cap rate) cell.")

    def cell(self, price_multiplier: float, cap_rate: float) -> Metric:
        i = self.price_multipliers.index(price_multiplier)
        j = self.cap_rates.index(cap_rate)
        return self.irr[i][j]


class RentSensitivityRow(_Snapshot):
    rent_multiplier: float
    noi: float
    net_cash_flow: float


class CapRateValuationRow(_Snapshot):
    cap_rate: float
    implied_value: float
    profit: float = Field(..., description="Implied value - all-in cost.")


class RateImpactRow(_Snapshot):
    interest_rate: float
    monthly_payment: float
    annual_payment: float
    net_cash_flow: float = Field(..., description="NOI - annual payment on the acquisition loan at this rate.")


class ScenarioTables(_Snapshot):
    rent: list[RentSensitivityRow] = Field(default_factory=list)
    cap_rate: list[CapRateValuationRow] = Field(default_factory=list)
    interest_rate: list[RateImpactRow] = Field(default_factory=list)


class DealMetrics(_Snapshot):
    """Complete underwriting output. Wholly derived from one DealInputs snapshot."""

    # Income / expenses
    gross_rental_income: float
    vacancy_loss: float
    other_income: float
    effective_gross_income: float
    management_fee: float
    total_operating_expenses: float
    noi: float

    # Costs
    total_rehab: float
    total_closing_costs: float
    total_holding_costs: float
    down_payment: float
    total_cash_invested: float = Field(..., description="Down payment + closing + holding + rehab.")
    all_in_cost: float = Field(..., description="Purchase price + rehab + closing + holding.")
    capital_required: float = Field(..., description="Down payment + closing costs.")

    # Valuation / refinance
    arv: float
    loan_amount: float
    refinance_loan_amount: float
    refinance_closing_costs: float
    cash_out: float

    # Debt service
    acquisition_debt_service: DebtService = Field(..., description="Bridge loan payments during the hold-to-refi period.")
    monthly_debt_service: float = Field(..., description="Post-refinance monthly P&I.")
    annual_debt_service: float = Field(..., description="Post-refinance annual P&I.")

    # Returns
    net_cash_flow: float
    cash_on_cash_return: Metric
    cap_rate: Metric = Field(..., description="Going-in cap rate: NOI / purchase price.")
    dscr: Metric
    ltv: Metric
    ltc: Metric
    irr: Metric
    total_profit: float
    equity_multiple: Metric
    break_even_occupancy: Metric
    operating_expense_ratio: Metric
    price_per_unit: Metric

    risk: RiskAssessment
    exit: ExitAnalysis
    sensitivity: SensitivityGrid | None = Field(None, description="IRR grid; None for per-cell evaluations.")
    scenarios: ScenarioTables | None = Field(None, description="Rent/cap-rate/interest tables; None for per-cell evaluations.")
