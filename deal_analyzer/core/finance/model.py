# deal_analyzer/core/finance/model.py
from __future__ import annotations

from deal_analyzer.core.debug import get_logger
from deal_analyzer.schemas.models import DealInputs, DealMetrics

from .aggregation import aggregate_expenses, aggregate_income, sum_costs, total_holding_costs, total_rehab
from .amortization import compute_debt_service, remaining_balance
from .returns import assess_risk, compute_exit, compute_returns, compute_risk_flags, ratio
from .valuation import compute_valuation

logger = get_logger(__name__)


def evaluate_deal(inputs: DealInputs) -> DealMetrics:
    """
    Underwrite one deal snapshot (no sensitivity grid, no scenario tables).

    Pipeline:
      1) Cost roll-ups: rehab (+ contingency), closing costs, holding costs
         accrued over the holding period, down payment, cash invested, all-in cost.
      2) Income: annualized market rent, vacancy, other income -> EGI.
      3) Expenses: itemized breakdown + management fee on EGI.
      4) Valuation: NOI -> ARV -> refinance loan -> cash-out.
      5) Debt service: bridge loan (acquisition mode) and permanent loan (amortizing).
      6) Returns: cash flow, DSCR, cash-on-cash, IRR, LTV/LTC, equity multiple.
      7) Risk flags/score and exit analysis.

    Every step is a pure function of the snapshot; the result is recomputed
    from scratch on each call.
    """
    # 1) Costs
    rehab = total_rehab(inputs.rehab_budget_sections, inputs.rehab_contingency_rate, fallback=inputs.rehab_cost)
    closing = sum_costs(inputs.closing_costs, field="closing_costs")
    holding = total_holding_costs(inputs.holding_costs, inputs.effective_holding_months)

    # 2-3) Income & expenses
    income = aggregate_income(inputs.rent_roll, inputs.vacancy_rate, inputs.other_income)
    management_fee = income.effective_gross_income * inputs.management_fee_rate
    opex = aggregate_expenses(inputs.expense_breakdown) + management_fee

    # 4) Valuation
    val = compute_valuation(
        income.effective_gross_income,
        opex,
        inputs.market_cap_rate,
        inputs.purchase_price,
        inputs.loan_percentage,
        inputs.refinance_ltv,
        inputs.refinance_closing_cost_percent,
    )

    down_payment = inputs.purchase_price - val.loan_amount
    total_cash_invested = down_payment + closing + holding + rehab
    all_in_cost = inputs.purchase_price + rehab + closing + holding
    capital_required = down_payment + closing

    # 5) Debt service
    bridge = compute_debt_service(
        val.loan_amount, inputs.interest_rate, inputs.loan_term_years, inputs.acquisition_payment_mode
    )
    permanent = compute_debt_service(
        val.refinance_loan_amount, inputs.refinance_interest_rate, inputs.refinance_term_years, "amortizing"
    )

    # 6) Returns
    hold = inputs.exit_assumptions.hold_period_years
    ret = compute_returns(
        val.noi,
        permanent.annual_payment,
        val.cash_out,
        total_cash_invested,
        hold,
        loan_amount=val.loan_amount,
        arv=val.arv,
        all_in_cost=all_in_cost,
    )
    equity_multiple = ratio(val.cash_out + ret.net_cash_flow, total_cash_invested, "no cash invested")
    break_even = ratio(opex + permanent.annual_payment, income.gross_rental_income, "no gross rental income")
    expense_ratio = ratio(opex, income.effective_gross_income, "effective gross income is not positive")

    # 7) Risk & exit
    flags = compute_risk_flags(val.arv, all_in_cost, ret.dscr, inputs.dscr_threshold, inputs.vacancy_rate)
    risk = assess_risk(
        flags,
        equity_multiple=equity_multiple,
        cash_out=val.cash_out,
        capital_required=capital_required,
        break_even_occupancy=break_even,
    )
    payoff = remaining_balance(
        val.refinance_loan_amount,
        inputs.refinance_interest_rate,
        inputs.refinance_term_years,
        int(round(hold * 12)),
    )
    exit_ = compute_exit(
        val.arv,
        inputs.exit_assumptions.sale_factor,
        inputs.exit_assumptions.sale_costs_percent,
        payoff,
        ret.net_cash_flow,
        hold,
        capital_required,
    )

    for name, metric in (("irr", ret.irr), ("cash_on_cash_return", ret.cash_on_cash_return), ("dscr", ret.dscr)):
        if not metric.is_defined:
            logger.debug("%s not defined: %s", name, metric.reason)

    return DealMetrics(
        gross_rental_income=income.gross_rental_income,
        vacancy_loss=income.vacancy_loss,
        other_income=income.other_income,
        effective_gross_income=income.effective_gross_income,
        management_fee=management_fee,
        total_operating_expenses=opex,
        noi=val.noi,
        total_rehab=rehab,
        total_closing_costs=closing,
        total_holding_costs=holding,
        down_payment=down_payment,
        total_cash_invested=total_cash_invested,
        all_in_cost=all_in_cost,
        capital_required=capital_required,
        arv=val.arv,
        loan_amount=val.loan_amount,
        refinance_loan_amount=val.refinance_loan_amount,
        refinance_closing_costs=val.refinance_closing_costs,
        cash_out=val.cash_out,
        acquisition_debt_service=bridge,
        monthly_debt_service=permanent.monthly_payment,
        annual_debt_service=permanent.annual_payment,
        net_cash_flow=ret.net_cash_flow,
        cash_on_cash_return=ret.cash_on_cash_return,
        cap_rate=ratio(val.noi, inputs.purchase_price, "purchase price is not positive"),
        dscr=ret.dscr,
        ltv=ret.ltv,
        ltc=ret.ltc,
        irr=ret.irr,
        total_profit=ret.total_profit,
        equity_multiple=equity_multiple,
        break_even_occupancy=break_even,
        operating_expense_ratio=expense_ratio,
        price_per_unit=ratio(inputs.purchase_price, inputs.unit_count, "no units"),
        risk=risk,
        exit=exit_,
    )
