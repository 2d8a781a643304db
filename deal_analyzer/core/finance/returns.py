# deal_analyzer/core/finance/returns.py
from __future__ import annotations

from deal_analyzer.schemas.models import ExitAnalysis, Metric, Returns, RiskAssessment, RiskFlags

OCCUPANCY_RISK_VACANCY = 0.10
LOW_EQUITY_MULTIPLE = 2.0
HIGH_BREAK_EVEN_OCCUPANCY = 0.90


def ratio(numerator: float, denominator: float, reason: str) -> Metric:
    """numerator / denominator, or an undefined Metric carrying `reason` when denominator <= 0."""
    if denominator <= 0:
        return Metric.undefined(reason)
    return Metric.ok(numerator / denominator)


def simple_irr(total_profit: float, total_cash_invested: float, hold_period_years: float) -> Metric:
    """
    Compounded annual return over the hold period:

        irr = (total_profit / total_cash_invested) ^ (1 / hold_period_years) - 1

    A fractional power of a non-positive base has no real value, so a loss (or a
    break-even) is reported as undefined rather than NaN.
    """
    if total_cash_invested <= 0:
        return Metric.undefined("no cash invested")
    if hold_period_years <= 0:
        return Metric.undefined("hold period must be positive")
    base = total_profit / total_cash_invested
    if base <= 0:
        return Metric.undefined("total profit is not positive")
    return Metric.ok(base ** (1.0 / hold_period_years) - 1.0)


def compute_returns(
    noi: float,
    annual_debt_service_post_refi: float,
    cash_out: float,
    total_cash_invested: float,
    hold_period_years: float,
    *,
    loan_amount: float = 0.0,
    arv: float = 0.0,
    all_in_cost: float = 0.0,
) -> Returns:
    """
    Post-refinance return metrics.

    Undefined cases never raise:
      - DSCR with no debt service -> Metric.no_debt()
      - cash-on-cash when refinance proceeds returned all invested cash -> undefined
      - IRR with a non-positive profit ratio -> undefined
    """
    net_cash_flow = noi - annual_debt_service_post_refi

    if annual_debt_service_post_refi <= 0:
        dscr = Metric.no_debt()
    else:
        dscr = Metric.ok(noi / annual_debt_service_post_refi)

    total_profit = cash_out + net_cash_flow * hold_period_years
    cash_left_in_deal = total_cash_invested - cash_out

    return Returns(
        net_cash_flow=net_cash_flow,
        cash_on_cash_return=ratio(net_cash_flow, cash_left_in_deal, "no cash left in the deal after refinance"),
        dscr=dscr,
        irr=simple_irr(total_profit, total_cash_invested, hold_period_years),
        total_profit=total_profit,
        ltv=ratio(loan_amount, arv, "ARV is not positive"),
        ltc=ratio(loan_amount, all_in_cost, "all-in cost is not positive"),
    )


def compute_risk_flags(arv: float, all_in_cost: float, dscr: Metric, dscr_threshold: float, vacancy_rate: float) -> RiskFlags:
    return RiskFlags(
        is_speculative=arv < all_in_cost,
        dscr_warning=dscr.is_defined and dscr.or_else(0.0) < dscr_threshold,
        occupancy_risk=vacancy_rate > OCCUPANCY_RISK_VACANCY,
    )


def assess_risk(
    flags: RiskFlags,
    *,
    equity_multiple: Metric,
    cash_out: float,
    capital_required: float,
    break_even_occupancy: Metric,
) -> RiskAssessment:
    """
    Weighted warning score:
      +2 equity multiple below 2.0x
      +2 DSCR below threshold
      +1 cash-out below capital required
      +1 break-even occupancy above 90%
    Level: High at >= 3, Moderate at >= 1, else Low. Speculative and
    occupancy flags are reported as warnings without weight.
    """
    score = 0
    warnings: list[str] = []

    if equity_multiple.is_defined and equity_multiple.or_else(0.0) < LOW_EQUITY_MULTIPLE:
        score += 2
        warnings.append("Low equity multiple")
    if flags.dscr_warning:
        score += 2
        warnings.append("DSCR below threshold")
    if cash_out < capital_required:
        score += 1
        warnings.append("Cash-out less than capital invested")
    if break_even_occupancy.is_defined and break_even_occupancy.or_else(0.0) > HIGH_BREAK_EVEN_OCCUPANCY:
        score += 1
        warnings.append("High break-even occupancy")
    if flags.is_speculative:
        warnings.append("ARV below all-in cost")
    if flags.occupancy_risk:
        warnings.append("Vacancy above 10%")

    level = "High" if score >= 3 else "Moderate" if score >= 1 else "Low"
    return RiskAssessment(score=score, level=level, warnings=warnings, flags=flags)


def compute_exit(
    arv: float,
    sale_factor: float,
    sale_costs_percent: float,
    debt_payoff: float,
    net_cash_flow: float,
    hold_period_years: float,
    capital_required: float,
) -> ExitAnalysis:
    """Sale at the end of the hold period."""
    sale_price = arv * sale_factor
    sale_costs = sale_price * sale_costs_percent
    net_proceeds = sale_price - sale_costs - debt_payoff
    cash_flow_over_hold = net_cash_flow * hold_period_years
    total_return = net_proceeds + cash_flow_over_hold
    return ExitAnalysis(
        sale_price=sale_price,
        sale_costs=sale_costs,
        debt_payoff=debt_payoff,
        net_proceeds=net_proceeds,
        cash_flow_over_hold=cash_flow_over_hold,
        total_return=total_return,
        roi_on_sale=ratio(total_return - capital_required, capital_required, "no capital required"),
    )
