"""Plain-language summaries of affordability decisions and payoff plans"""

from typing import Callable, Dict

from obsidian_engine.domain.models import (
    AffordabilityCalculation,
    DebtInsights,
    DebtStrategy,
    Decision,
    PurchaseRequest,
    StrategyComparison,
)
from obsidian_engine.utils.money import format_money


def _explain_yes(calc: AffordabilityCalculation, purchase: PurchaseRequest) -> str:
    metrics, impact = calc.metrics, calc.impact
    return (
        f"Good news! This {format_money(purchase.amount)} {purchase.category} purchase looks affordable for you. "
        f"With {format_money(metrics.monthly_cashflow)} in monthly cashflow and "
        f"{metrics.emergency_fund_months:.1f} months of expenses saved, you'll still have "
        f"{format_money(impact.projected_cash_balance)} and {impact.months_of_buffer_remaining:.1f} months "
        "of buffer after this purchase."
    )


def _explain_conditional(calc: AffordabilityCalculation, purchase: PurchaseRequest) -> str:
    text = (
        f"This {format_money(purchase.amount)} purchase is possible, but with some caution. "
        "Your finances can technically support it, but it would leave you with only "
        f"{calc.impact.months_of_buffer_remaining:.1f} months of buffer."
    )
    if calc.recommendations:
        text += f" Consider: {calc.recommendations[0]}."
    return text


def _explain_defer(calc: AffordabilityCalculation, purchase: PurchaseRequest) -> str:
    text = (
        f"I'd recommend waiting on this {format_money(purchase.amount)} purchase. "
        "While it's not impossible, the timing isn't ideal. "
        f"Your current buffer of {calc.metrics.emergency_fund_months:.1f} months would drop significantly."
    )
    if calc.recommendations:
        text += f" Instead, {calc.recommendations[0].lower()}."
    return text


def _explain_no(calc: AffordabilityCalculation, purchase: PurchaseRequest) -> str:
    text = f"This {format_money(purchase.amount)} purchase isn't recommended right now."
    if calc.impact.projected_cash_balance < 0:
        text += " It would put your cash balance in the negative."
    elif calc.impact.months_of_buffer_remaining < 1:
        text += " It would leave you with less than a month of expenses as a safety net."
    if calc.recommendations:
        text += f" Here's what you can do instead: {'. '.join(calc.recommendations[:2])}."
    return text


_AFFORDABILITY_TEMPLATES: Dict[Decision, Callable[[AffordabilityCalculation, PurchaseRequest], str]] = {
    Decision.YES: _explain_yes,
    Decision.CONDITIONAL: _explain_conditional,
    Decision.DEFER: _explain_defer,
    Decision.NO: _explain_no,
}


def explain_affordability(calc: AffordabilityCalculation, purchase: PurchaseRequest) -> str:
    return _AFFORDABILITY_TEMPLATES[Decision(calc.decision)](calc, purchase)


def explain_payoff_plan(comparison: StrategyComparison, insights: DebtInsights) -> str:
    """Recommendation, timeline, first quick win and, for avalanche, where to aim extra payments"""
    strategy = DebtStrategy(comparison.recommended_strategy)
    parts = []

    if strategy == DebtStrategy.AVALANCHE:
        parts.append(
            f"The avalanche method is your best bet for paying off {format_money(insights.total_debt)} in debt. "
            "By targeting your highest-interest debt first, you'll save "
            f"{format_money(comparison.savings_vs_minimum)} in interest."
        )
    elif strategy == DebtStrategy.SNOWBALL:
        parts.append(
            "The snowball method is recommended for your situation. While you might pay a bit more in "
            "interest, the quick wins from paying off smaller debts first will help keep you motivated."
        )
    else:
        parts.append("A hybrid approach balances interest savings with psychological wins.")

    recommended = comparison.result_for(strategy)
    if recommended is not None:
        parts.append(
            f"Following this plan, you'll be debt-free in {recommended.total_months} months "
            f"(by {insights.debt_free_date})."
        )

    if insights.quick_wins:
        parts.append(f"Good news: {insights.quick_wins[0]}.")

    if strategy == DebtStrategy.AVALANCHE and insights.highest_apr_debt is not None:
        top = insights.highest_apr_debt
        parts.append(f"Start by focusing extra payments on your {top.name} ({top.apr:g}% APR).")

    return " ".join(parts)
