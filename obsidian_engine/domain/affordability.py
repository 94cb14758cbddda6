"""Affordability engine - financial metrics, purchase impact and the final decision"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from obsidian_engine.domain import thresholds
from obsidian_engine.domain.amortization import (
    calculate_amortized_payment,
    estimate_minimum_payment,
    percent_of_balance_payment,
)
from obsidian_engine.domain.models import (
    AffordabilityCalculation,
    AffordabilityMetrics,
    Alternative,
    DebtAccount,
    DebtType,
    Decision,
    PaymentMethod,
    PurchaseImpact,
    PurchaseRequest,
    UserFinancialProfile,
)
from obsidian_engine.domain.rules import evaluate_affordability_rules, get_failed_rule_recommendations
from obsidian_engine.utils.money import format_money, format_percent, round_cents

MAX_ALTERNATIVES = 5


def _credit_cards(debts: List[DebtAccount]) -> List[DebtAccount]:
    return [d for d in debts if DebtType(d.type) == DebtType.CREDIT_CARD]


def _debt_to_income(monthly_debt_payments: float, monthly_income: float) -> float:
    """Annual minimum payments over annual income, 0 without income"""
    annual_income = monthly_income * 12
    if annual_income <= 0:
        return 0.0
    return monthly_debt_payments * 12 / annual_income


def calculate_credit_utilization(debts: List[DebtAccount]) -> float:
    """Card balances over card limits, counting only cards with a positive limit"""
    cards = [d for d in _credit_cards(debts) if d.credit_limit is not None and d.credit_limit > 0]
    total_limit = sum(d.credit_limit for d in cards)
    if total_limit <= 0:
        return 0.0
    return sum(d.balance for d in cards) / total_limit


def calculate_metrics(profile: UserFinancialProfile) -> AffordabilityMetrics:
    """
    Snapshot of the user's finances.

    Minimum payments use the supplied value or the per-type estimate. Debts
    with no balance left do not contribute a payment.
    """
    income = profile.monthly_income
    expenses = profile.monthly_fixed_expenses
    open_debts = [d for d in profile.debts if d.balance > 0]

    debt_payments = round_cents(sum(estimate_minimum_payment(d) for d in open_debts))
    cashflow = round_cents(income - expenses - debt_payments)
    liquid_assets = round_cents(profile.cash_balance + profile.savings_balance + profile.emergency_fund)

    essentials = expenses + debt_payments
    emergency_fund_months = liquid_assets / essentials if essentials > 0 else 0.0
    savings_rate = max(0.0, cashflow / income) if income > 0 else 0.0

    return AffordabilityMetrics(
        monthly_income=income,
        monthly_expenses=expenses,
        monthly_debt_payments=debt_payments,
        monthly_cashflow=cashflow,
        liquid_assets=liquid_assets,
        total_debt=round_cents(sum(d.balance for d in profile.debts)),
        debt_to_income_ratio=_debt_to_income(debt_payments, income),
        credit_utilization=calculate_credit_utilization(profile.debts),
        emergency_fund_months=emergency_fund_months,
        savings_rate=savings_rate,
    )


# ---------------------------------------------------------------------------
# Purchase impact, one handler per payment method
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _PaymentEffect:
    projected_cash_balance: float
    new_monthly_cashflow: Optional[float] = None
    new_debt_to_income_ratio: Optional[float] = None
    credit_utilization_change: Optional[float] = None


PaymentHandler = Callable[[AffordabilityMetrics, PurchaseRequest, UserFinancialProfile], _PaymentEffect]


def _with_new_payment(metrics: AffordabilityMetrics, projected_cash: float, payment: float, **extra) -> _PaymentEffect:
    return _PaymentEffect(
        projected_cash_balance=projected_cash,
        new_monthly_cashflow=round_cents(metrics.monthly_cashflow - payment),
        new_debt_to_income_ratio=_debt_to_income(metrics.monthly_debt_payments + payment, metrics.monthly_income),
        **extra,
    )


def _pay_in_full(metrics, purchase, profile) -> _PaymentEffect:
    return _PaymentEffect(projected_cash_balance=round_cents(metrics.liquid_assets - purchase.amount))


def _pay_by_card(metrics, purchase, profile) -> _PaymentEffect:
    limits = [d.credit_limit for d in _credit_cards(profile.debts) if d.credit_limit is not None]
    total_limit = sum(limits)
    utilization_change = purchase.amount / total_limit if total_limit > 0 else None

    new_minimum = percent_of_balance_payment(purchase.amount, thresholds.MIN_CREDIT_CARD_PAYMENT_PERCENT)
    return _with_new_payment(
        metrics,
        metrics.liquid_assets,
        new_minimum,
        credit_utilization_change=utilization_change,
    )


def _pay_later(metrics, purchase, profile) -> _PaymentEffect:
    # First of four installments up front, roughly two installments land per month
    return _PaymentEffect(
        projected_cash_balance=round_cents(metrics.liquid_assets - purchase.amount / 4),
        new_monthly_cashflow=round_cents(metrics.monthly_cashflow - purchase.amount / 2),
    )


def _pay_by_financing(metrics, purchase, profile) -> _PaymentEffect:
    terms = purchase.financing_terms
    if terms is None:
        return _PaymentEffect(projected_cash_balance=metrics.liquid_assets)

    payment = calculate_amortized_payment(purchase.amount - terms.down_payment, terms.apr, terms.term_months)
    return _with_new_payment(metrics, round_cents(metrics.liquid_assets - terms.down_payment), payment)


def _pay_mixed(metrics, purchase, profile) -> _PaymentEffect:
    # Half cash, half credit
    return _PaymentEffect(projected_cash_balance=round_cents(metrics.liquid_assets - purchase.amount / 2))


_PAYMENT_HANDLERS: Dict[PaymentMethod, PaymentHandler] = {
    PaymentMethod.CASH: _pay_in_full,
    PaymentMethod.DEBIT: _pay_in_full,
    PaymentMethod.SAVINGS: _pay_in_full,
    PaymentMethod.CREDIT_CARD: _pay_by_card,
    PaymentMethod.BUY_NOW_PAY_LATER: _pay_later,
    PaymentMethod.FINANCING: _pay_by_financing,
    PaymentMethod.MIXED: _pay_mixed,
}


def calculate_purchase_impact(
    metrics: AffordabilityMetrics,
    purchase: PurchaseRequest,
    profile: UserFinancialProfile,
) -> PurchaseImpact:
    """Project the user's position right after the purchase"""
    handler = _PAYMENT_HANDLERS.get(PaymentMethod(purchase.payment_method), _pay_mixed)
    effect = handler(metrics, purchase, profile)
    projected = effect.projected_cash_balance

    essentials = metrics.monthly_expenses + metrics.monthly_debt_payments
    buffer_months = max(0.0, projected / essentials) if essentials > 0 else 0.0

    if metrics.liquid_assets > 0:
        consumption = max(0.0, 1 - projected / metrics.liquid_assets)
    else:
        consumption = 1.0

    if metrics.monthly_income > 0:
        purchase_ratio = purchase.amount / metrics.monthly_income
    else:
        purchase_ratio = 1.0

    return PurchaseImpact(
        projected_cash_balance=projected,
        months_of_buffer_remaining=buffer_months,
        new_monthly_cashflow=effect.new_monthly_cashflow,
        new_debt_to_income_ratio=effect.new_debt_to_income_ratio,
        credit_utilization_change=effect.credit_utilization_change,
        buffer_consumption_percent=consumption,
        purchase_to_income_ratio=purchase_ratio,
    )


def generate_alternatives(
    metrics: AffordabilityMetrics,
    impact: PurchaseImpact,
    purchase: PurchaseRequest,
    decision: Decision,
) -> List[Alternative]:
    """Other ways to reach the purchase, offered whenever the answer is not a plain YES"""
    if decision == Decision.YES:
        return []

    amount = purchase.amount
    cashflow = metrics.monthly_cashflow
    alternatives: List[Alternative] = []

    if cashflow > 0:
        months_to_save = math.ceil(amount / cashflow)
        if months_to_save <= 12:
            alternatives.append(
                Alternative(
                    strategy="delay_and_save",
                    description=f"Save {format_money(cashflow)} per month and pay cash in {months_to_save} months",
                    timeline=f"{months_to_save} months",
                )
            )

    affordable = round_cents(min(metrics.liquid_assets * 0.25, amount * 0.5))
    if affordable >= amount * 0.3:
        alternatives.append(
            Alternative(
                strategy="reduced_purchase",
                description=f"Consider a {format_money(affordable)} alternative that fits your budget better",
                savings=round_cents(amount - affordable),
            )
        )

    if metrics.total_debt > 0 and impact.new_debt_to_income_ratio is not None:
        pay_down = round_cents(min(metrics.total_debt * 0.2, amount))
        timeline = f"{math.ceil(pay_down / cashflow)} months" if cashflow > 0 else None
        alternatives.append(
            Alternative(
                strategy="debt_first",
                description=f"Pay down {format_money(pay_down)} in debt first to improve your financial position",
                timeline=timeline,
            )
        )

    if PaymentMethod(purchase.payment_method) in (PaymentMethod.CASH, PaymentMethod.CREDIT_CARD):
        alternatives.append(
            Alternative(
                strategy="0%_financing",
                description="Look for 0% APR financing offers to spread payments without interest",
            )
        )

    alternatives.append(
        Alternative(
            strategy="boost_income",
            description="Consider ways to increase income through overtime, freelance work, or selling unused items",
        )
    )

    return alternatives[:MAX_ALTERNATIVES]


def calculate_affordability(profile: UserFinancialProfile, purchase: PurchaseRequest) -> AffordabilityCalculation:
    """
    Full affordability decision: metrics, impact, rule score, then overrides.

    Overrides applied to the score-based decision, in order:
    - projected cash below zero forces NO
    - less than half a month of buffer forces NO
    - a YES with under two months of emergency fund becomes CONDITIONAL

    Confidence starts at the weighted score and is discounted when the
    buffer drops below one month on anything other than a NO.
    """
    metrics = calculate_metrics(profile)
    impact = calculate_purchase_impact(metrics, purchase, profile)
    evaluation = evaluate_affordability_rules(metrics, impact, purchase.amount)

    decision = evaluation.suggested_decision
    if impact.projected_cash_balance < 0:
        decision = Decision.NO
    if impact.months_of_buffer_remaining < thresholds.CRITICAL_BUFFER_MONTHS:
        decision = Decision.NO
    if decision == Decision.YES and metrics.emergency_fund_months < thresholds.EMERGENCY_FUND_YES_FLOOR_MONTHS:
        decision = Decision.CONDITIONAL

    confidence = evaluation.weighted_score
    if impact.months_of_buffer_remaining < thresholds.MIN_POST_PURCHASE_BUFFER_MONTHS and decision != Decision.NO:
        confidence *= thresholds.LOW_BUFFER_CONFIDENCE_PENALTY
    confidence = max(0.0, min(1.0, confidence))

    recommendations = [] if decision == Decision.YES else get_failed_rule_recommendations(evaluation.rules)

    return AffordabilityCalculation(
        metrics=metrics,
        impact=impact,
        rule_evaluation=evaluation,
        decision=decision,
        confidence=confidence,
        risk_level=evaluation.suggested_risk_level,
        reason_codes=list(evaluation.all_reason_codes),
        recommendations=recommendations,
        alternatives=generate_alternatives(metrics, impact, purchase, decision),
    )


def get_metrics_summary(metrics: AffordabilityMetrics) -> str:
    lines = [
        f"Monthly Income: {format_money(metrics.monthly_income)}",
        f"Monthly Expenses: {format_money(metrics.monthly_expenses)}",
        f"Debt Payments: {format_money(metrics.monthly_debt_payments)}",
        f"Net Cashflow: {format_money(metrics.monthly_cashflow)}",
        f"Liquid Assets: {format_money(metrics.liquid_assets)}",
        f"Emergency Fund: {metrics.emergency_fund_months:.1f} months",
        f"Debt-to-Income: {format_percent(metrics.debt_to_income_ratio)}",
        f"Credit Utilization: {format_percent(metrics.credit_utilization, 0)}",
    ]
    return "\n".join(lines)
