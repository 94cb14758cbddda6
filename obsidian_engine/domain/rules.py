"""Affordability rule engine - weighted rules, scoring and decision mapping"""

from typing import Callable, Dict, List, Tuple

from obsidian_engine.domain import thresholds
from obsidian_engine.domain.models import (
    AffordabilityMetrics,
    Decision,
    PurchaseImpact,
    ReasonCode,
    RiskLevel,
    RuleEvaluationResult,
    RuleResult,
)
from obsidian_engine.utils.money import format_money, format_percent

Rule = Callable[[AffordabilityMetrics, PurchaseImpact, float], RuleResult]


def sufficient_buffer_rule(metrics: AffordabilityMetrics, impact: PurchaseImpact, amount: float) -> RuleResult:
    months = impact.months_of_buffer_remaining
    minimum = thresholds.MIN_POST_PURCHASE_BUFFER_MONTHS
    passed = months >= minimum

    if passed:
        explanation = f"You'll maintain {months:.1f} months of expenses as a buffer."
    else:
        explanation = (
            f"This purchase would leave you with only {months:.1f} months of expenses, "
            f"below the recommended minimum of {minimum:g} months."
        )

    return RuleResult(
        rule_id="SUFFICIENT_BUFFER",
        passed=passed,
        reason_codes=[ReasonCode.HEALTHY_BUFFER if passed else ReasonCode.INSUFFICIENT_BUFFER],
        weight=0.25,
        explanation=explanation,
        data={"months_remaining": months, "minimum_required": minimum},
    )


def positive_cashflow_rule(metrics: AffordabilityMetrics, impact: PurchaseImpact, amount: float) -> RuleResult:
    cashflow = impact.new_monthly_cashflow
    if cashflow is None:
        cashflow = metrics.monthly_cashflow
    passed = cashflow > 0

    if passed:
        explanation = f"Your monthly cashflow remains positive at {format_money(cashflow)}."
    else:
        explanation = f"This purchase would result in negative monthly cashflow of {format_money(cashflow)}."

    return RuleResult(
        rule_id="POSITIVE_CASHFLOW",
        passed=passed,
        reason_codes=[ReasonCode.POSITIVE_CASHFLOW if passed else ReasonCode.NEGATIVE_CASHFLOW],
        weight=0.20,
        explanation=explanation,
        data={"current_cashflow": metrics.monthly_cashflow, "projected_cashflow": cashflow},
    )


def debt_to_income_rule(metrics: AffordabilityMetrics, impact: PurchaseImpact, amount: float) -> RuleResult:
    dti = impact.new_debt_to_income_ratio
    if dti is None:
        dti = metrics.debt_to_income_ratio
    passed = dti <= thresholds.DTI_ACCEPTABLE

    if dti <= thresholds.DTI_GOOD:
        explanation = f"Your debt-to-income ratio of {format_percent(dti)} is in a healthy range."
    elif passed:
        explanation = f"Your debt-to-income ratio of {format_percent(dti)} is acceptable but worth monitoring."
    else:
        explanation = (
            f"This would push your debt-to-income ratio to {format_percent(dti)}, above the "
            f"recommended {format_percent(thresholds.DTI_ACCEPTABLE, 0)} threshold."
        )

    return RuleResult(
        rule_id="DEBT_TO_INCOME",
        passed=passed,
        reason_codes=[ReasonCode.ACCEPTABLE_DEBT_TO_INCOME if passed else ReasonCode.HIGH_DEBT_TO_INCOME],
        weight=0.15,
        explanation=explanation,
        data={
            "current_dti": metrics.debt_to_income_ratio,
            "projected_dti": dti,
            "threshold": thresholds.DTI_ACCEPTABLE,
        },
    )


def credit_utilization_rule(metrics: AffordabilityMetrics, impact: PurchaseImpact, amount: float) -> RuleResult:
    # Only purchases charged to a card with known limits move utilization
    if impact.credit_utilization_change is None:
        return RuleResult(
            rule_id="CREDIT_UTILIZATION",
            passed=True,
            reason_codes=[],
            weight=0.0,
            explanation="Credit utilization not affected.",
        )

    utilization = metrics.credit_utilization + impact.credit_utilization_change
    limit = thresholds.CREDIT_UTILIZATION_GOOD
    passed = utilization <= limit

    if passed:
        explanation = (
            f"Your credit utilization would be {format_percent(utilization, 0)}, "
            "which is healthy for your credit score."
        )
    else:
        explanation = (
            f"This would push your credit utilization to {format_percent(utilization, 0)}, above the "
            f"recommended {format_percent(limit, 0)} for optimal credit health."
        )

    return RuleResult(
        rule_id="CREDIT_UTILIZATION",
        passed=passed,
        reason_codes=[ReasonCode.LOW_CREDIT_UTILIZATION if passed else ReasonCode.HIGH_CREDIT_UTILIZATION],
        weight=0.10,
        explanation=explanation,
        data={
            "current_utilization": metrics.credit_utilization,
            "projected_utilization": utilization,
            "threshold": limit,
        },
    )


def emergency_fund_rule(metrics: AffordabilityMetrics, impact: PurchaseImpact, amount: float) -> RuleResult:
    months = metrics.emergency_fund_months
    recommended = thresholds.MIN_EMERGENCY_FUND_MONTHS
    passed = months >= recommended

    if passed:
        explanation = f"You have {months:.1f} months of expenses saved, a solid emergency fund."
    else:
        explanation = (
            f"Your emergency fund covers only {months:.1f} months of expenses. Building this to "
            f"{recommended:g} months is recommended before major purchases."
        )

    return RuleResult(
        rule_id="EMERGENCY_FUND",
        passed=passed,
        reason_codes=[ReasonCode.EMERGENCY_FUND_ADEQUATE if passed else ReasonCode.EMERGENCY_FUND_INADEQUATE],
        weight=0.15,
        explanation=explanation,
        data={"current_months": months, "recommended_months": recommended},
    )


def _purchase_size_tier(ratio: float, fund_ok: bool, amount: float) -> Tuple[bool, List[ReasonCode], str]:
    share = format_percent(ratio)
    if ratio <= thresholds.SMALL_PURCHASE_RATIO:
        return True, [ReasonCode.AFFORDABLE_PURCHASE], (
            f"At {format_money(amount)}, this is a relatively small purchase ({share} of your monthly income)."
        )
    if ratio <= thresholds.LARGE_PURCHASE_RATIO:
        return True, [ReasonCode.AFFORDABLE_PURCHASE], (
            f"This purchase represents {share} of your monthly income, moderate but manageable."
        )
    if ratio <= thresholds.MAJOR_PURCHASE_RATIO:
        if fund_ok:
            codes = [ReasonCode.AFFORDABLE_PURCHASE, ReasonCode.PURCHASE_STRAINS_BUDGET]
            verdict = "Your healthy finances can support it."
        else:
            codes = [ReasonCode.PURCHASE_STRAINS_BUDGET]
            verdict = "Consider saving up first."
        return fund_ok, codes, f"This is a significant purchase at {share} of your monthly income. {verdict}"
    return False, [ReasonCode.UNAFFORDABLE_PURCHASE], (
        f"At {share} of your monthly income, this purchase is very large relative to your earnings."
    )


def purchase_size_rule(metrics: AffordabilityMetrics, impact: PurchaseImpact, amount: float) -> RuleResult:
    ratio = impact.purchase_to_income_ratio
    fund_ok = metrics.emergency_fund_months >= thresholds.MIN_EMERGENCY_FUND_MONTHS
    passed, codes, explanation = _purchase_size_tier(ratio, fund_ok, amount)

    return RuleResult(
        rule_id="PURCHASE_SIZE",
        passed=passed,
        reason_codes=codes,
        weight=0.10,
        explanation=explanation,
        data={"purchase_amount": amount, "ratio": ratio, "monthly_income": metrics.monthly_income},
    )


def buffer_consumption_rule(metrics: AffordabilityMetrics, impact: PurchaseImpact, amount: float) -> RuleResult:
    consumption = impact.buffer_consumption_percent
    passed = consumption <= thresholds.MAX_BUFFER_CONSUMPTION

    if passed:
        explanation = f"This purchase uses {format_percent(consumption, 0)} of your available buffer."
    else:
        explanation = (
            f"This purchase would consume {format_percent(consumption, 0)} of your available buffer, "
            "leaving you vulnerable to unexpected expenses."
        )

    return RuleResult(
        rule_id="BUFFER_CONSUMPTION",
        passed=passed,
        reason_codes=[ReasonCode.SAVINGS_HEALTHY if passed else ReasonCode.SAVINGS_DEPLETED],
        weight=0.05,
        explanation=explanation,
        data={"consumption_percent": consumption, "threshold": thresholds.MAX_BUFFER_CONSUMPTION},
    )


def luxury_while_in_debt_rule(metrics: AffordabilityMetrics, impact: PurchaseImpact, amount: float) -> RuleResult:
    """Informational only: never fails, but flags spending while debt load is above the healthy band"""
    if metrics.debt_to_income_ratio <= thresholds.DTI_GOOD:
        return RuleResult(
            rule_id="LUXURY_WHILE_IN_DEBT",
            passed=True,
            reason_codes=[],
            weight=0.0,
            explanation="Debt levels are manageable.",
        )

    in_debt = metrics.total_debt > 0
    if in_debt:
        explanation = (
            f"Consider that you have {format_money(metrics.total_debt)} in debt. "
            "Prioritizing debt payoff could save you money on interest."
        )
    else:
        explanation = "You have no outstanding debt."

    return RuleResult(
        rule_id="LUXURY_WHILE_IN_DEBT",
        passed=True,
        reason_codes=[ReasonCode.LUXURY_WHILE_IN_DEBT] if in_debt else [],
        weight=0.05,
        explanation=explanation,
        data={"total_debt": metrics.total_debt, "dti_ratio": metrics.debt_to_income_ratio},
    )


ALL_RULES: List[Rule] = [
    sufficient_buffer_rule,
    positive_cashflow_rule,
    debt_to_income_rule,
    credit_utilization_rule,
    emergency_fund_rule,
    purchase_size_rule,
    buffer_consumption_rule,
    luxury_while_in_debt_rule,
]

_DECISION_BANDS: List[Tuple[float, Decision, RiskLevel]] = [
    (thresholds.SCORE_YES, Decision.YES, RiskLevel.LOW),
    (thresholds.SCORE_CONDITIONAL, Decision.CONDITIONAL, RiskLevel.MODERATE),
    (thresholds.SCORE_DEFER, Decision.DEFER, RiskLevel.HIGH),
]


def score_to_decision(score: float) -> Decision:
    for floor, decision, _ in _DECISION_BANDS:
        if score >= floor:
            return decision
    return Decision.NO


def score_to_risk(score: float) -> RiskLevel:
    for floor, _, risk in _DECISION_BANDS:
        if score >= floor:
            return risk
    return RiskLevel.CRITICAL


def evaluate_affordability_rules(
    metrics: AffordabilityMetrics,
    impact: PurchaseImpact,
    purchase_amount: float,
) -> RuleEvaluationResult:
    """
    Run every rule and aggregate the outcome.

    Rules reporting weight 0 do not apply to this purchase and are left out
    of the score and the pass/fail counts, though their reason codes are
    still collected.

    weighted_score = sum(weight of passed rules) / sum(weight of applicable rules)
    """
    results = [rule(metrics, impact, purchase_amount) for rule in ALL_RULES]
    applicable = [r for r in results if r.weight > 0]

    total_weight = sum(r.weight for r in applicable)
    passed_weight = sum(r.weight for r in applicable if r.passed)
    score = passed_weight / total_weight if total_weight > 0 else 0.0

    reason_codes: List[ReasonCode] = []
    for result in results:
        for code in result.reason_codes:
            if code not in reason_codes:
                reason_codes.append(code)

    pass_count = sum(1 for r in applicable if r.passed)

    return RuleEvaluationResult(
        rules=results,
        pass_count=pass_count,
        fail_count=len(applicable) - pass_count,
        weighted_score=score,
        all_reason_codes=reason_codes,
        suggested_decision=score_to_decision(score),
        suggested_risk_level=score_to_risk(score),
    )


def get_rule_explanations(results: List[RuleResult]) -> List[str]:
    return [r.explanation for r in results if r.weight > 0 and r.explanation]


_FAILED_RULE_RECOMMENDATIONS: Dict[str, str] = {
    "SUFFICIENT_BUFFER": "Build up your emergency buffer before making this purchase",
    "POSITIVE_CASHFLOW": "Reduce monthly expenses or increase income first",
    "DEBT_TO_INCOME": "Pay down existing debt before taking on new obligations",
    "CREDIT_UTILIZATION": "Pay down credit card balances to improve utilization",
    "EMERGENCY_FUND": f"Build emergency fund to {thresholds.MIN_EMERGENCY_FUND_MONTHS:g} months of expenses",
    "PURCHASE_SIZE": "Consider saving up for this purchase over time",
    "BUFFER_CONSUMPTION": "This purchase consumes too much of your safety net",
}


def get_failed_rule_recommendations(results: List[RuleResult]) -> List[str]:
    """One actionable recommendation per applicable rule that failed"""
    return [
        _FAILED_RULE_RECOMMENDATIONS.get(r.rule_id, r.explanation)
        for r in results
        if not r.passed and r.weight > 0
    ]
