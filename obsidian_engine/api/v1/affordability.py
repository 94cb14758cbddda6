"""POST /api/v1/affordability - purchase affordability decision endpoint"""

import time
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Response

from obsidian_engine.api.dependencies import get_idempotency_store, get_request_id
from obsidian_engine.api.v1.common import build_metadata, internal_error, limits_exceeded, replay_stored_response
from obsidian_engine.api.v1.schemas import (
    AffordabilityRequest,
    AffordabilityResponse,
    AlternativeSchema,
    ExplanationDetails,
    ImpactAnalysis,
    RuleResultSchema,
)
from obsidian_engine.domain.affordability import calculate_affordability
from obsidian_engine.domain.exceptions import InputLimitError
from obsidian_engine.domain.explanations import explain_affordability
from obsidian_engine.domain.rules import get_rule_explanations
from obsidian_engine.domain.validation import (
    ensure_valid,
    validate_profile_consistency,
    validate_profile_limits,
    validate_purchase_limits,
)
from obsidian_engine.infrastructure.cache.idempotency import IdempotencyStore
from obsidian_engine.infrastructure.observability.logging import log_affordability_decision
from obsidian_engine.infrastructure.observability.metrics import record_affordability_decision

router = APIRouter()

ENDPOINT = "affordability"
KEY_FACTORS_SHOWN = 4


@router.post("/affordability", response_model=AffordabilityResponse)
def evaluate_affordability(
    request_body: AffordabilityRequest,
    http_response: Response,
    request_id: str = Depends(get_request_id),
    store: IdempotencyStore = Depends(get_idempotency_store),
    idempotency_key: Optional[str] = Header(None, alias="X-Idempotency-Key"),
):
    """
    Decide whether the user can afford the proposed purchase.

    Flow:
    1. Replay a stored response for a repeated idempotency key
    2. Check operating limits and profile consistency
    3. Compute metrics, purchase impact and the rule-based decision
    4. Attach explanations and store the response for replays
    """
    start_time = time.time()
    body = request_body.model_dump(mode="json")

    replay = replay_stored_response(store, idempotency_key, body, ENDPOINT, request_id)
    if replay is not None:
        return replay

    try:
        profile = request_body.user.to_domain()
        purchase = request_body.purchase.to_domain()

        ensure_valid(
            validate_profile_limits(profile)
            + validate_profile_consistency(profile)
            + validate_purchase_limits(purchase)
        )

        calc = calculate_affordability(profile, purchase)
        explanation = explain_affordability(calc, purchase)
        impact = calc.impact

        response = AffordabilityResponse(
            decision=calc.decision.value,
            confidence=round(calc.confidence, 2),
            weighted_score=round(calc.rule_evaluation.weighted_score, 4),
            reason_codes=[code.value for code in calc.reason_codes],
            explanation=explanation,
            explanation_details=ExplanationDetails(
                summary=explanation,
                key_factors=get_rule_explanations(calc.rule_evaluation.rules)[:KEY_FACTORS_SHOWN],
                risks=calc.recommendations,
                opportunities=[a.description for a in calc.alternatives],
            ),
            risk_level=calc.risk_level.value,
            recommended_plan=calc.recommendations,
            impact_analysis=ImpactAnalysis(
                projected_cash_balance=impact.projected_cash_balance,
                months_of_buffer_remaining=round(impact.months_of_buffer_remaining, 2),
                new_monthly_cashflow=impact.new_monthly_cashflow,
                new_debt_to_income=impact.new_debt_to_income_ratio,
                credit_utilization_change=impact.credit_utilization_change,
                buffer_consumption_percent=round(impact.buffer_consumption_percent, 4),
                purchase_to_income_ratio=round(impact.purchase_to_income_ratio, 4),
            ),
            alternatives=[
                AlternativeSchema(
                    strategy=a.strategy,
                    description=a.description,
                    savings=a.savings,
                    timeline=a.timeline,
                )
                for a in calc.alternatives
            ],
            rules=[
                RuleResultSchema(
                    rule_id=r.rule_id,
                    passed=r.passed,
                    weight=r.weight,
                    reason_codes=[code.value for code in r.reason_codes],
                    explanation=r.explanation,
                )
                for r in calc.rule_evaluation.rules
            ],
            metadata=build_metadata(
                request_id,
                start_time,
                idempotency_key,
                rules_evaluated=[r.rule_id for r in calc.rule_evaluation.rules],
            ),
        )

        record_affordability_decision(calc.decision.value, calc.risk_level.value)
        log_affordability_decision(
            request_id,
            profile.user_id,
            calc.decision.value,
            calc.risk_level.value,
            calc.confidence,
            response.metadata.computation_time_ms,
        )

        if idempotency_key:
            http_response.headers["X-Idempotency-Key"] = idempotency_key
        store.put(idempotency_key, body, 200, response.model_dump(mode="json"))
        return response

    except InputLimitError as e:
        raise limits_exceeded(e.issues, ENDPOINT, request_id)

    except HTTPException:
        raise

    except Exception as e:
        raise internal_error(e, ENDPOINT, request_id)
