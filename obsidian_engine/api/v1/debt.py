"""POST /api/v1/debt/* - debt payoff planning and single-strategy simulation endpoints"""

import time
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Response

from obsidian_engine.api.dependencies import get_idempotency_store, get_request_id
from obsidian_engine.api.v1.common import build_metadata, internal_error, limits_exceeded, replay_stored_response
from obsidian_engine.api.v1.schemas import (
    PayoffInsights,
    PayoffMonthSchema,
    PayoffOrderSchema,
    PayoffPlanRequest,
    PayoffPlanResponse,
    SimulationRequest,
    SimulationResponse,
    StrategySummary,
)
from obsidian_engine.config import settings
from obsidian_engine.domain.exceptions import InputLimitError
from obsidian_engine.domain.explanations import explain_payoff_plan
from obsidian_engine.domain.models import StrategySimulationResult
from obsidian_engine.domain.simulator import compare_strategies, generate_debt_insights, simulate_strategy
from obsidian_engine.domain.strategies import get_strategy_description
from obsidian_engine.domain.validation import (
    ensure_valid,
    validate_debt_limits,
    validate_profile_consistency,
    validate_profile_limits,
)
from obsidian_engine.infrastructure.cache.idempotency import IdempotencyStore
from obsidian_engine.infrastructure.observability.logging import log_payoff_plan
from obsidian_engine.infrastructure.observability.metrics import record_payoff_plan

router = APIRouter()

SCHEDULE_PREVIEW_MONTHS = 12
PLAN_CONFIDENCE = 0.9


def payoff_risk_level(total_months: int) -> str:
    """Longer roads to debt freedom carry more risk of derailing"""
    if total_months > 120:
        return "HIGH"
    if total_months > 60:
        return "MODERATE"
    return "LOW"


def _summarize(result: StrategySimulationResult) -> StrategySummary:
    return StrategySummary(
        strategy_name=result.strategy,
        description=get_strategy_description(result.strategy),
        total_months_to_payoff=result.total_months,
        total_interest_paid=result.total_interest_paid,
        total_amount_paid=result.total_amount_paid,
        monthly_payment_required=result.monthly_payment_required,
        payoff_order=[PayoffOrderSchema.from_domain(p) for p in result.payoff_order],
    )


@router.post("/debt/payoff-plan", response_model=PayoffPlanResponse, response_model_exclude_none=True)
def create_payoff_plan(
    request_body: PayoffPlanRequest,
    http_response: Response,
    request_id: str = Depends(get_request_id),
    store: IdempotencyStore = Depends(get_idempotency_store),
    idempotency_key: Optional[str] = Header(None, alias="X-Idempotency-Key"),
):
    """
    Compare payoff strategies for the user's debts and recommend one.

    A user with no outstanding balance gets a short congratulatory plan
    without running any simulation.
    """
    start_time = time.time()
    endpoint = "payoff_plan"
    body = request_body.model_dump(mode="json")

    replay = replay_stored_response(store, idempotency_key, body, endpoint, request_id)
    if replay is not None:
        return replay

    try:
        profile = request_body.user.to_domain()
        ensure_valid(validate_profile_limits(profile) + validate_profile_consistency(profile))

        extra = request_body.extra_monthly_payment
        if extra is None:
            extra = settings.default_extra_payment
        max_months = request_body.max_months or settings.default_max_months

        if all(d.balance <= 0 for d in profile.debts):
            response = PayoffPlanResponse(
                message="Congratulations! You have no debt to pay off.",
                insights=PayoffInsights(debt_free_date="Already debt-free!"),
                metadata=build_metadata(request_id, start_time, idempotency_key),
            )
            record_payoff_plan("none", {})
            log_payoff_plan(request_id, profile.user_id, None, 0, len(profile.debts), response.metadata.computation_time_ms)
        else:
            comparison = compare_strategies(profile.debts, extra, max_months)
            insights = generate_debt_insights(profile.debts, comparison)
            recommended = comparison.result_for(comparison.recommended_strategy)

            schedule = []
            if request_body.include_schedule and recommended is not None:
                schedule = [
                    PayoffMonthSchema.from_domain(m)
                    for m in recommended.schedule[: settings.max_schedule_months_returned]
                ]

            total_months = recommended.total_months if recommended is not None else 0
            response = PayoffPlanResponse(
                recommended_strategy=comparison.recommended_strategy,
                recommendation_reason=comparison.recommendation_reason,
                strategy_comparison=[_summarize(r) for r in comparison.strategies],
                savings_vs_minimum=comparison.savings_vs_minimum,
                savings_vs_worst=comparison.savings_vs_worst,
                time_saved_months=comparison.time_saved_months,
                monthly_schedule=schedule,
                insights=PayoffInsights(
                    total_debt=insights.total_debt,
                    average_apr=insights.average_apr,
                    potential_interest_savings=insights.potential_interest_savings,
                    debt_free_date=insights.debt_free_date,
                    highest_interest_debt=insights.highest_apr_debt.name if insights.highest_apr_debt else None,
                    lowest_balance_debt=insights.lowest_balance_debt.name if insights.lowest_balance_debt else None,
                    quick_wins=insights.quick_wins,
                    monthly_minimum_required=insights.monthly_minimum_required,
                ),
                explanation=explain_payoff_plan(comparison, insights),
                risk_level=payoff_risk_level(total_months),
                confidence=PLAN_CONFIDENCE,
                metadata=build_metadata(request_id, start_time, idempotency_key),
            )

            record_payoff_plan(
                comparison.recommended_strategy.value,
                {r.strategy.value: r.total_months for r in comparison.strategies},
            )
            log_payoff_plan(
                request_id,
                profile.user_id,
                comparison.recommended_strategy.value,
                total_months,
                len(profile.debts),
                response.metadata.computation_time_ms,
            )

        if idempotency_key:
            http_response.headers["X-Idempotency-Key"] = idempotency_key
        store.put(idempotency_key, body, 200, response.model_dump(mode="json", exclude_none=True))
        return response

    except InputLimitError as e:
        raise limits_exceeded(e.issues, endpoint, request_id)

    except HTTPException:
        raise

    except Exception as e:
        raise internal_error(e, endpoint, request_id)


@router.post("/debt/simulate", response_model=SimulationResponse, response_model_exclude_none=True)
def simulate_debt_strategy(
    request_body: SimulationRequest,
    http_response: Response,
    request_id: str = Depends(get_request_id),
    store: IdempotencyStore = Depends(get_idempotency_store),
    idempotency_key: Optional[str] = Header(None, alias="X-Idempotency-Key"),
):
    """Run one strategy and return its totals with the first year of the schedule"""
    start_time = time.time()
    endpoint = "simulate"
    body = request_body.model_dump(mode="json")

    replay = replay_stored_response(store, idempotency_key, body, endpoint, request_id)
    if replay is not None:
        return replay

    try:
        debts = [d.to_domain() for d in request_body.debts]
        ensure_valid(validate_debt_limits(debts))

        result = simulate_strategy(
            debts,
            request_body.strategy,
            request_body.extra_monthly_payment,
            request_body.max_months or settings.default_max_months,
        )

        response = SimulationResponse(
            strategy=result.strategy,
            strategy_description=get_strategy_description(result.strategy),
            total_months=result.total_months,
            total_interest_paid=result.total_interest_paid,
            total_amount_paid=result.total_amount_paid,
            monthly_payment=result.monthly_payment_required,
            payoff_order=[PayoffOrderSchema.from_domain(p) for p in result.payoff_order],
            schedule_preview=[PayoffMonthSchema.from_domain(m) for m in result.schedule[:SCHEDULE_PREVIEW_MONTHS]],
            metadata=build_metadata(request_id, start_time, idempotency_key),
        )

        if idempotency_key:
            http_response.headers["X-Idempotency-Key"] = idempotency_key
        store.put(idempotency_key, body, 200, response.model_dump(mode="json", exclude_none=True))
        return response

    except InputLimitError as e:
        raise limits_exceeded(e.issues, endpoint, request_id)

    except HTTPException:
        raise

    except Exception as e:
        raise internal_error(e, endpoint, request_id)
