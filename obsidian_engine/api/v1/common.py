"""Helpers shared by the v1 decision endpoints"""

import logging
import time
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, List, Optional

from fastapi import HTTPException
from fastapi.responses import JSONResponse

from obsidian_engine.api.errors import api_error
from obsidian_engine.api.v1.schemas import ResponseMetadata
from obsidian_engine.config import settings
from obsidian_engine.domain.exceptions import IdempotencyConflictError, ValidationIssue
from obsidian_engine.infrastructure.cache.idempotency import IdempotencyStore
from obsidian_engine.infrastructure.observability.metrics import (
    idempotent_replay_counter,
    validation_failure_counter,
)

logger = logging.getLogger(__name__)


def build_metadata(
    request_id: str,
    start_time: float,
    idempotency_key: Optional[str],
    rules_evaluated: Optional[List[str]] = None,
) -> ResponseMetadata:
    return ResponseMetadata(
        request_id=request_id,
        timestamp=datetime.now(timezone.utc).isoformat(),
        engine_version=settings.engine_version,
        idempotency_key=idempotency_key,
        computation_time_ms=round((time.time() - start_time) * 1000, 2),
        rules_evaluated=rules_evaluated,
    )


def replay_stored_response(
    store: IdempotencyStore,
    key: Optional[str],
    body: Any,
    endpoint: str,
    request_id: str,
) -> Optional[JSONResponse]:
    """
    Serve a previously stored response for this idempotency key.

    Returns:
        The replayed response, or None when the request must be computed

    Raises:
        HTTPException: 409 when the key was used with a different body
    """
    try:
        stored = store.get(key, body)
    except IdempotencyConflictError as e:
        logger.warning(f"Idempotency conflict: {e}", extra={"request_id": request_id, "endpoint": endpoint})
        raise api_error(
            409,
            "IDEMPOTENCY_KEY_CONFLICT",
            "Idempotency key has been used with a different payload",
            request_id,
        )

    if stored is None:
        return None

    idempotent_replay_counter.labels(endpoint=endpoint).inc()
    logger.info("Idempotent replay", extra={"request_id": request_id, "endpoint": endpoint})
    return JSONResponse(
        status_code=stored.status_code,
        content=stored.payload,
        headers={"X-Idempotent-Replay": "true", "X-Idempotency-Key": key},
    )


def limits_exceeded(issues: List[ValidationIssue], endpoint: str, request_id: str) -> HTTPException:
    validation_failure_counter.labels(endpoint=endpoint, code="LIMITS_EXCEEDED").inc()
    logger.warning(
        "Input limits exceeded",
        extra={"request_id": request_id, "endpoint": endpoint, "issue_codes": [i.code for i in issues]},
    )
    return api_error(
        400,
        "LIMITS_EXCEEDED",
        "Input exceeds allowed limits or is inconsistent",
        request_id,
        details=[asdict(i) for i in issues],
    )


def internal_error(error: Exception, endpoint: str, request_id: str) -> HTTPException:
    logger.error(f"Unexpected error: {error}", exc_info=True, extra={"request_id": request_id, "endpoint": endpoint})
    return api_error(500, "INTERNAL_ERROR", "An unexpected error occurred", request_id)
