"""Dependency injection for FastAPI endpoints"""

import hmac
from typing import Optional

from fastapi import Header, Request

from obsidian_engine.api.errors import api_error
from obsidian_engine.config import settings
from obsidian_engine.infrastructure.cache.idempotency import IdempotencyStore


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_idempotency_store(request: Request) -> IdempotencyStore:
    """Provide the application's idempotency store"""
    return request.app.state.idempotency_store


def verify_api_key(request: Request, x_api_key: Optional[str] = Header(None)) -> None:
    """Require a matching X-API-Key outside development when an API key is configured"""
    if not settings.auth_enabled:
        return

    if not x_api_key or not hmac.compare_digest(x_api_key, settings.api_key):
        raise api_error(401, "UNAUTHORIZED", "Invalid or missing API key", get_request_id(request))
