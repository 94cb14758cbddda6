"""FastAPI application factory"""

import logging
import time
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from obsidian_engine.api.dependencies import get_request_id, verify_api_key
from obsidian_engine.api.errors import code_for_status, error_content
from obsidian_engine.api.middleware import MetricsMiddleware, RequestIDMiddleware
from obsidian_engine.api.v1 import affordability, debt
from obsidian_engine.config import settings
from obsidian_engine.infrastructure.cache.idempotency import IdempotencyStore
from obsidian_engine.infrastructure.observability.logging import setup_logging
from obsidian_engine.infrastructure.observability.metrics import validation_failure_counter

# Setup structured logging
setup_logging(settings.log_level)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Obsidian Decision Engine",
        description="Deterministic affordability decisions and debt payoff planning",
        version=settings.engine_version,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.idempotency_store = IdempotencyStore(settings.idempotency_ttl_seconds)
    app.state.started_at = time.time()

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        validation_failure_counter.labels(endpoint=request.url.path, code="VALIDATION_ERROR").inc()
        request_id = get_request_id(request)
        logger.warning("Request validation failed", extra={"request_id": request_id, "path": request.url.path})
        return JSONResponse(
            status_code=400,
            content=error_content(
                "VALIDATION_ERROR",
                "Invalid request body",
                request_id,
                details=jsonable_encoder(exc.errors()),
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.detail, dict) and "error" in exc.detail:
            content = exc.detail
        else:
            content = error_content(code_for_status(exc.status_code), str(exc.detail), get_request_id(request))
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    # Health check endpoints
    @app.get("/health")
    def health_check():
        return {
            "status": "healthy",
            "service": settings.service_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/health/detailed")
    def detailed_health_check(request: Request):
        store = request.app.state.idempotency_store
        return {
            "status": "healthy",
            "service": settings.service_name,
            "version": settings.engine_version,
            "environment": settings.environment,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime_seconds": round(time.time() - request.app.state.started_at, 3),
            "components": {
                "api": {"status": "healthy"},
                "calculation_engine": {"status": "healthy"},
                "idempotency_store": {"status": "healthy", "entries": len(store)},
            },
        }

    @app.get("/ready")
    def readiness_check():
        return {"status": "ready"}

    @app.get("/live")
    def liveness_check():
        return {"status": "alive"}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/")
    def index():
        return {
            "service": settings.service_name,
            "version": settings.engine_version,
            "docs": "/docs",
            "endpoints": {
                "affordability": "POST /api/v1/affordability",
                "payoff_plan": "POST /api/v1/debt/payoff-plan",
                "simulate": "POST /api/v1/debt/simulate",
                "health": "GET /health",
                "metrics": "GET /metrics",
            },
        }

    # Register API routers
    api_dependencies = [Depends(verify_api_key)]
    app.include_router(affordability.router, prefix="/api/v1", tags=["affordability"], dependencies=api_dependencies)
    app.include_router(debt.router, prefix="/api/v1", tags=["debt"], dependencies=api_dependencies)

    return app


app = create_app()
