"""Structured error bodies shared by routes and exception handlers"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException

from obsidian_engine.api.v1.schemas import ErrorBody, ErrorResponse

_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    500: "INTERNAL_ERROR",
}


def error_content(code: str, message: str, request_id: Optional[str] = None, details: Any = None) -> Dict[str, Any]:
    """Body of every error response: {"error": {"code", "message", ...}}"""
    return ErrorResponse(
        error=ErrorBody(
            code=code,
            message=message,
            details=details,
            request_id=request_id,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
    ).to_content()


def api_error(
    status_code: int,
    code: str,
    message: str,
    request_id: Optional[str] = None,
    details: Any = None,
) -> HTTPException:
    return HTTPException(status_code=status_code, detail=error_content(code, message, request_id, details))


def code_for_status(status_code: int) -> str:
    return _STATUS_CODES.get(status_code, "HTTP_ERROR")
