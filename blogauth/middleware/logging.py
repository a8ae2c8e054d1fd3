"""Structured request logging middleware with credential redaction."""

from __future__ import annotations

from time import perf_counter
from typing import Any

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

SENSITIVE_KEYS = {
    "authorization",
    "cookie",
    "password",
    "session",
    "session_id",
    "set-cookie",
    "token",
}
SENSITIVE_FRAGMENTS = ("password", "session", "token")
REDACTED = "***REDACTED***"

logger = structlog.get_logger(__name__)


def _is_sensitive_key(key: str) -> bool:
    """Return True when key likely carries a password or session token."""
    normalized = key.lower().replace("-", "_")
    return normalized in SENSITIVE_KEYS or any(part in normalized for part in SENSITIVE_FRAGMENTS)


def _redact(values: dict[str, str]) -> dict[str, str]:
    """Copy values with sensitive entries masked."""
    return {key: REDACTED if _is_sensitive_key(key) else value for key, value in values.items()}


def _request_fields(request: Request) -> dict[str, Any]:
    """Collect the per-request fields logged on completion."""
    return {
        "method": request.method,
        "path": request.url.path,
        "query_params": _redact(dict(request.query_params)),
        "cookies": _redact(dict(request.cookies)),
        "client_ip": request.client.host if request.client else "unknown",
        "user_agent": request.headers.get("user-agent", ""),
    }


class LoggingMiddleware(BaseHTTPMiddleware):
    """Emit one `request_completed` event per request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = perf_counter()
        fields = _request_fields(request)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request_completed",
                status_code=500,
                duration_ms=round((perf_counter() - start) * 1000, 2),
                **fields,
            )
            raise

        # Client and server errors are warnings; the error handlers log the cause.
        log = logger.warning if response.status_code >= 400 else logger.info
        log(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((perf_counter() - start) * 1000, 2),
            **fields,
        )
        return response
