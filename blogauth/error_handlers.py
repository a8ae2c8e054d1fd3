"""Global exception handlers enforcing response contracts."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from blogauth.errors import ServiceError, Unauthenticated

VALID_ERROR_CODES = {
    "validation_error",
    "duplicate_email",
    "invalid_credentials",
    "session_error",
    "not_found",
    "internal_error",
}

_DEFAULT_ERROR_CODE_BY_STATUS: dict[int, str] = {
    400: "validation_error",
    401: "invalid_credentials",
    404: "not_found",
    405: "not_found",
    422: "validation_error",
    503: "internal_error",
}

logger = structlog.get_logger(__name__)


def _error_response(status_code: int, detail: str, code: str) -> JSONResponse:
    """Build standardized JSON error payload."""
    return JSONResponse(status_code=status_code, content={"detail": detail, "code": code})


def _resolve_error_code(status_code: int, raw_code: str | None) -> str:
    """Resolve a valid machine-readable error code."""
    if raw_code in VALID_ERROR_CODES:
        return raw_code
    return _DEFAULT_ERROR_CODE_BY_STATUS.get(status_code, "internal_error")


def _extract_detail_and_code(detail: Any) -> tuple[str, str | None]:
    """Normalize exception detail payload into message and optional code."""
    if isinstance(detail, dict):
        raw_detail = detail.get("detail", "Request failed.")
        raw_code = detail.get("code")
        return str(raw_detail), str(raw_code) if raw_code is not None else None
    if isinstance(detail, str):
        return detail, None
    return "Request failed.", None


def _sanitize_detail(detail: str, status_code: int, environment: str) -> str:
    """Hide internal failure details outside development."""
    if environment != "development" and status_code >= 500:
        return "Server error"
    return detail


def _correlation_id(request: Request) -> str:
    return getattr(
        request.state,
        "correlation_id",
        request.headers.get("x-correlation-id", "unknown"),
    )


def register_exception_handlers(app: FastAPI, environment: str) -> None:
    """Register global exception handlers enforcing error shape contract."""

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError) -> Response:
        """Map service errors to redirects or detail/code payloads."""
        if isinstance(exc, Unauthenticated):
            return RedirectResponse(url=exc.redirect_to, status_code=303)

        if exc.status_code >= 500:
            # Internal detail stays in the log; the client only sees the generic message.
            logger.error(
                "service_error",
                correlation_id=_correlation_id(request),
                path=request.url.path,
                method=request.method,
                code=exc.code,
                error=exc.detail,
                cause=repr(exc.__cause__) if exc.__cause__ else None,
            )
            return _error_response(exc.status_code, type(exc).default_detail, exc.code)

        logger.warning(
            "request_rejected",
            correlation_id=_correlation_id(request),
            path=request.url.path,
            method=request.method,
            status_code=exc.status_code,
            code=exc.code,
            detail=exc.detail,
        )
        return _error_response(exc.status_code, exc.detail, exc.code)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> Response:
        """Normalize framework HTTP exceptions; unknown pages get a plain 404."""
        if exc.status_code == 404 and exc.detail == "Not Found":
            return PlainTextResponse("Page not found", status_code=404)
        raw_detail, raw_code = _extract_detail_and_code(exc.detail)
        code = _resolve_error_code(exc.status_code, raw_code)
        return _error_response(status_code=exc.status_code, detail=raw_detail, code=code)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_exception(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Map request validation errors to standardized payload."""
        detail = "Invalid request payload."
        if environment == "development":
            errors = exc.errors()
            if errors:
                detail = f"Invalid request payload: {errors[0].get('msg', 'validation error')}."
        return _error_response(status_code=422, detail=detail, code="validation_error")

    @app.exception_handler(Exception)
    async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
        """Mask internal errors and enforce contract payload."""
        logger.error(
            "unhandled_exception",
            correlation_id=_correlation_id(request),
            path=request.url.path,
            method=request.method,
            error=str(exc),
        )
        detail = _sanitize_detail(str(exc), 500, environment)
        return _error_response(status_code=500, detail=detail, code="internal_error")
