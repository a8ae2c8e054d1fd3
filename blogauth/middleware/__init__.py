"""Middleware package exports."""

from blogauth.middleware.correlation_id import CorrelationIdMiddleware
from blogauth.middleware.logging import LoggingMiddleware
from blogauth.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "CorrelationIdMiddleware",
    "LoggingMiddleware",
    "SecurityHeadersMiddleware",
]
