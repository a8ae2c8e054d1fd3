"""FastAPI application factory."""

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from blogauth.config import configure_structlog, get_settings
from blogauth.error_handlers import register_exception_handlers
from blogauth.middleware.correlation_id import CorrelationIdMiddleware
from blogauth.middleware.logging import LoggingMiddleware
from blogauth.middleware.security_headers import SecurityHeadersMiddleware
from blogauth.routers import auth, health, posts
from blogauth.templating import STATIC_DIR


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_structlog(settings)

    app = FastAPI(title=settings.app.service, docs_url=None, redoc_url=None)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(CorrelationIdMiddleware)
    register_exception_handlers(app, environment=settings.app.environment)

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.include_router(auth.router)
    app.include_router(posts.router)
    app.include_router(health.router)
    return app


app = create_app()
