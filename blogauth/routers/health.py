"""Health check router endpoints."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException
from redis.exceptions import RedisError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from blogauth.core.sessions import get_session_store
from blogauth.db.session import get_engine

router = APIRouter(prefix="/health", tags=["health"])

logger = structlog.get_logger(__name__)


async def check_postgres_ready() -> bool:
    """Return True when Postgres accepts a lightweight query."""
    try:
        async with get_engine().connect() as connection:
            await connection.execute(select(1))
        return True
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("health.postgres_unavailable", error=str(exc))
        return False


async def check_session_store_ready() -> bool:
    """Return True when the session backing store responds."""
    try:
        return await get_session_store().ping()
    except (RedisError, OSError) as exc:
        logger.warning("health.session_store_unavailable", error=str(exc))
        return False


@router.get("/live")
async def live() -> dict[str, str]:
    """Liveness probe endpoint."""
    return {"status": "live"}


@router.get("/ready")
async def ready(
    postgres_ready: Annotated[bool, Depends(check_postgres_ready)],
    session_store_ready: Annotated[bool, Depends(check_session_store_ready)],
) -> dict[str, str]:
    """Readiness probe requiring Postgres and the session store."""
    if not postgres_ready or not session_store_ready:
        raise HTTPException(
            status_code=503,
            detail={"detail": "Service not ready.", "code": "internal_error"},
        )
    return {"status": "ready"}
