"""Access gate resolving the session cookie before protected routes run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from blogauth.config import Settings, get_settings
from blogauth.core.sessions import SessionManager, get_session_manager
from blogauth.dependencies import get_database_session
from blogauth.errors import Unauthenticated
from blogauth.services.credential_store import CredentialStore, get_credential_store

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """Authenticated identity handed explicitly to protected handlers."""

    user_id: UUID
    session_id: str


def read_session_token(request: Request, settings: Settings) -> str | None:
    """Return the opaque session token from the request cookie, if any."""
    token = request.cookies.get(settings.session.cookie_name, "").strip()
    return token or None


async def resolve_session(
    token: str | None,
    db_session: AsyncSession,
    session_manager: SessionManager,
    credential_store: CredentialStore,
) -> AuthContext | None:
    """Turn a session token into an AuthContext, or None when it does not authenticate."""
    record = await session_manager.get(token)
    if record is None:
        return None

    try:
        user_id = UUID(record.user_id)
    except ValueError:
        await session_manager.destroy(record.session_id)
        return None

    # Sessions outliving their user are dropped on sight.
    user = await credential_store.get_by_id(db_session=db_session, user_id=user_id)
    if user is None:
        logger.warning("session.orphaned", user_id=record.user_id)
        await session_manager.destroy(record.session_id)
        return None
    return AuthContext(user_id=user_id, session_id=record.session_id)


async def optional_session(
    request: Request,
    db_session: Annotated[AsyncSession, Depends(get_database_session)],
    settings: Annotated[Settings, Depends(get_settings)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    credential_store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> AuthContext | None:
    """Resolve the caller's session without rejecting anonymous requests."""
    return await resolve_session(
        token=read_session_token(request, settings),
        db_session=db_session,
        session_manager=session_manager,
        credential_store=credential_store,
    )


async def require_session(
    request: Request,
    context: Annotated[AuthContext | None, Depends(optional_session)],
) -> AuthContext:
    """Let authenticated requests through; redirect everyone else to the login page."""
    if context is None:
        logger.info("session.gate_rejected", path=request.url.path)
        raise Unauthenticated(redirect_to="/")
    return context
