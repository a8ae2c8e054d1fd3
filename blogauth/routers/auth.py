"""Authentication routes."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from blogauth.config import Settings, get_settings
from blogauth.dependencies import get_database_session
from blogauth.errors import SessionPersistenceError
from blogauth.gate import AuthContext, optional_session, read_session_token
from blogauth.request_body import parse_body
from blogauth.schemas.user import CredentialsRequest, MessageResponse
from blogauth.services.auth_service import AuthService, get_auth_service
from blogauth.templating import render

router = APIRouter(tags=["auth"])

logger = structlog.get_logger(__name__)


def _set_session_cookie(response: Response, session_id: str, settings: Settings) -> None:
    """Hand the opaque session token to the browser."""
    response.set_cookie(
        key=settings.session.cookie_name,
        value=session_id,
        max_age=settings.session.ttl_seconds,
        path="/",
        httponly=True,
        secure=settings.session.cookie_secure,
        samesite="lax",
    )


@router.get("/", response_model=None)
async def login_page(
    request: Request,
    context: Annotated[AuthContext | None, Depends(optional_session)],
) -> Response:
    """Show the login form, or skip it for callers who are already signed in."""
    if context is not None:
        return RedirectResponse(url="/index", status_code=303)
    return render(request, "login.html")


@router.post("/signup", response_model=MessageResponse)
async def signup(
    request: Request,
    db_session: Annotated[AsyncSession, Depends(get_database_session)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    """Register email/password credentials without signing the caller in."""
    payload = await parse_body(request, CredentialsRequest)
    await auth_service.signup(
        db_session=db_session,
        email=payload.email,
        password=payload.password,
    )
    return MessageResponse(message="Signup successful")


@router.post("/login", response_model=None)
async def login(
    request: Request,
    db_session: Annotated[AsyncSession, Depends(get_database_session)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> JSONResponse:
    """Verify credentials and establish a session cookie."""
    payload = await parse_body(request, CredentialsRequest)
    result = await auth_service.login(
        db_session=db_session,
        email=payload.email,
        password=payload.password,
        previous_session_id=read_session_token(request, settings),
    )
    response = JSONResponse(
        status_code=200,
        content=MessageResponse(message="Login successful").model_dump(),
    )
    _set_session_cookie(response, result.session_id, settings)
    return response


@router.get("/logout", response_model=None)
async def logout(
    request: Request,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RedirectResponse:
    """Destroy the current session and return to the login page."""
    try:
        await auth_service.logout(read_session_token(request, settings))
    except SessionPersistenceError as exc:
        logger.error("user.logout.failed", error=str(exc))
    response = RedirectResponse(url="/", status_code=303)
    response.delete_cookie(key=settings.session.cookie_name, path="/")
    return response
