"""Signup, login and logout orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from passlib.exc import PasswordValueError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from blogauth.core.passwords import PasswordHasher, get_password_hasher
from blogauth.core.sessions import SessionManager, get_session_manager
from blogauth.errors import (
    DuplicateEmail,
    InternalError,
    InvalidCredentials,
    SessionPersistenceError,
    ValidationError,
)
from blogauth.models.user import User
from blogauth.services.credential_store import CredentialStore, get_credential_store

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a successful login."""

    user_id: UUID
    session_id: str


class AuthService:
    """Moves a client between the anonymous and authenticated states.

    Signup only records the credential; the caller stays anonymous until a
    separate login. Login failures never reveal whether the email or the
    password was wrong.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        password_hasher: PasswordHasher,
        session_manager: SessionManager,
    ) -> None:
        self._credentials = credential_store
        self._hasher = password_hasher
        self._sessions = session_manager

    async def signup(self, db_session: AsyncSession, email: str | None, password: str | None) -> User:
        """Register a new user from an email and plaintext password."""
        if not email or not password:
            raise ValidationError()

        try:
            password_hash = await self._hasher.hash(password)
        except PasswordValueError as exc:
            logger.warning("user.signup.rejected_password", email=email, reason=str(exc))
            raise ValidationError("Password contains unsupported characters") from exc
        try:
            user = await self._credentials.create(
                db_session=db_session, email=email, password_hash=password_hash
            )
        except DuplicateEmail:
            logger.warning("user.signup.duplicate", email=email)
            raise
        except SQLAlchemyError as exc:
            logger.error("user.signup.failed", email=email, error=str(exc))
            raise InternalError() from exc
        logger.info("user.signup", user_id=str(user.id), email=email)
        return user

    async def login(
        self,
        db_session: AsyncSession,
        email: str | None,
        password: str | None,
        previous_session_id: str | None = None,
    ) -> LoginResult:
        """Verify credentials and establish a durably stored session.

        A session the client already held is destroyed once the new one is
        saved, so a re-login never leaves the old token usable.
        """
        if not email or not password:
            raise ValidationError()

        try:
            user = await self._credentials.find_by_email(db_session=db_session, email=email)
        except SQLAlchemyError as exc:
            logger.error("user.login.lookup_failed", email=email, error=str(exc))
            raise InternalError() from exc

        if user is None:
            await self._hasher.dummy_verify()
            logger.warning("user.login.failure", email=email, reason="unknown_email")
            raise InvalidCredentials()
        if not await self._hasher.verify(password, user.password_hash):
            logger.warning("user.login.failure", email=email, reason="password_mismatch")
            raise InvalidCredentials()

        session_id = await self._sessions.create(user.id)
        if previous_session_id and previous_session_id != session_id:
            try:
                await self._sessions.destroy(previous_session_id)
            except SessionPersistenceError as exc:
                logger.error("session.supersede_failed", user_id=str(user.id), error=str(exc))
        logger.info("user.login.success", user_id=str(user.id), email=email)
        return LoginResult(user_id=user.id, session_id=session_id)

    async def logout(self, session_id: str | None) -> None:
        """Destroy the caller's session, if it has one."""
        await self._sessions.destroy(session_id)


def get_auth_service(
    credential_store: Annotated[CredentialStore, Depends(get_credential_store)],
    password_hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> AuthService:
    """Provide the auth service dependency."""
    return AuthService(
        credential_store=credential_store,
        password_hasher=password_hasher,
        session_manager=session_manager,
    )
