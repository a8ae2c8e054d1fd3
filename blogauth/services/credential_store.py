"""User credential persistence."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from blogauth.errors import DuplicateEmail
from blogauth.models.user import User


class CredentialStore:
    """Store of ``(email, password_hash)`` pairs with a database-enforced unique email."""

    async def find_by_email(self, db_session: AsyncSession, email: str) -> User | None:
        """Fetch a user by exact, case-sensitive email match."""
        statement = select(User).where(User.email == email)
        result = await db_session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_id(self, db_session: AsyncSession, user_id: UUID) -> User | None:
        """Fetch a user by primary key."""
        return await db_session.get(User, user_id)

    async def create(self, db_session: AsyncSession, email: str, password_hash: str) -> User:
        """Insert a user, relying on the unique constraint to reject duplicates.

        Concurrent signups for one email race on the insert itself, so the
        loser surfaces as an IntegrityError rather than slipping past an
        earlier existence check.
        """
        user = User(email=email, password_hash=password_hash)
        try:
            db_session.add(user)
            await db_session.flush()
        except IntegrityError as exc:
            await db_session.rollback()
            raise DuplicateEmail() from exc
        except Exception:
            await db_session.rollback()
            raise
        await db_session.commit()
        return user


def get_credential_store() -> CredentialStore:
    """Provide the credential store dependency."""
    return CredentialStore()
