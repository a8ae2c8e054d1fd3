"""In-memory collaborators for exercising the full app without Postgres or Redis."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from blogauth.config import SessionSettings, Settings, get_settings
from blogauth.core.passwords import PasswordHasher, get_password_hasher
from blogauth.core.sessions import InMemorySessionStore, SessionManager, get_session_manager
from blogauth.dependencies import get_database_session
from blogauth.errors import DuplicateEmail, NotFound, ValidationError
from blogauth.models.post import Post
from blogauth.models.user import User
from blogauth.services.credential_store import get_credential_store
from blogauth.services.post_service import get_post_service


class FakeClock:
    """Controllable UTC clock for session expiry tests."""

    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        """Move the clock forward."""
        self.now += timedelta(seconds=seconds)


class InMemoryCredentialStore:
    """Credential store double keyed by exact email."""

    def __init__(self) -> None:
        self.users: dict[str, User] = {}

    async def find_by_email(self, db_session: Any, email: str) -> User | None:
        del db_session
        return self.users.get(email)

    async def get_by_id(self, db_session: Any, user_id: UUID) -> User | None:
        del db_session
        for user in self.users.values():
            if user.id == user_id:
                return user
        return None

    async def create(self, db_session: Any, email: str, password_hash: str) -> User:
        del db_session
        if email in self.users:
            raise DuplicateEmail()
        now = datetime.now(UTC)
        user = User(
            id=uuid4(),
            email=email,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        self.users[email] = user
        return user


class InMemoryPostService:
    """Post service double preserving insertion order."""

    def __init__(self) -> None:
        self.posts: dict[UUID, Post] = {}

    async def list_posts(self, db_session: Any, newest_first: bool = True) -> list[Post]:
        del db_session
        posts = list(self.posts.values())
        return list(reversed(posts)) if newest_first else posts

    async def get_post(self, db_session: Any, post_id: UUID) -> Post:
        del db_session
        post = self.posts.get(post_id)
        if post is None:
            raise NotFound("Post not found")
        return post

    async def create_post(self, db_session: Any, title: str | None, content: str | None) -> Post:
        del db_session
        if not title or not content:
            raise ValidationError()
        now = datetime.now(UTC)
        post = Post(id=uuid4(), title=title, content=content, created_at=now, updated_at=now)
        self.posts[post.id] = post
        return post

    async def delete_post(self, db_session: Any, post_id: UUID) -> bool:
        del db_session
        return self.posts.pop(post_id, None) is not None


@pytest.fixture
def clock() -> FakeClock:
    """Fresh controllable clock."""
    return FakeClock()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    """Fresh in-memory session store."""
    return InMemorySessionStore()


@pytest.fixture
def session_manager(session_store: InMemorySessionStore, clock: FakeClock) -> SessionManager:
    """Session manager with a one-hour TTL on the fake clock."""
    return SessionManager(store=session_store, ttl_seconds=3600, now=clock)


@pytest.fixture
def password_hasher() -> PasswordHasher:
    """Cheap bcrypt work factor for tests."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def credential_store() -> InMemoryCredentialStore:
    """Fresh in-memory credential store."""
    return InMemoryCredentialStore()


@pytest.fixture
def post_service() -> InMemoryPostService:
    """Fresh in-memory post service."""
    return InMemoryPostService()


@pytest.fixture
def settings() -> Settings:
    """Settings with the in-memory session backend."""
    return Settings(session=SessionSettings(backend="memory", ttl_seconds=3600))


@pytest.fixture
def app_factory(
    settings: Settings,
    session_manager: SessionManager,
    password_hasher: PasswordHasher,
    credential_store: InMemoryCredentialStore,
    post_service: InMemoryPostService,
) -> Callable[[], FastAPI]:
    """Build the real app with storage dependencies swapped for in-memory doubles."""
    from blogauth.main import create_app

    async def _no_database() -> AsyncIterator[None]:
        yield None

    def _factory() -> FastAPI:
        app = create_app()
        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_database_session] = _no_database
        app.dependency_overrides[get_session_manager] = lambda: session_manager
        app.dependency_overrides[get_password_hasher] = lambda: password_hasher
        app.dependency_overrides[get_credential_store] = lambda: credential_store
        app.dependency_overrides[get_post_service] = lambda: post_service
        return app

    return _factory


@pytest.fixture
async def client(app_factory: Callable[[], FastAPI]) -> AsyncIterator[AsyncClient]:
    """HTTP client bound to an in-memory app."""
    async with AsyncClient(
        transport=ASGITransport(app=app_factory()),
        base_url="http://testserver",
    ) as http_client:
        yield http_client
