"""Server-side session state behind an opaque cookie token."""

from __future__ import annotations

import json
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from time import monotonic
from typing import Any, Protocol
from uuid import UUID

import structlog
from redis import asyncio as redis_async
from redis.asyncio.client import Redis
from redis.exceptions import RedisError

from blogauth.config import get_settings
from blogauth.errors import SessionPersistenceError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SessionRecord:
    """Canonical session record; the client only ever holds ``session_id``."""

    session_id: str
    user_id: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """Return True once the absolute expiry has been reached."""
        return now >= self.expires_at

    def to_payload(self) -> str:
        """Serialize the stored fields to JSON."""
        return json.dumps(
            {
                "user_id": self.user_id,
                "created_at": self.created_at.isoformat(),
                "expires_at": self.expires_at.isoformat(),
            }
        )

    @classmethod
    def from_payload(cls, session_id: str, raw_payload: str) -> SessionRecord:
        """Rebuild a record from JSON, raising ValueError on malformed data."""
        try:
            payload: dict[str, Any] = json.loads(raw_payload)
            return cls(
                session_id=session_id,
                user_id=str(payload["user_id"]),
                created_at=datetime.fromisoformat(payload["created_at"]),
                expires_at=datetime.fromisoformat(payload["expires_at"]),
            )
        except (json.JSONDecodeError, KeyError, TypeError) as exc:
            raise ValueError("Malformed session payload.") from exc


class SessionStore(Protocol):
    """Backing store contract for serialized session payloads keyed by token."""

    async def load(self, session_id: str) -> str | None: ...

    async def save(self, session_id: str, payload: str, ttl_seconds: int) -> None: ...

    async def delete(self, session_id: str) -> None: ...


class RedisSessionStore:
    """Session payloads stored under ``session:<token>`` with native key expiry."""

    def __init__(self, redis_client: Redis) -> None:
        self._redis = redis_client

    async def load(self, session_id: str) -> str | None:
        """Fetch a payload, failing closed when Redis is unreachable."""
        try:
            raw_payload = await self._redis.get(self._session_key(session_id))
        except RedisError as exc:
            raise SessionPersistenceError("Session backend unavailable.") from exc
        if raw_payload is None:
            return None
        if isinstance(raw_payload, bytes):
            return raw_payload.decode("utf-8")
        return str(raw_payload)

    async def save(self, session_id: str, payload: str, ttl_seconds: int) -> None:
        """Write the payload and its TTL in one SETEX round trip."""
        try:
            await self._redis.setex(self._session_key(session_id), ttl_seconds, payload)
        except RedisError as exc:
            raise SessionPersistenceError("Session backend unavailable.") from exc

    async def delete(self, session_id: str) -> None:
        """Delete the key; deleting a missing key is not an error."""
        try:
            await self._redis.delete(self._session_key(session_id))
        except RedisError as exc:
            raise SessionPersistenceError("Session backend unavailable.") from exc

    async def ping(self) -> bool:
        """Return True when Redis answers PING."""
        return bool(await self._redis.ping())

    @staticmethod
    def _session_key(session_id: str) -> str:
        """Build Redis key for session payload."""
        return f"session:{session_id}"


class InMemorySessionStore:
    """Process-local store for development and tests; not shared between workers."""

    def __init__(self) -> None:
        self._entries: dict[str, tuple[str, float]] = {}

    async def load(self, session_id: str) -> str | None:
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        payload, deadline = entry
        if monotonic() >= deadline:
            self._entries.pop(session_id, None)
            return None
        return payload

    async def save(self, session_id: str, payload: str, ttl_seconds: int) -> None:
        self._purge_expired()
        self._entries[session_id] = (payload, monotonic() + ttl_seconds)

    async def delete(self, session_id: str) -> None:
        self._entries.pop(session_id, None)

    async def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._entries)

    def _purge_expired(self) -> None:
        now = monotonic()
        expired = [key for key, (_, deadline) in self._entries.items() if now >= deadline]
        for key in expired:
            del self._entries[key]


def _utc_now() -> datetime:
    return datetime.now(UTC)


class SessionManager:
    """Issue, resolve and destroy sessions over a pluggable backing store."""

    def __init__(
        self,
        store: SessionStore,
        ttl_seconds: int,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._store = store
        self._ttl_seconds = ttl_seconds
        self._now = now

    @property
    def ttl_seconds(self) -> int:
        """Lifetime applied to every new session."""
        return self._ttl_seconds

    @property
    def store(self) -> SessionStore:
        """Backing store used by this manager."""
        return self._store

    async def create(self, user_id: UUID | str) -> str:
        """Record a new session and return its token once the store acknowledged it."""
        created_at = self._now()
        record = SessionRecord(
            session_id=secrets.token_urlsafe(32),
            user_id=str(user_id),
            created_at=created_at,
            expires_at=created_at + timedelta(seconds=self._ttl_seconds),
        )
        try:
            await self._store.save(record.session_id, record.to_payload(), self._ttl_seconds)
        except SessionPersistenceError:
            logger.error("session.persist_failed", user_id=record.user_id)
            raise
        logger.info("session.created", user_id=record.user_id, expires_at=record.expires_at.isoformat())
        return record.session_id

    async def get(self, session_id: str | None) -> SessionRecord | None:
        """Resolve a token; unknown, malformed and expired sessions all read as None."""
        if not session_id:
            return None
        raw_payload = await self._store.load(session_id)
        if raw_payload is None:
            return None
        try:
            record = SessionRecord.from_payload(session_id, raw_payload)
        except ValueError:
            logger.warning("session.malformed")
            return None
        if record.is_expired(self._now()):
            return None
        return record

    async def destroy(self, session_id: str | None) -> None:
        """Remove a session; absent sessions are ignored."""
        if not session_id:
            return
        await self._store.delete(session_id)
        logger.info("session.destroyed")


@lru_cache
def get_redis_client() -> Redis:
    """Create and cache Redis client for async session operations."""
    settings = get_settings()
    return redis_async.from_url(settings.redis.url, decode_responses=True)


@lru_cache
def get_session_store() -> RedisSessionStore | InMemorySessionStore:
    """Create and cache the configured session backing store."""
    settings = get_settings()
    if settings.session.backend == "memory":
        return InMemorySessionStore()
    return RedisSessionStore(redis_client=get_redis_client())


@lru_cache
def get_session_manager() -> SessionManager:
    """Create and cache the session manager."""
    settings = get_settings()
    return SessionManager(store=get_session_store(), ttl_seconds=settings.session.ttl_seconds)
