"""Salted bcrypt password hashing."""

from __future__ import annotations

from functools import lru_cache

from passlib.context import CryptContext
from starlette.concurrency import run_in_threadpool

from blogauth.config import get_settings


class PasswordHasher:
    """One-way password hashing and verification backed by passlib's bcrypt handler.

    bcrypt is deliberately slow, so every public method runs in the threadpool
    and callers await it without stalling other requests on the event loop.
    """

    def __init__(self, rounds: int) -> None:
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    async def hash(self, plaintext: str) -> str:
        """Return a freshly salted bcrypt digest for the plaintext."""
        return str(await run_in_threadpool(self._context.hash, plaintext))

    async def verify(self, plaintext: str, digest: str) -> bool:
        """Return True when the digest was produced from the plaintext."""
        return await run_in_threadpool(self._verify_sync, plaintext, digest)

    async def dummy_verify(self) -> None:
        """Spend one verification's worth of time without a real digest."""
        await run_in_threadpool(self._context.dummy_verify)

    def _verify_sync(self, plaintext: str, digest: str) -> bool:
        """Verify in the calling thread, treating unparseable digests as a mismatch."""
        try:
            return bool(self._context.verify(plaintext, digest))
        except (TypeError, ValueError):
            return False


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Create and cache the password hasher."""
    return PasswordHasher(rounds=get_settings().password.bcrypt_rounds)
