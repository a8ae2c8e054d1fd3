"""Unit tests for bcrypt password hashing."""

from __future__ import annotations

import pytest

from blogauth.core.passwords import PasswordHasher


@pytest.mark.asyncio
async def test_hash_is_salted_and_both_digests_verify() -> None:
    """Hashing the same secret twice yields different digests that both verify."""
    hasher = PasswordHasher(rounds=4)

    first = await hasher.hash("secret")
    second = await hasher.hash("secret")

    assert first != second
    assert "secret" not in first
    assert await hasher.verify("secret", first) is True
    assert await hasher.verify("secret", second) is True


@pytest.mark.asyncio
async def test_verify_rejects_other_password() -> None:
    """A digest only verifies against its own plaintext."""
    hasher = PasswordHasher(rounds=4)
    digest = await hasher.hash("pw1")

    assert await hasher.verify("pw2", digest) is False
    assert await hasher.verify("", digest) is False


@pytest.mark.asyncio
async def test_verify_treats_malformed_digest_as_mismatch() -> None:
    """Unparseable stored digests never raise out of verify."""
    hasher = PasswordHasher(rounds=4)

    assert await hasher.verify("secret", "not-a-bcrypt-digest") is False


@pytest.mark.asyncio
async def test_hash_uses_configured_work_factor() -> None:
    """The bcrypt cost is encoded in the digest."""
    hasher = PasswordHasher(rounds=5)

    digest = await hasher.hash("secret")

    assert digest.startswith("$2b$05$")


@pytest.mark.asyncio
async def test_dummy_verify_completes() -> None:
    """dummy_verify runs without a stored digest."""
    hasher = PasswordHasher(rounds=4)

    await hasher.dummy_verify()
