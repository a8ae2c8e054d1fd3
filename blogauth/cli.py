"""CLI entrypoints for blog service operational tasks."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import json
from collections.abc import Sequence

from blogauth.config import configure_structlog, get_settings
from blogauth.core.passwords import get_password_hasher
from blogauth.core.sessions import get_session_manager
from blogauth.db.session import dispose_engine, get_session_factory
from blogauth.errors import ServiceError
from blogauth.services.auth_service import AuthService
from blogauth.services.credential_store import CredentialStore


async def _run_create_user(email: str, password: str) -> int:
    """Register a user through the same path as the signup route."""
    auth_service = AuthService(
        credential_store=CredentialStore(),
        password_hasher=get_password_hasher(),
        session_manager=get_session_manager(),
    )
    session_factory = get_session_factory()
    try:
        async with session_factory() as db_session:
            user = await auth_service.signup(db_session=db_session, email=email, password=password)
    except ServiceError as exc:
        print(json.dumps({"error": exc.code, "detail": exc.detail}))
        return 1
    finally:
        await dispose_engine()

    print(json.dumps({"user_id": str(user.id), "email": user.email}))
    return 0


def _build_parser() -> argparse.ArgumentParser:
    """Build command-line parser for supported operational commands."""
    parser = argparse.ArgumentParser(prog="python -m blogauth.cli")
    subcommands = parser.add_subparsers(dest="command", required=True)

    create_parser = subcommands.add_parser("create-user")
    create_parser.add_argument("--email", required=True)
    create_parser.add_argument(
        "--password",
        default=None,
        help="Plaintext password; prompted for when omitted.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run CLI command."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_structlog(get_settings())
    if args.command == "create-user":
        password = args.password if args.password is not None else getpass.getpass("Password: ")
        return asyncio.run(_run_create_user(email=args.email, password=password))
    parser.error("Unsupported command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
