#!/usr/bin/env python3
"""
Auth Service -- admin command line.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080
  python main.py create-user alice@example.com --first-name Alice --last-name Liddell
  python main.py list-users
  python main.py verify-token eyJhbGciOi...

Environment variables (read through core/config.py, .env supported):
  SECRET_KEY            JWT signing key, at least 32 characters (required unless DEBUG=true)
  DEBUG                 true to auto-generate a SECRET_KEY for local development
  DATABASE_URL          SQLAlchemy URL of the user database
  TOKEN_EXPIRE_SECONDS  Token lifetime (default 3600)
"""

import argparse
import getpass
import logging
import sys

from auth.accounts import AccountService
from auth.errors import AuthServiceError
from auth.passwords import BcryptHasher
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import Settings, get_settings
from core.logging_config import configure_logging

logger = logging.getLogger("authservice.cli")


def _build_services(settings: Settings) -> tuple[UserStore, AuthService, AccountService]:
    store = UserStore(settings.database_url)
    hasher = BcryptHasher(rounds=settings.bcrypt_rounds)
    tokens = TokenService(settings.secret_key, expire_seconds=settings.token_expire_seconds)
    return store, AuthService(store, hasher, tokens), AccountService(store, hasher)


def _cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload, log_level=settings.log_level.lower())
    return 0


def _cmd_create_user(args: argparse.Namespace, settings: Settings) -> int:
    password = args.password or getpass.getpass("Password: ")
    store, auth, _accounts = _build_services(settings)
    try:
        result = auth.register(args.email, password, args.first_name, args.last_name)
    finally:
        store.close()
    print(f"  {result.message}: {args.email}")
    return 0


def _cmd_list_users(args: argparse.Namespace, settings: Settings) -> int:
    store, _auth, accounts = _build_services(settings)
    try:
        views = accounts.list_users().data
    finally:
        store.close()
    if not views:
        print("  No users.")
        return 0
    print(f"  {'ID':>5}  {'EMAIL':<32}  NAME")
    print("  " + "─" * 60)
    for v in views:
        print(f"  {v.id:>5}  {v.email:<32}  {v.first_name} {v.last_name}")
    return 0


def _cmd_verify_token(args: argparse.Namespace, settings: Settings) -> int:
    tokens = TokenService(settings.secret_key, expire_seconds=settings.token_expire_seconds)
    claims = tokens.validate(args.token)
    print(f"  Token valid for user {claims.user_id} ({claims.email}), expires at {claims.expires_at}.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="auth-service",
        description="Authentication and user account service.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development only)")
    serve.set_defaults(func=_cmd_serve)

    create = sub.add_parser("create-user", help="Register a new account")
    create.add_argument("email", help="Account email (unique, case-sensitive)")
    create.add_argument("--first-name", required=True)
    create.add_argument("--last-name", required=True)
    create.add_argument("--password", help="Password (prompted if omitted)")
    create.set_defaults(func=_cmd_create_user)

    list_cmd = sub.add_parser("list-users", help="Print all accounts")
    list_cmd.set_defaults(func=_cmd_list_users)

    verify = sub.add_parser("verify-token", help="Check a bearer token's signature and expiry")
    verify.add_argument("token")
    verify.set_defaults(func=_cmd_verify_token)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    settings = get_settings()
    configure_logging(settings.log_level)
    try:
        return args.func(args, settings)
    except AuthServiceError as exc:
        logger.warning("%s: %s", exc.kind.value, exc.message)
        print(f"  [!] {exc.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
