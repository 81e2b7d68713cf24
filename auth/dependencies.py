"""
auth/dependencies.py -- FastAPI Depends() helpers for the auth layer.

The workflows are built once in the lifespan (api/main.py) and stored on
app.state. These helpers hand them to route handlers, so handlers never
construct collaborators and tests can wire fakes through app.state alone.

get_current_user_id() guards the /users routes: it requires an
"Authorization: Bearer <token>" header and raises InvalidToken otherwise.
The boundary handler turns that into a 401 envelope.

auth/dependencies.py may import from fastapi (Request) because it is part of
the FastAPI dependency injection system. It does not import from api/.
"""

from __future__ import annotations

from fastapi import Depends, Request

from auth.accounts import AccountService
from auth.errors import InvalidToken
from auth.service import AuthService
from auth.tokens import TokenService


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_account_service(request: Request) -> AccountService:
    return request.app.state.account_service


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def bearer_token(request: Request) -> str:
    """Extract the raw token from the Authorization header.

    Raises InvalidToken when the header is absent or not a Bearer credential.
    """
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise InvalidToken("Invalid or expired token")
    return token.strip()


def get_current_user_id(
    token: str = Depends(bearer_token),
    tokens: TokenService = Depends(get_token_service),
) -> int:
    """Require a valid bearer token and return its subject (user id).

    Use as a FastAPI dependency:
        @router.get("/users")
        def route(user_id: int = Depends(get_current_user_id)): ...
    """
    return tokens.validate(token).user_id
