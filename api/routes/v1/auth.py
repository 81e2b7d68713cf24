"""
api/routes/v1/auth.py -- Login, registration and token verification endpoints.

Routes:
  POST /api/v1/auth/login      -- email + password; returns a bearer token
  POST /api/v1/auth/register   -- create an account; 201, no payload
  GET  /api/v1/auth/verify     -- validate the Authorization: Bearer token

All three are public. Domain errors raised by AuthService propagate to the
AuthServiceError handler in api/main.py, which logs and renders the envelope.

Security:
  Login and register are sync (def) handlers so bcrypt runs in FastAPI's
  threadpool instead of blocking the event loop.
  Cache-Control: no-store on login responses so tokens are not cached.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from api.models import ApiResponse, LoginRequest, LoginResponse, RegisterRequest, envelope
from auth.dependencies import bearer_token, get_auth_service, get_token_service
from auth.service import AuthService
from auth.tokens import TokenService

# Auth policy:
# - POST /api/v1/auth/login:     public -- login endpoint must be unauthenticated
# - POST /api/v1/auth/register:  public -- self-registration
# - GET  /api/v1/auth/verify:    public -- the token under test is the credential
router = APIRouter()


@router.post("/auth/login", response_model=ApiResponse[LoginResponse])
def login(
    body: LoginRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    tokens: TokenService = Depends(get_token_service),
) -> ApiResponse[LoginResponse]:
    """Authenticate with email and password and return a signed token.

    Wrong password and unknown email both produce the same 400
    invalid-credentials envelope.
    """
    result = auth.login(body.email, body.password)
    response.headers["Cache-Control"] = "no-store"
    payload = LoginResponse.from_result(result.data, expires_in=tokens.expire_seconds)
    return ApiResponse[LoginResponse](**envelope(result, payload))


@router.post("/auth/register", response_model=ApiResponse[None], status_code=201)
def register(
    body: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
) -> ApiResponse[None]:
    """Create a new account. Missing fields -> 400; taken email -> 400."""
    result = auth.register(body.email, body.password, body.first_name, body.last_name)
    return ApiResponse[None](**envelope(result))


@router.get("/auth/verify", response_model=ApiResponse[None])
def verify(
    token: str = Depends(bearer_token),
    auth: AuthService = Depends(get_auth_service),
) -> ApiResponse[None]:
    """Validate the bearer token's signature and expiry."""
    result = auth.verify_token(token)
    return ApiResponse[None](**envelope(result))
