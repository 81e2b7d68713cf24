"""
API request and response models for the auth service REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are kept
separate from the dataclasses in auth/models.py, which own the internal
domain representation. Route handlers map between the two.

Wire format uses camelCase (firstName, lastName); Python attributes stay
snake_case. populate_by_name lets tests and the CLI build models either way.

Request fields that the workflow must validate (register, profile update,
password update) are Optional here on purpose: a missing field reaches the
workflow and yields the domain ValidationError ("Required fields not
provided") rather than a framework-shaped 422.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from auth.models import ApiResult, LoginResult, UserView

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


class ApiResponse(BaseModel, Generic[T]):
    """Uniform body for every response, success or failure."""

    success: bool
    message: str
    data: Optional[T] = None

    @classmethod
    def failure(cls, message: str) -> "ApiResponse[None]":
        return ApiResponse[None](success=False, message=message, data=None)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=128)


class RegisterRequest(BaseModel):
    # Passwords are taken verbatim, so no str_strip_whitespace here.
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=128)
    first_name: Optional[str] = Field(default=None, max_length=255, alias="firstName")
    last_name: Optional[str] = Field(default=None, max_length=255, alias="lastName")


class UserUpdateRequest(BaseModel):
    # Names are stored exactly as sent, surrounding whitespace included.
    model_config = ConfigDict(populate_by_name=True)

    first_name: Optional[str] = Field(default=None, max_length=255, alias="firstName")
    last_name: Optional[str] = Field(default=None, max_length=255, alias="lastName")


class PasswordUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_password: Optional[str] = Field(default=None, max_length=128, alias="newPassword")


# ---------------------------------------------------------------------------
# Response payloads
# ---------------------------------------------------------------------------


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    token: str
    token_type: str = Field(default="bearer", alias="tokenType")
    expires_in: int = Field(alias="expiresIn")

    @classmethod
    def from_result(cls, result: LoginResult, expires_in: int) -> "LoginResponse":
        return cls(token=result.token, expires_in=expires_in)


class UserResponse(BaseModel):
    """Public user shape. There is deliberately no password field."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    email: str
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")

    @classmethod
    def from_view(cls, view: UserView) -> "UserResponse":
        """Factory Method: mapping lives next to the output model, not in handlers."""
        return cls(id=view.id, email=view.email, first_name=view.first_name, last_name=view.last_name)


def envelope(result: ApiResult, data=None) -> dict:
    """Turn a workflow ApiResult into the kwargs of an ApiResponse.

    data overrides result.data when the caller has already mapped the payload
    to its transport model.
    """
    return {"success": result.success, "message": result.message, "data": data}


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
