"""
auth/models.py -- Domain dataclasses for the auth service.

Pattern: Data class (pure data container, near-zero logic). Stores and
workflows do the work; these classes own domain shape.

User is the stored record and carries hashed_password. UserView is the only
shape that ever leaves the domain layer -- it has no password field at all,
so a view cannot leak the hash even by accident.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class User:
    """A registered account.

    id is None until the store assigns one. email is unique and compared
    case-sensitively, exactly as stored.
    """

    email: str
    first_name: str
    last_name: str
    hashed_password: str
    id: int | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class UserView:
    """Public projection of a User (id, email, names)."""

    id: int
    email: str
    first_name: str
    last_name: str

    @classmethod
    def from_user(cls, user: User) -> "UserView":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
        )


@dataclass(frozen=True)
class LoginResult:
    token: str


@dataclass(frozen=True)
class TokenClaims:
    """Decoded, verified token contents."""

    user_id: int
    email: str
    issued_at: int
    expires_at: int


@dataclass(frozen=True)
class ApiResult(Generic[T]):
    """Outcome envelope returned by every workflow operation.

    The API layer converts it 1:1 into the ApiResponse JSON body.
    """

    success: bool
    message: str
    data: Optional[T] = None
