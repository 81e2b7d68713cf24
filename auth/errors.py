"""
auth/errors.py -- Typed domain errors raised by the auth and account workflows.

Every error carries an ErrorKind, and each kind owns its HTTP status. The
boundary in api/main.py has a single handler for AuthServiceError that reads
kind/status_code off the instance, so adding a kind never requires a new
handler.

Layer rule: no imports from api/. No FastAPI types here -- the status codes
are plain ints so the CLI can use the same errors.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION_ERROR = "validation_error"
    DUPLICATE_EMAIL = "duplicate_email"
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_TOKEN = "invalid_token"
    USER_NOT_FOUND = "user_not_found"
    UNEXPECTED = "unexpected"


class AuthServiceError(Exception):
    """Base class for domain errors. The message is safe to show to clients."""

    kind: ErrorKind = ErrorKind.UNEXPECTED
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AuthServiceError):
    """Raised when required input is missing."""

    kind = ErrorKind.VALIDATION_ERROR
    status_code = 400


class DuplicateEmail(AuthServiceError):
    """Raised when registering an email that already has an account."""

    kind = ErrorKind.DUPLICATE_EMAIL
    status_code = 400


class InvalidCredentials(AuthServiceError):
    """Raised on failed login. Unknown email and wrong password are indistinguishable."""

    kind = ErrorKind.INVALID_CREDENTIALS
    status_code = 400


class InvalidToken(AuthServiceError):
    """Raised for malformed, tampered, or expired tokens."""

    kind = ErrorKind.INVALID_TOKEN
    status_code = 401


class UserNotFound(AuthServiceError):
    kind = ErrorKind.USER_NOT_FOUND
    status_code = 404
