"""
auth/service.py -- Auth workflow: login, registration, token verification.

AuthService holds only its injected collaborators (store, hasher, tokens) and
no per-request state, so one instance is shared by every request thread.

Login hygiene:
  Unknown email and wrong password raise the same InvalidCredentials with the
  same message. For unknown emails the hasher still runs against a dummy hash
  so response time does not reveal whether an account exists.

Registration:
  Required-field and password-length validation happen before any store
  access (bcrypt hashes at most 72 bytes). The
  exists_by_email() check gives a friendly DuplicateEmail; the UNIQUE(email)
  constraint is the real guard, and its IntegrityError maps to the same error.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from auth.errors import DuplicateEmail, InvalidCredentials, ValidationError
from auth.models import ApiResult, LoginResult, User
from auth.passwords import MAX_PASSWORD_BYTES, PasswordHasher, password_too_long
from auth.store import CredentialStore
from auth.tokens import TokenService

logger = logging.getLogger("authservice.auth")


def _missing(value: str | None) -> bool:
    return value is None or not value.strip()


class AuthService:
    def __init__(self, store: CredentialStore, hasher: PasswordHasher, tokens: TokenService) -> None:
        self._store = store
        self._hasher = hasher
        self._tokens = tokens

    def authenticate(self, email: str, password: str) -> User:
        """Return the user whose credentials match, or raise InvalidCredentials.

        Always runs the hasher once, whether or not the email exists.
        """
        user = self._store.get_by_email(email)
        if user is None:
            self._hasher.verify(password, self._hasher.dummy_hash)
            raise InvalidCredentials("Invalid credentials")
        if not self._hasher.verify(password, user.hashed_password):
            raise InvalidCredentials("Invalid credentials")
        return user

    def login(self, email: str, password: str) -> ApiResult[LoginResult]:
        try:
            user = self.authenticate(email, password)
        except InvalidCredentials:
            logger.warning("Invalid credentials for email %s", email)
            raise
        token = self._tokens.issue(user)
        logger.info("User %s logged in", email)
        return ApiResult(True, "Login successful", LoginResult(token=token))

    def register(
        self,
        email: str | None,
        password: str | None,
        first_name: str | None,
        last_name: str | None,
    ) -> ApiResult[None]:
        if any(_missing(v) for v in (email, password, first_name, last_name)):
            logger.warning("Registration rejected: required fields not provided")
            raise ValidationError("Required fields not provided")
        if password_too_long(password):
            logger.warning("Registration rejected: password too long")
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        if self._store.exists_by_email(email):
            logger.warning("Registration rejected: email already exists: %s", email)
            raise DuplicateEmail("Email already exists")

        user = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            hashed_password=self._hasher.hash(password),
        )
        try:
            user_id = self._store.create_user(user)
        except IntegrityError as exc:
            # A concurrent registration won the race for this email.
            logger.warning("Registration rejected by unique constraint: %s", email)
            raise DuplicateEmail("Email already exists") from exc

        logger.info("User registered with email %s (id=%s)", email, user_id)
        return ApiResult(True, "User registered successfully")

    def verify_token(self, token: str) -> ApiResult[None]:
        claims = self._tokens.validate(token)
        logger.info("Token verified for user id %s", claims.user_id)
        return ApiResult(True, "Token verified successfully")
