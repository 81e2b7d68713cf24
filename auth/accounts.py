"""
auth/accounts.py -- Account workflow: read, update and delete user records.

Every lookup that misses raises UserNotFound; no partially built view is ever
returned. Views are produced only through UserView.from_user(), which has no
password field.

Mutations are read-modify-write against the store with no optimistic
concurrency check: the last writer wins.
"""

from __future__ import annotations

import logging

from auth.errors import UserNotFound, ValidationError
from auth.models import ApiResult, User, UserView
from auth.passwords import MAX_PASSWORD_BYTES, PasswordHasher, password_too_long
from auth.store import CredentialStore

logger = logging.getLogger("authservice.accounts")


class AccountService:
    def __init__(self, store: CredentialStore, hasher: PasswordHasher) -> None:
        self._store = store
        self._hasher = hasher

    def _require(self, user: User | None) -> User:
        if user is None:
            raise UserNotFound("User not found")
        return user

    def list_users(self) -> ApiResult[list[UserView]]:
        views = [UserView.from_user(u) for u in self._store.list_users()]
        logger.info("Users retrieved (%d)", len(views))
        return ApiResult(True, "Users retrieved successfully", views)

    def get_by_id(self, user_id: int) -> ApiResult[UserView]:
        user = self._require(self._store.get_by_id(user_id))
        return ApiResult(True, "User retrieved successfully", UserView.from_user(user))

    def get_by_email(self, email: str) -> ApiResult[UserView]:
        user = self._require(self._store.get_by_email(email))
        return ApiResult(True, "User retrieved successfully", UserView.from_user(user))

    def update_profile(self, user_id: int, first_name: str | None, last_name: str | None) -> ApiResult[UserView]:
        """Overwrite both name fields exactly as given. No merge with previous values."""
        user = self._require(self._store.get_by_id(user_id))
        if first_name is None or last_name is None:
            raise ValidationError("Required fields not provided")

        if not self._store.update_user(user_id, first_name=first_name, last_name=last_name):
            # Deleted between the read and the write.
            raise UserNotFound("User not found")
        user.first_name = first_name
        user.last_name = last_name

        view = UserView.from_user(user)
        logger.info("User %s updated", user_id)
        return ApiResult(True, "User updated successfully", view)

    def update_password(self, user_id: int, new_password: str | None) -> ApiResult[None]:
        self._require(self._store.get_by_id(user_id))
        if new_password is None or not new_password.strip():
            raise ValidationError("Required fields not provided")
        if password_too_long(new_password):
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        if not self._store.update_user(user_id, hashed_password=self._hasher.hash(new_password)):
            raise UserNotFound("User not found")
        logger.info("Password updated for user %s", user_id)
        return ApiResult(True, "User password updated successfully")

    def delete_user(self, user_id: int) -> ApiResult[None]:
        if not self._store.delete_user(user_id):
            raise UserNotFound("User not found")
        logger.info("User %s deleted", user_id)
        return ApiResult(True, "User deleted successfully")
