"""
auth/passwords.py -- Password hashing.

bcrypt is used directly rather than through passlib: passlib's wrap-bug
detection hashes a password longer than 72 bytes, which bcrypt 4.x rejects
with an explicit error.

bcrypt only reads the first 72 bytes of a password, and bcrypt 5.x raises
ValueError rather than truncating. The workflows reject longer passwords
with ValidationError before they reach the hasher (see password_too_long).

PasswordHasher is the narrow interface the workflows depend on. Tests swap in
a cheap fake; production uses BcryptHasher.
"""

from __future__ import annotations

from typing import Protocol

import bcrypt

MAX_PASSWORD_BYTES = 72


def password_too_long(plain: str) -> bool:
    """True if the UTF-8 encoding exceeds what bcrypt will hash."""
    return len(plain.encode("utf-8")) > MAX_PASSWORD_BYTES


class PasswordHasher(Protocol):
    def hash(self, plain: str) -> str: ...

    def verify(self, plain: str, hashed: str) -> bool: ...

    @property
    def dummy_hash(self) -> str:
        """A valid hash of a throwaway secret, used to equalize login timing."""
        ...


class BcryptHasher:
    """Salted bcrypt hashing with a configurable cost factor."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds
        # Computed once so the first unknown-email login is not measurably
        # slower than later ones.
        self._dummy_hash = self.hash("authservice_timing_dummy")

    @property
    def dummy_hash(self) -> str:
        return self._dummy_hash

    def hash(self, plain: str) -> str:
        """Return a bcrypt hash of the plaintext password with a fresh salt."""
        return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if the plaintext matches. Malformed hashes verify as False."""
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False
