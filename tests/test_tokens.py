"""Unit tests for auth/tokens.py -- TokenService issue/validate.

Covers:
- Issued token validates and carries the user's id and email
- Expiry is enforced against the injected clock (boundary included)
- Any altered byte in header, payload or signature is rejected
- Tokens signed with another key or algorithm are rejected
- Missing / malformed subject is rejected
- All failures share a single InvalidToken kind and message
"""

from __future__ import annotations

import string

import pytest
from jose import jwt

from auth.errors import ErrorKind, InvalidToken
from auth.models import User
from auth.tokens import TokenService

SECRET = "unit-test-secret-0123456789abcdef0123456789"


def _user(user_id: int = 7) -> User:
    return User(id=user_id, email="ada@example.com", first_name="Ada", last_name="Lovelace", hashed_password="x")


_B64URL = string.ascii_uppercase + string.ascii_lowercase + string.digits + "-_"


def _flip(char: str) -> str:
    return "A" if char != "A" else "B"


def _low_bit_neighbour(char: str) -> str:
    """The base64url character whose 6-bit value differs only in bit 0."""
    return _B64URL[_B64URL.index(char) ^ 1]


class TestIssueAndValidate:
    def test_round_trip_returns_subject(self, token_service: TokenService) -> None:
        token = token_service.issue(_user(7))
        claims = token_service.validate(token)
        assert claims.user_id == 7
        assert claims.email == "ada@example.com"

    def test_expiry_is_issue_time_plus_ttl(self, token_service: TokenService, clock) -> None:
        token = token_service.issue(_user())
        claims = token_service.validate(token)
        assert claims.issued_at == int(clock.now.timestamp())
        assert claims.expires_at - claims.issued_at == 3600

    def test_subject_is_string_claim(self, token_service: TokenService) -> None:
        """RFC 7519 requires sub to be a string; the id is encoded as one."""
        token = token_service.issue(_user(42))
        payload = jwt.get_unverified_claims(token)
        assert payload["sub"] == "42"

    def test_issue_requires_persisted_user(self, token_service: TokenService) -> None:
        unsaved = User(email="x@example.com", first_name="X", last_name="Y", hashed_password="h")
        with pytest.raises(ValueError):
            token_service.issue(unsaved)

    def test_non_positive_ttl_rejected(self) -> None:
        with pytest.raises(ValueError):
            TokenService(SECRET, expire_seconds=0)


class TestExpiry:
    def test_valid_just_before_expiry(self, token_service: TokenService, clock) -> None:
        token = token_service.issue(_user())
        clock.advance(3599)
        assert token_service.validate(token).user_id == 7

    def test_invalid_at_expiry(self, token_service: TokenService, clock) -> None:
        token = token_service.issue(_user())
        clock.advance(3600)
        with pytest.raises(InvalidToken):
            token_service.validate(token)

    def test_invalid_long_after_expiry(self, token_service: TokenService, clock) -> None:
        token = token_service.issue(_user())
        clock.advance(86400)
        with pytest.raises(InvalidToken):
            token_service.validate(token)


class TestTampering:
    @pytest.mark.parametrize("segment", [0, 1, 2])
    def test_altered_segment_rejected(self, token_service: TokenService, segment: int) -> None:
        """Change one character in the middle of header, payload or signature."""
        token = token_service.issue(_user())
        parts = token.split(".")
        target = parts[segment]
        mid = len(target) // 2
        parts[segment] = target[:mid] + _flip(target[mid]) + target[mid + 1 :]
        with pytest.raises(InvalidToken):
            token_service.validate(".".join(parts))

    @pytest.mark.parametrize("segment", [0, 1, 2])
    def test_altered_last_character_rejected(self, token_service: TokenService, segment: int) -> None:
        """The last character may only carry unused bits; changing it still fails."""
        for user_id in range(1, 40):
            parts = token_service.issue(_user(user_id)).split(".")
            parts[segment] = parts[segment][:-1] + _low_bit_neighbour(parts[segment][-1])
            with pytest.raises(InvalidToken):
                token_service.validate(".".join(parts))

    def test_non_canonical_signature_rejected(self, token_service: TokenService) -> None:
        """A 43-character HS256 signature leaves 2 spare bits in its last character."""
        head, payload, sig = token_service.issue(_user()).split(".")
        assert len(sig) == 43
        alias = sig[:-1] + _low_bit_neighbour(sig[-1])
        with pytest.raises(InvalidToken):
            token_service.validate(f"{head}.{payload}.{alias}")

    def test_other_key_rejected(self, token_service: TokenService, clock) -> None:
        other = TokenService("another-secret-0123456789abcdef01234567", clock=clock)
        with pytest.raises(InvalidToken):
            token_service.validate(other.issue(_user()))

    def test_other_algorithm_rejected(self, clock) -> None:
        service = TokenService(SECRET, clock=clock)
        exp = int(clock.now.timestamp()) + 60
        forged = jwt.encode({"sub": "7", "exp": exp}, SECRET, algorithm="HS512")
        with pytest.raises(InvalidToken):
            service.validate(forged)

    @pytest.mark.parametrize("token", ["", "not-a-token", "a.b.c", "a.b"])
    def test_malformed_rejected(self, token_service: TokenService, token: str) -> None:
        with pytest.raises(InvalidToken):
            token_service.validate(token)

    @pytest.mark.parametrize("sub", [None, "", "abc"])
    def test_bad_subject_rejected(self, clock, sub) -> None:
        service = TokenService(SECRET, clock=clock)
        claims = {"exp": int(clock.now.timestamp()) + 60}
        if sub is not None:
            claims["sub"] = sub
        token = jwt.encode(claims, SECRET, algorithm="HS256")
        with pytest.raises(InvalidToken):
            service.validate(token)


def test_all_failures_share_kind_and_message(token_service: TokenService, clock) -> None:
    """Expired and tampered tokens are indistinguishable to the caller."""
    expired = token_service.issue(_user())
    clock.advance(7200)
    fresh = token_service.issue(_user())
    tampered = fresh[:-10] + ("x" if fresh[-10] != "x" else "y") + fresh[-9:]

    errors = []
    for token in (expired, tampered, "garbage"):
        with pytest.raises(InvalidToken) as exc_info:
            token_service.validate(token)
        errors.append(exc_info.value)

    assert {e.kind for e in errors} == {ErrorKind.INVALID_TOKEN}
    assert {e.message for e in errors} == {"Invalid or expired token"}
    assert {e.status_code for e in errors} == {401}
