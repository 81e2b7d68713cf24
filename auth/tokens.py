"""
auth/tokens.py -- Signed, time-bounded bearer tokens.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry sub (the user id as a string,
       per RFC 7519), email, iat and exp. Nothing is persisted; validity is
       re-derived from signature + clock on every call, so there is no
       revocation.

  Clock injection: the exp check is done here against the injected clock
       rather than by python-jose (which always reads wall time). Tests move
       the clock instead of sleeping.

  Encoding: each segment must be the canonical base64url form of its
       bytes, so a token altered in its padding bits is rejected too.

  Failure mode: every failure -- malformed, bad signature, wrong algorithm,
       expired, missing subject -- raises the single InvalidToken kind with
       the same message. Callers cannot tell them apart and do not need to.

Layer rule: no imports from api/. Settings are not read here; the lifespan
passes secret_key and expire_seconds into the constructor.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from jose.utils import base64url_decode, base64url_encode

from auth.errors import InvalidToken
from auth.models import TokenClaims, User

logger = logging.getLogger("authservice.auth")

ALGORITHM = "HS256"

_INVALID_TOKEN_MESSAGE = "Invalid or expired token"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _is_canonical(token: str) -> bool:
    """True if every segment is the exact base64url encoding of its bytes.

    The last character of a segment can carry unused low bits that decoders
    ignore, so two different strings can decode to the same signature.
    """
    try:
        segments = token.encode("ascii").split(b".")
        return all(base64url_encode(base64url_decode(seg)) == seg for seg in segments)
    except ValueError:
        return False


class TokenService:
    """Issues and validates JWTs bound to a user identity.

    Usage:
        tokens = TokenService(secret_key=settings.secret_key, expire_seconds=3600)
        token = tokens.issue(user)
        claims = tokens.validate(token)   # raises InvalidToken
    """

    def __init__(self, secret_key: str, expire_seconds: int = 3600, clock: Clock = utc_now) -> None:
        if expire_seconds <= 0:
            raise ValueError("expire_seconds must be positive")
        self._secret_key = secret_key
        self.expire_seconds = expire_seconds
        self._clock = clock

    def issue(self, user: User) -> str:
        """Encode a signed JWT for the user, expiring expire_seconds from now."""
        if user.id is None:
            raise ValueError("Cannot issue a token for a user without an id")
        now = self._clock()
        expire = now + timedelta(seconds=self.expire_seconds)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
        }
        return jwt.encode(payload, self._secret_key, algorithm=ALGORITHM)

    def validate(self, token: str) -> TokenClaims:
        """Verify signature and expiry and return the claims.

        Raises InvalidToken on any failure.
        """
        if not token or not _is_canonical(token):
            logger.debug("Token rejected: empty or non-canonical encoding")
            raise InvalidToken(_INVALID_TOKEN_MESSAGE)
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            logger.debug("Token rejected: %s", exc)
            raise InvalidToken(_INVALID_TOKEN_MESSAGE) from exc

        exp = payload.get("exp")
        sub = payload.get("sub")
        if not isinstance(exp, int) or not isinstance(sub, str) or not sub.isdigit():
            logger.debug("Token rejected: missing or malformed claims")
            raise InvalidToken(_INVALID_TOKEN_MESSAGE)
        if int(self._clock().timestamp()) >= exp:
            logger.debug("Token rejected: expired")
            raise InvalidToken(_INVALID_TOKEN_MESSAGE)

        return TokenClaims(
            user_id=int(sub),
            email=str(payload.get("email", "")),
            issued_at=int(payload.get("iat", 0)),
            expires_at=exp,
        )
