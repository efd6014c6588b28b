"""Signed session tokens: issuance and verification.

Tokens are HS256 JWTs carrying ``sub`` (username), ``userId``, ``role``,
``iat`` and ``exp``. A token is valid from issuance until ``exp`` and cannot
be refreshed or revoked by this module.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from django.conf import settings

from access_control.models import Role
from .principal import SessionPrincipal

logger = logging.getLogger(__name__)

# HS256 needs at least 256 bits of key material.
MIN_SECRET_LENGTH = 32

# Substituted for secrets shorter than MIN_SECRET_LENGTH instead of failing
# startup. Every deployment with a short secret therefore shares this key;
# system check authentication.W001 reports it.
FALLBACK_SECRET = "default-256-bit-secret-for-development-only!!!!!!!!"


class InvalidToken(Exception):
    """Raised for any token that fails verification.

    The message never says whether the token was forged, malformed or expired.
    """

    def __init__(self) -> None:
        super().__init__("Invalid or expired token")


def uses_fallback_secret(secret: Optional[str]) -> bool:
    return secret is None or len(secret) < MIN_SECRET_LENGTH


def derive_signing_key(secret: Optional[str]) -> bytes:
    """Return the HMAC key for ``secret``, or the fallback key if it is too short."""

    if uses_fallback_secret(secret):
        return FALLBACK_SECRET.encode("utf-8")
    return secret.encode("utf-8")


class TokenAuthenticator:
    """Issue and verify session tokens for users."""

    ALGORITHM = "HS256"
    REQUIRED_CLAIMS = ("sub", "userId", "role", "iat", "exp")

    def __init__(self, secret: Optional[str] = None, ttl: Optional[timedelta] = None):
        if secret is None:
            secret = settings.JWT_SECRET
        if ttl is None:
            ttl = timedelta(seconds=settings.JWT_EXPIRATION_SECONDS)
        self._key = derive_signing_key(secret)
        self.ttl = ttl

    def issue(self, user, now: Optional[datetime] = None) -> str:
        """Return a signed token for ``user`` valid for ``self.ttl`` from ``now``."""

        issued_at = _whole_seconds(now or datetime.now(timezone.utc))
        expires_at = issued_at + self.ttl
        payload = {
            "sub": user.username,
            "userId": int(user.pk),
            "role": str(user.role),
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(payload, self._key, algorithm=self.ALGORITHM)

    def verify(self, token: str, now: Optional[datetime] = None) -> SessionPrincipal:
        """Check signature, structure and expiry; return the caller's principal.

        Raises ``InvalidToken`` for every kind of failure.
        """

        try:
            # Expiry is compared below against ``now`` so callers can pin the clock.
            claims = jwt.decode(
                token,
                self._key,
                algorithms=[self.ALGORITHM],
                options={
                    "require": list(self.REQUIRED_CLAIMS),
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
            principal = self._principal_from_claims(claims)
        except (jwt.InvalidTokenError, TypeError, ValueError, OverflowError, OSError) as exc:
            logger.debug("Token rejected: %s", exc)
            raise InvalidToken() from None

        current = now or datetime.now(timezone.utc)
        if current >= principal.expires_at:
            logger.debug("Token rejected: expired at %s", principal.expires_at.isoformat())
            raise InvalidToken()

        return principal

    @staticmethod
    def _principal_from_claims(claims: dict[str, Any]) -> SessionPrincipal:
        user_id = claims["userId"]
        iat = claims["iat"]
        exp = claims["exp"]
        username = claims["sub"]
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            raise ValueError("userId claim must be an integer")
        if not isinstance(iat, (int, float)) or not isinstance(exp, (int, float)):
            raise ValueError("iat and exp claims must be numeric")
        if not isinstance(username, str) or not username:
            raise ValueError("sub claim must be a non-empty string")

        return SessionPrincipal(
            user_id=user_id,
            username=username,
            # Unknown role names raise ValueError.
            role=Role(claims["role"]),
            issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
        )


def _whole_seconds(moment: datetime) -> datetime:
    return moment.replace(microsecond=0)


__all__ = [
    "FALLBACK_SECRET",
    "InvalidToken",
    "MIN_SECRET_LENGTH",
    "TokenAuthenticator",
    "derive_signing_key",
    "uses_fallback_secret",
]
