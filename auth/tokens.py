"""Signed, expiring identity tokens (JWT)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Mapping

import jwt

from .errors import ConfigurationError, ExpiredToken, InvalidToken

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "HS256"
DEFAULT_EXPIRES_IN = timedelta(days=7)
BEARER_SCHEME = "bearer"


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried inside an access token."""

    user_id: str
    email: str
    role: str
    issued_at: datetime | None = None
    expires_at: datetime | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_timestamp(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class TokenService:
    """Issue and verify access tokens signed with an injected key."""

    def __init__(
        self,
        secret_key: str | None,
        expires_in: timedelta | int = DEFAULT_EXPIRES_IN,
        algorithm: str = DEFAULT_ALGORITHM,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not secret_key:
            raise ConfigurationError("A JWT signing key must be configured.")
        if not isinstance(expires_in, timedelta):
            expires_in = timedelta(seconds=int(expires_in))
        self._secret_key = secret_key
        self.expires_in = expires_in
        self.algorithm = algorithm
        self._clock = clock

    def issue(self, claims: TokenClaims | Mapping[str, str]) -> str:
        """Return a signed token for ``claims``."""

        if isinstance(claims, Mapping):
            claims = TokenClaims(
                user_id=claims["user_id"], email=claims["email"], role=claims["role"]
            )

        now = self._clock()
        payload = {
            "sub": str(claims.user_id),
            "email": claims.email,
            "role": claims.role,
            "iat": int(now.timestamp()),
            "exp": int((now + self.expires_in).timestamp()),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Return the claims of ``token`` or raise ExpiredToken / InvalidToken.

        Expiry is judged against the service clock rather than the wall clock.
        """

        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                options={
                    "require": ["sub", "iat", "exp"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as exc:
            logger.info("Rejected access token: %s", exc)
            raise InvalidToken() from exc

        issued_at = payload["iat"]
        expires_at = payload["exp"]
        if not _is_timestamp(issued_at) or not _is_timestamp(expires_at):
            raise InvalidToken()
        if expires_at <= self._clock().timestamp():
            raise ExpiredToken()

        email = payload.get("email")
        role = payload.get("role")
        if not email or not role:
            raise InvalidToken()

        return TokenClaims(
            user_id=payload["sub"],
            email=email,
            role=role,
            issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
        )


def extract_from_header(header: str | None) -> str | None:
    """Return the token of a ``Bearer <token>`` header value, else None."""

    if not header:
        return None
    parts = header.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:
        return None
    return parts[1].strip() or None
