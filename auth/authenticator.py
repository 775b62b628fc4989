"""Resolve a request's bearer token to the current, active user."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .errors import AccountDisabled, LookupFailure, MissingToken, UserNotFound
from .tokens import TokenService, extract_from_header

logger = logging.getLogger(__name__)

UserLookup = Callable[[str], Optional[Any]]


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity attached to a request once authentication succeeds."""

    id: str
    email: str
    name: str | None
    role: str
    is_active: bool

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "isActive": self.is_active,
        }


class Authenticator:
    """Check token validity, then the account's current state."""

    def __init__(self, token_service: TokenService, user_lookup: UserLookup):
        self.token_service = token_service
        self.user_lookup = user_lookup

    def authenticate(self, request) -> AuthenticatedUser:
        """Return the user behind ``request``'s Authorization header.

        Raises MissingToken, InvalidToken, ExpiredToken, UserNotFound,
        AccountDisabled or LookupFailure.
        """

        token = extract_from_header(request.headers.get("Authorization"))
        if token is None:
            raise MissingToken()

        claims = self.token_service.verify(token)

        try:
            record = self.user_lookup(claims.user_id)
        except Exception as exc:
            logger.exception("User lookup failed for %s", claims.user_id)
            raise LookupFailure() from exc

        if record is None:
            raise UserNotFound()
        if not record.is_active:
            raise AccountDisabled()

        return AuthenticatedUser(
            id=str(record.id),
            email=record.email,
            name=record.name,
            role=record.role,
            is_active=bool(record.is_active),
        )
