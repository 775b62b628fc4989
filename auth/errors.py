"""Error taxonomy for authentication and authorization failures."""

from __future__ import annotations

from http import HTTPStatus


class ConfigurationError(RuntimeError):
    """Raised at start-up when required security settings are missing."""


class AuthError(Exception):
    """Base class for failures that map onto an HTTP status."""

    status_code = HTTPStatus.UNAUTHORIZED
    message = "Unauthorized."

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class AuthenticationError(AuthError):
    """The request could not be tied to an active user."""

    message = "Authentication failed."


class MissingToken(AuthenticationError):
    message = "Missing authentication token."


class InvalidToken(AuthenticationError):
    message = "Invalid authentication token."


class ExpiredToken(AuthenticationError):
    message = "Authentication token has expired."


class UserNotFound(AuthenticationError):
    message = "User does not exist."


class AccountDisabled(AuthenticationError):
    message = "User account has been disabled."


class LookupFailure(AuthenticationError):
    message = "Authentication failed."


class InsufficientRole(AuthError):
    status_code = HTTPStatus.FORBIDDEN
    message = "Insufficient permissions."
