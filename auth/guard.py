"""View decorators enforcing authentication and role allow-lists."""

from __future__ import annotations

from functools import wraps
from typing import Callable, Iterable

from flask import current_app, g, request

from models.user import ROLE_ADMIN, ROLE_EDITOR
from utils.responses import error_response

from .authenticator import AuthenticatedUser, Authenticator
from .errors import AuthenticationError, InsufficientRole


def get_authenticator() -> Authenticator:
    return current_app.extensions["authenticator"]


def get_current_user() -> AuthenticatedUser | None:
    """Return the identity attached by :func:`require_auth`, if any."""

    return g.get("current_user")


def has_role(user: AuthenticatedUser, roles: Iterable[str]) -> bool:
    """Exact-match membership; roles carry no implicit hierarchy."""

    return user.role in set(roles)


def require_auth(view: Callable | None = None, *, roles: Iterable[str] | None = None):
    """Wrap ``view`` so it only runs for an authenticated user.

    Usable bare (``@require_auth``) or with an allow-list
    (``@require_auth(roles=["ADMIN"])``). Authentication failures return 401
    and role mismatches 403; the wrapped view is not called in either case.
    """

    allowed = tuple(roles or ())

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                user = get_authenticator().authenticate(request)
            except AuthenticationError as error:
                current_app.logger.info(
                    "Rejected request to %s: %s", request.path, error.message
                )
                return error_response(error.message, error.status_code)

            if allowed and not has_role(user, allowed):
                denied = InsufficientRole()
                current_app.logger.info(
                    "User %s with role %s denied access to %s",
                    user.id,
                    user.role,
                    request.path,
                )
                return error_response(denied.message, denied.status_code)

            g.current_user = user
            return func(*args, **kwargs)

        return wrapper

    if view is not None:
        return decorator(view)
    return decorator


def require_admin(view: Callable) -> Callable:
    return require_auth(view, roles=[ROLE_ADMIN])


def require_editor(view: Callable) -> Callable:
    return require_auth(view, roles=[ROLE_ADMIN, ROLE_EDITOR])
