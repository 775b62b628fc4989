"""Authentication, authorization and category access control."""

from .authenticator import AuthenticatedUser, Authenticator
from .category_gate import CategoryAccessGate, GateDecision, verification_cookie_name
from .errors import (
    AccountDisabled,
    AuthenticationError,
    AuthError,
    ConfigurationError,
    ExpiredToken,
    InsufficientRole,
    InvalidToken,
    LookupFailure,
    MissingToken,
    UserNotFound,
)
from .guard import get_current_user, require_admin, require_auth, require_editor
from .passwords import PasswordHasher, StrengthResult, check_strength, generate_password
from .tokens import TokenClaims, TokenService, extract_from_header

__all__ = [
    "AccountDisabled",
    "AuthError",
    "AuthenticatedUser",
    "AuthenticationError",
    "Authenticator",
    "CategoryAccessGate",
    "ConfigurationError",
    "ExpiredToken",
    "GateDecision",
    "InsufficientRole",
    "InvalidToken",
    "LookupFailure",
    "MissingToken",
    "PasswordHasher",
    "StrengthResult",
    "TokenClaims",
    "TokenService",
    "UserNotFound",
    "check_strength",
    "extract_from_header",
    "generate_password",
    "get_current_user",
    "require_admin",
    "require_auth",
    "require_editor",
    "verification_cookie_name",
]
