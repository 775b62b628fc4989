"""Authentication blueprint providing login, logout and current-user endpoints."""

from __future__ import annotations

from datetime import datetime

from flask import Blueprint, current_app, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import BadRequest, Forbidden, Unauthorized

from auth.guard import get_current_user, require_auth
from auth.tokens import TokenClaims
from models import db
from models.user import User
from utils.request_validation import is_valid_email, normalize_email, parse_json_request
from utils.responses import success_response

auth_bp = Blueprint("auth", __name__)


def _record_login(user: User) -> None:
    """Update ``last_login``; a failed write never fails the login itself."""

    user.last_login = datetime.utcnow()
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.warning("Could not update last login for user %s", user.id)


@auth_bp.route("/login", methods=["POST"])
def login():
    """Authenticate with email and password and return an access token."""

    payload = parse_json_request(
        request, string_keys=("email", "password"), allow_empty=True
    )
    email = normalize_email(payload.get("email"))
    password = payload.get("password") or ""

    if not email or not password:
        raise BadRequest("Email and password cannot be empty.")
    if not is_valid_email(email):
        raise BadRequest("Invalid email format.")

    user = User.find_by_email(email)
    if user is None or not user.check_password(password):
        raise Unauthorized("Invalid email or password.")
    if not user.is_active:
        raise Forbidden("Account has been disabled, please contact an administrator.")

    token = current_app.extensions["token_service"].issue(
        TokenClaims(user_id=user.id, email=user.email, role=user.role)
    )
    user_data = user.to_dict()
    _record_login(user)

    return success_response(
        {"user": user_data, "token": token},
        message="Login successful.",
    )


@auth_bp.route("/logout", methods=["POST"])
def logout():
    """Tokens are stateless, so logging out is the client discarding its token."""

    return success_response(message="Logout successful.")


@auth_bp.route("/me", methods=["GET"])
@require_auth
def me():
    """Return the identity behind the presented token."""

    return success_response({"user": get_current_user().to_dict()})


@auth_bp.route("/register", methods=["POST"])
def register():
    """Public registration is closed; administrators create accounts."""

    raise Forbidden("New user registration is disabled. Please contact an administrator.")

