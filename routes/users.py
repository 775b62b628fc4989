"""Administrator-only user management endpoints."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, request
from werkzeug.exceptions import BadRequest, Conflict, NotFound

from auth.guard import get_current_user, require_admin
from auth.passwords import check_strength
from models import db
from models.user import ROLE_AUTHOR, USER_ROLES, User
from utils.request_validation import (
    is_valid_email,
    normalize_email,
    parse_bool,
    parse_json_request,
)
from utils.responses import success_response

users_bp = Blueprint("users", __name__)

_STRING_FIELDS = ("email", "password", "name", "role")


def _get_user_or_404(user_id: str) -> User:
    user = User.find_by_id(user_id)
    if user is None:
        raise NotFound("User does not exist.")
    return user


def _validated_role(raw_role: str | None) -> str:
    role = (raw_role or "").strip().upper()
    if role not in USER_ROLES:
        raise BadRequest("Role must be one of: {}.".format(", ".join(USER_ROLES)))
    return role


def _validated_password(password: str) -> str:
    result = check_strength(password)
    if not result.valid:
        raise BadRequest(" ".join(result.errors))
    return password


def _validated_email(raw_email: str | None, *, exclude_id: str | None = None) -> str:
    email = normalize_email(raw_email)
    if not is_valid_email(email):
        raise BadRequest("Invalid email format.")
    existing = User.find_by_email(email)
    if existing is not None and existing.id != exclude_id:
        raise Conflict("This email address is already in use.")
    return email


@users_bp.route("", methods=["GET"])
@require_admin
def list_users():
    """Return every user, newest first."""

    users = User.query.order_by(User.created_at.desc()).all()
    return success_response([user.to_dict() for user in users])


@users_bp.route("", methods=["POST"])
@require_admin
def create_user():
    """Create a staff account."""

    payload = parse_json_request(
        request, required_keys=("email", "password"), string_keys=_STRING_FIELDS
    )
    email = _validated_email(payload.get("email"))
    password = _validated_password(payload["password"])
    role = _validated_role(payload.get("role") or ROLE_AUTHOR)

    is_active = parse_bool(payload.get("isActive"))
    user = User(
        email=email,
        name=(payload.get("name") or "").strip() or None,
        role=role,
        is_active=True if is_active is None else is_active,
    )
    user.set_password(password)

    db.session.add(user)
    db.session.commit()

    return success_response(
        user.to_dict(), message="User created successfully.", status=HTTPStatus.CREATED
    )


@users_bp.route("/<user_id>", methods=["GET"])
@require_admin
def get_user(user_id: str):
    return success_response(_get_user_or_404(user_id).to_dict())


@users_bp.route("/<user_id>", methods=["PUT"])
@require_admin
def update_user(user_id: str):
    """Update profile fields, role, activation state or password."""

    user = _get_user_or_404(user_id)
    payload = parse_json_request(request, string_keys=_STRING_FIELDS)

    if "email" in payload:
        user.email = _validated_email(payload.get("email"), exclude_id=user.id)
    if "name" in payload:
        user.name = (payload.get("name") or "").strip() or None
    if "role" in payload:
        user.role = _validated_role(payload.get("role"))
    if "isActive" in payload:
        is_active = parse_bool(payload.get("isActive"))
        if is_active is None:
            raise BadRequest("isActive must be a boolean value.")
        user.is_active = is_active
    if (payload.get("password") or "").strip():
        user.set_password(_validated_password(payload["password"]))

    db.session.commit()

    return success_response(user.to_dict(), message="User updated successfully.")


@users_bp.route("/<user_id>", methods=["DELETE"])
@require_admin
def delete_user(user_id: str):
    user = _get_user_or_404(user_id)
    if user.id == get_current_user().id:
        raise BadRequest("You cannot delete your own account.")

    db.session.delete(user)
    db.session.commit()

    return success_response(message="User deleted successfully.")
