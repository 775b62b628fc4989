"""Tech category CRUD and category password verification."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, request
from werkzeug.exceptions import BadRequest, Conflict, NotFound

from auth.category_gate import verification_cookie_name
from auth.guard import require_editor
from models import db
from models.tech_category import MIN_CATEGORY_PASSWORD_LENGTH, TechCategory
from utils.request_validation import parse_bool, parse_json_request
from utils.responses import error_response, success_response

tech_categories_bp = Blueprint("tech_categories", __name__)

_EDITABLE_FIELDS = ("name", "slug", "description", "icon", "color")
_STRING_FIELDS = _EDITABLE_FIELDS + ("password",)


def _get_category_or_404(category_id: str) -> TechCategory:
    category = db.session.get(TechCategory, category_id)
    if category is None:
        raise NotFound("Tech category not found.")
    return category


def _ensure_unique(field: str, value: str, exclude_id: str | None = None) -> None:
    query = TechCategory.query.filter(getattr(TechCategory, field) == value)
    if exclude_id is not None:
        query = query.filter(TechCategory.id != exclude_id)
    if query.first() is not None:
        raise Conflict(f"Category {field} already exists.")


def _check_category_password(password: object) -> str:
    if not isinstance(password, str) or len(password) < MIN_CATEGORY_PASSWORD_LENGTH:
        raise BadRequest(
            "Password is required and must be at least "
            f"{MIN_CATEGORY_PASSWORD_LENGTH} characters for protected categories."
        )
    return password


def _parse_order(value: object) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequest("order must be an integer.")


@tech_categories_bp.route("", methods=["GET"])
def list_categories():
    """List categories ordered for display; filter with ``slug`` or ``isActive``."""

    query = TechCategory.query

    slug = request.args.get("slug")
    if slug:
        query = query.filter(TechCategory.slug == slug)
    else:
        is_active = parse_bool(request.args.get("isActive", "true"))
        if is_active is not None:
            query = query.filter(TechCategory.is_active.is_(is_active))

    categories = query.order_by(TechCategory.order.asc(), TechCategory.name.asc()).all()
    return success_response([category.to_dict() for category in categories])


@tech_categories_bp.route("", methods=["POST"])
@require_editor
def create_category():
    payload = parse_json_request(
        request, required_keys=("name", "slug"), string_keys=_STRING_FIELDS
    )
    name = payload["name"].strip()
    slug = payload["slug"].strip()

    is_protected = bool(parse_bool(payload.get("isProtected")))
    password = _check_category_password(payload.get("password")) if is_protected else None

    _ensure_unique("name", name)
    _ensure_unique("slug", slug)

    category = TechCategory(
        name=name,
        slug=slug,
        description=payload.get("description"),
        icon=payload.get("icon"),
        color=payload.get("color"),
        order=_parse_order(payload.get("order", 0)),
    )
    if password is not None:
        category.protect(password)

    db.session.add(category)
    db.session.commit()

    return success_response(category.to_dict(), status=HTTPStatus.CREATED)


@tech_categories_bp.route("/<category_id>", methods=["GET"])
def get_category(category_id: str):
    return success_response(_get_category_or_404(category_id).to_dict())


@tech_categories_bp.route("/<category_id>", methods=["PUT"])
@require_editor
def update_category(category_id: str):
    """Update a category; toggling protection off discards its password."""

    category = _get_category_or_404(category_id)
    payload = parse_json_request(request, string_keys=_STRING_FIELDS)

    for field in ("name", "slug"):
        value = (payload.get(field) or "").strip()
        if value and value != getattr(category, field):
            _ensure_unique(field, value, exclude_id=category.id)

    for field in _EDITABLE_FIELDS:
        if field not in payload:
            continue
        value = payload[field]
        if field in ("name", "slug"):
            value = (value or "").strip()
            if not value:
                raise BadRequest(f"{field} must not be empty.")
        setattr(category, field, value)

    if "order" in payload:
        category.order = _parse_order(payload["order"])
    if "isActive" in payload:
        category.is_active = bool(parse_bool(payload["isActive"]))

    if "isProtected" in payload:
        is_protected = bool(parse_bool(payload["isProtected"]))
        password = payload.get("password")
        if not is_protected:
            category.unprotect()
        elif password is not None:
            category.protect(_check_category_password(password))
        elif not category.is_protected:
            raise BadRequest("Password is required for protected categories.")
    elif payload.get("password") is not None and category.is_protected:
        category.protect(_check_category_password(payload["password"]))

    db.session.commit()

    return success_response(category.to_dict())


@tech_categories_bp.route("/<category_id>", methods=["DELETE"])
@require_editor
def delete_category(category_id: str):
    category = _get_category_or_404(category_id)
    if category.solutions.count() > 0:
        raise BadRequest("Cannot delete category with existing solutions.")

    db.session.delete(category)
    db.session.commit()

    return success_response(message="Tech category deleted successfully.")


@tech_categories_bp.route("/reorder", methods=["POST"])
@require_editor
def reorder_categories():
    """Apply ``[{"id": ..., "order": ...}, ...]`` in one transaction."""

    if not request.is_json or not isinstance(request.get_json(silent=True), list):
        raise BadRequest("Request JSON payload must be a list of {id, order} objects.")

    updated = []
    for item in request.get_json():
        if not isinstance(item, dict) or "id" not in item:
            raise BadRequest("Every entry needs an id and an order.")
        category = _get_category_or_404(item["id"])
        category.order = _parse_order(item.get("order"))
        updated.append(category)

    db.session.commit()

    return success_response([category.to_dict() for category in updated])


@tech_categories_bp.route("/verify-password", methods=["POST"])
def verify_password():
    """Check a category password and mark the client as verified for it."""

    payload = parse_json_request(
        request, string_keys=("slug", "password"), allow_empty=True
    )
    slug = (payload.get("slug") or "").strip()
    password = payload.get("password") or ""
    if not slug or not password:
        raise BadRequest("Category slug and password are required.")

    category = TechCategory.find_by_slug(slug)
    if category is None:
        raise NotFound("Category not found.")

    if not category.is_protected:
        return success_response(message="Category is not protected.")

    if not category.check_password(password):
        current_app.logger.info("Wrong password submitted for category %s", slug)
        return error_response("Invalid password.", HTTPStatus.UNAUTHORIZED)

    gate = current_app.extensions["category_gate"]
    response, status = success_response(message="Password verified successfully.")
    response.set_cookie(
        verification_cookie_name(slug),
        gate.issue_verification(slug),
        max_age=gate.max_age,
        httponly=True,
        samesite="Lax",
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
    )
    return response, status
