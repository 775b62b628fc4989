"""Tech solution API and the category / content pages guarded by the access gate."""

from __future__ import annotations

from datetime import datetime, timedelta
from http import HTTPStatus

from flask import Blueprint, request
from sqlalchemy import and_, func
from werkzeug.exceptions import BadRequest, Conflict, NotFound

from auth.guard import get_current_user, require_auth, require_editor
from models import db
from models.tech_category import TechCategory
from models.tech_solution import TechSolution
from models.user import USER_ROLES
from utils.request_validation import parse_bool, parse_json_request
from utils.responses import success_response

tech_solutions_bp = Blueprint("tech_solutions", __name__)
solution_pages_bp = Blueprint("solution_pages", __name__)

TOP_SOLUTIONS_LIMIT = 10
DEFAULT_STATS_PERIOD_DAYS = 30

_STRING_FIELDS = ("title", "slug", "summary", "content", "categoryId")


def _get_active_category_or_404(slug: str) -> TechCategory:
    category = TechCategory.find_by_slug(slug)
    if category is None or not category.is_active:
        raise NotFound("Category not found.")
    return category


def _get_solution_or_404(solution_id: str) -> TechSolution:
    solution = db.session.get(TechSolution, solution_id)
    if solution is None:
        raise NotFound("Tech solution not found.")
    return solution


def _get_category_for_write(category_id: str) -> TechCategory:
    category = db.session.get(TechCategory, category_id)
    if category is None:
        raise BadRequest("Unknown categoryId.")
    return category


def _parse_period(value: str | None) -> int:
    if value is None:
        return DEFAULT_STATS_PERIOD_DAYS
    try:
        period = int(value)
    except ValueError:
        raise BadRequest("period must be a whole number of days.")
    if period < 1:
        raise BadRequest("period must be at least one day.")
    return period


@tech_solutions_bp.route("", methods=["GET"])
def list_solutions():
    """List published solutions, optionally limited to one category slug."""

    query = TechSolution.query.filter(TechSolution.published.is_(True))

    category_slug = request.args.get("category")
    if category_slug:
        query = query.join(TechCategory).filter(TechCategory.slug == category_slug)

    solutions = query.order_by(TechSolution.created_at.desc()).all()
    return success_response([solution.to_dict() for solution in solutions])


@tech_solutions_bp.route("", methods=["POST"])
@require_auth(roles=USER_ROLES)
def create_solution():
    payload = parse_json_request(
        request, required_keys=("title", "slug", "categoryId"), string_keys=_STRING_FIELDS
    )

    category = _get_category_for_write(payload["categoryId"])

    slug = payload["slug"].strip()
    if TechSolution.find_in_category(category.id, slug) is not None:
        raise Conflict("A solution with that slug already exists in this category.")

    solution = TechSolution(
        category_id=category.id,
        title=payload["title"].strip(),
        slug=slug,
        summary=payload.get("summary"),
        content=payload.get("content") or "",
        published=bool(parse_bool(payload.get("published"))),
        author_id=get_current_user().id,
    )
    db.session.add(solution)
    db.session.commit()

    return success_response(solution.to_dict(include_content=True), status=HTTPStatus.CREATED)


@tech_solutions_bp.route("/stats", methods=["GET"])
@require_editor
def solution_stats():
    """Dashboard totals, per-category counts and the most viewed solutions."""

    period = _parse_period(request.args.get("period"))
    since = datetime.utcnow() - timedelta(days=period)
    published = TechSolution.published.is_(True)
    views = func.coalesce(func.sum(TechSolution.view_count), 0)

    category_rows = (
        db.session.query(
            TechCategory.id,
            TechCategory.name,
            TechCategory.color,
            func.count(TechSolution.id),
            views,
        )
        .outerjoin(TechSolution, and_(TechSolution.category_id == TechCategory.id, published))
        .filter(TechCategory.is_active.is_(True))
        .group_by(TechCategory.id, TechCategory.name, TechCategory.color)
        .order_by(TechCategory.order, TechCategory.name)
        .all()
    )
    top_solutions = (
        TechSolution.query.filter(published)
        .order_by(TechSolution.view_count.desc(), TechSolution.created_at.desc())
        .limit(TOP_SOLUTIONS_LIMIT)
        .all()
    )

    return success_response(
        {
            "totalSolutions": TechSolution.query.count(),
            "publishedSolutions": TechSolution.query.filter(published).count(),
            "totalCategories": TechCategory.query.filter(TechCategory.is_active.is_(True)).count(),
            "totalViews": db.session.query(views).scalar(),
            "newSolutions": TechSolution.query.filter(TechSolution.created_at >= since).count(),
            "period": period,
            "categoryStats": [
                {"id": row[0], "name": row[1], "color": row[2], "count": row[3], "views": row[4]}
                for row in category_rows
            ],
            "topSolutions": [
                {
                    "id": solution.id,
                    "title": solution.title,
                    "views": solution.view_count,
                    "category": solution.category.name,
                }
                for solution in top_solutions
            ],
        }
    )


@tech_solutions_bp.route("/<solution_id>", methods=["GET"])
@require_editor
def get_solution(solution_id: str):
    """Full solution for editing, published or not."""

    return success_response(_get_solution_or_404(solution_id).to_dict(include_content=True))


@tech_solutions_bp.route("/<solution_id>", methods=["PUT"])
@require_editor
def update_solution(solution_id: str):
    solution = _get_solution_or_404(solution_id)
    payload = parse_json_request(request, string_keys=_STRING_FIELDS)

    category_id = solution.category_id
    if "categoryId" in payload:
        category_id = _get_category_for_write(payload["categoryId"]).id

    slug = solution.slug
    if "slug" in payload:
        slug = (payload["slug"] or "").strip()
        if not slug:
            raise BadRequest("slug must not be empty.")

    if (category_id, slug) != (solution.category_id, solution.slug):
        existing = TechSolution.find_in_category(category_id, slug)
        if existing is not None and existing.id != solution.id:
            raise Conflict("A solution with that slug already exists in this category.")

    if "title" in payload:
        title = (payload["title"] or "").strip()
        if not title:
            raise BadRequest("title must not be empty.")
        solution.title = title
    if "summary" in payload:
        solution.summary = payload["summary"]
    if "content" in payload:
        solution.content = payload["content"] or ""
    if "published" in payload:
        solution.published = bool(parse_bool(payload["published"]))
    solution.category_id = category_id
    solution.slug = slug

    db.session.commit()

    return success_response(solution.to_dict(include_content=True))


@tech_solutions_bp.route("/<solution_id>", methods=["DELETE"])
@require_editor
def delete_solution(solution_id: str):
    solution = _get_solution_or_404(solution_id)
    db.session.delete(solution)
    db.session.commit()

    return success_response(message="Tech solution deleted successfully.")


@solution_pages_bp.route("/<category_slug>", methods=["GET"])
def category_page(category_slug: str):
    """Landing data for a category.

    ``access_denied`` tells the client to prompt for the category password.
    """

    category = _get_active_category_or_404(category_slug)
    solutions = (
        category.solutions.filter(TechSolution.published.is_(True))
        .order_by(TechSolution.created_at.desc())
        .all()
    )
    return success_response(
        {
            "category": category.to_dict(),
            "accessDenied": parse_bool(request.args.get("access_denied")) is True,
            "solutions": [solution.to_dict() for solution in solutions],
        }
    )


@solution_pages_bp.route("/<category_slug>/<slug>", methods=["GET"])
def solution_page(category_slug: str, slug: str):
    """Full content of a published solution; reached only after the access gate."""

    category = _get_active_category_or_404(category_slug)
    solution = TechSolution.find_in_category(category.id, slug)
    if solution is None or not solution.published:
        raise NotFound("Solution not found.")

    solution.view_count = (solution.view_count or 0) + 1
    db.session.commit()

    return success_response(
        {"category": category.to_dict(), "solution": solution.to_dict(include_content=True)}
    )
