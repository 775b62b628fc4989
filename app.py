"""Application factory."""

import json
import os
import uuid

from flask import Flask, g, jsonify, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from auth.authenticator import Authenticator
from auth.category_gate import CategoryAccessGate
from auth.passwords import PasswordHasher
from auth.tokens import TokenService
from config import Config
from models import db
from models.tech_category import TechCategory
from models.user import User
from routes.auth import auth_bp
from routes.tech_categories import tech_categories_bp
from routes.tech_solutions import solution_pages_bp, tech_solutions_bp
from routes.users import users_bp

migrate = Migrate()
limiter = Limiter(key_func=get_remote_address)


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Core subsystems
    db.init_app(app)
    migrate.init_app(app, db)

    # Errors and request IDs; registered before the category gate hook
    _register_error_handlers(app)
    _init_security(app)

    # CORS
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Rate limiting
    storage_uri = app.config.get("RATELIMIT_STORAGE_URI", "memory://")
    headers_enabled = app.config.get("RATELIMIT_HEADERS_ENABLED", True)
    key_prefix = app.config.get("RATELIMIT_KEY_PREFIX") or str(uuid.uuid4())

    global limiter
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[lambda: app.config.get("RATE_LIMIT", "60 per minute")],
        storage_uri=storage_uri,
        headers_enabled=headers_enabled,
        key_prefix=key_prefix,
    )
    limiter.init_app(app)
    app.config["RATELIMIT_KEY_PREFIX"] = key_prefix

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(users_bp, url_prefix="/api/users")
    app.register_blueprint(tech_categories_bp, url_prefix="/api/tech-categories")
    app.register_blueprint(tech_solutions_bp, url_prefix="/api/tech-solutions")
    app.register_blueprint(solution_pages_bp, url_prefix="/tech-solutions")

    # Health
    @app.route("/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "ok"})

    return app


def _find_category_for_gate(slug: str):
    """Look up a category, rolling back the session when the query fails."""

    try:
        return TechCategory.find_by_slug(slug)
    except SQLAlchemyError:
        db.session.rollback()
        raise


def _init_security(app: Flask) -> None:
    """Build the hashing, token, authentication and gate services for ``app``."""

    token_service = TokenService(
        app.config.get("JWT_SECRET_KEY"),
        expires_in=app.config.get("JWT_EXPIRES_IN", 7 * 24 * 60 * 60),
        algorithm=app.config.get("JWT_ALGORITHM", "HS256"),
    )
    app.extensions["password_hasher"] = PasswordHasher(app.config.get("BCRYPT_ROUNDS", 12))
    app.extensions["token_service"] = token_service
    app.extensions["authenticator"] = Authenticator(token_service, User.find_by_id)

    gate = CategoryAccessGate(
        _find_category_for_gate,
        app.config["SECRET_KEY"],
        fail_open=app.config.get("CATEGORY_GATE_FAIL_OPEN", True),
        strict_cookies=app.config.get("CATEGORY_COOKIE_STRICT", False),
        max_age=app.config.get("CATEGORY_VERIFIED_MAX_AGE", 24 * 60 * 60),
    )
    gate.init_app(app)


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.before_request
    def _assign_request_id():  # pragma: no cover
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    @app.after_request
    def _add_request_id_header(response):  # pragma: no cover
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        request_id = g.get("request_id") or str(uuid.uuid4())
        response = error.get_response()
        payload = {
            "success": False,
            "error": error.description,
            "request_id": request_id,
        }
        response.data = json.dumps(payload)
        response.content_type = "application/json"
        response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):  # pragma: no cover
        request_id = g.get("request_id") or str(uuid.uuid4())
        app.logger.exception("Unhandled application error", exc_info=error)
        db.session.rollback()
        payload = {
            "success": False,
            "error": "An unexpected error occurred.",
            "request_id": request_id,
        }
        response = jsonify(payload)
        response.status_code = 500
        response.headers.setdefault("X-Request-ID", request_id)
        return response


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
