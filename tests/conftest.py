"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from models.tech_category import TechCategory  # noqa: E402
from models.tech_solution import TechSolution  # noqa: E402
from models.user import User  # noqa: E402

JWT_TEST_KEY = "test-jwt-signing-key-with-enough-entropy"


class _BaseTestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = JWT_TEST_KEY
    BCRYPT_ROUNDS = 4
    CATEGORY_GATE_FAIL_OPEN = True
    CATEGORY_COOKIE_STRICT = False


def build_app(**overrides) -> Flask:
    """Create an app whose test config is patched with ``overrides``."""

    class TestConfig(_BaseTestConfig):
        pass

    for key, value in overrides.items():
        setattr(TestConfig, key, value)

    return create_app(TestConfig)


@pytest.fixture()
def app_builder():
    """Return the factory building apps with patched test configuration."""

    return build_app


@pytest.fixture()
def app() -> Flask:
    """Create a Flask application instance for tests."""

    application = build_app()

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def make_user(app: Flask):
    """Persist a user and return its id."""

    def _make_user(
        email: str,
        password: str = "Str0ng!Pass",
        role: str = "AUTHOR",
        *,
        is_active: bool = True,
        name: str | None = None,
    ) -> str:
        with app.app_context():
            user = User(email=email, role=role, is_active=is_active, name=name)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make_user


@pytest.fixture()
def auth_headers(app: Flask):
    """Return an Authorization header carrying a token for the given user id."""

    def _auth_headers(user_id: str) -> dict[str, str]:
        with app.app_context():
            user = db.session.get(User, user_id)
            token = app.extensions["token_service"].issue(
                {"user_id": user.id, "email": user.email, "role": user.role}
            )
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture()
def make_category(app: Flask):
    """Persist a tech category, optionally protected, and return its id."""

    def _make_category(slug: str, *, password: str | None = None, name: str | None = None) -> str:
        with app.app_context():
            category = TechCategory(name=name or slug.title(), slug=slug)
            if password is not None:
                category.protect(password)
            db.session.add(category)
            db.session.commit()
            return category.id

    return _make_category


@pytest.fixture()
def make_solution(app: Flask):
    """Persist a tech solution inside a category and return its id."""

    def _make_solution(category_id: str, slug: str, *, published: bool = True) -> str:
        with app.app_context():
            solution = TechSolution(
                category_id=category_id,
                title=slug.replace("-", " ").title(),
                slug=slug,
                content=f"Content of {slug}",
                published=published,
            )
            db.session.add(solution)
            db.session.commit()
            return solution.id

    return _make_solution
