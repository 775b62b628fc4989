"""Tests covering login, logout and the current-user endpoint."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from flask.testing import FlaskClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from models import db
from models.user import User


def _login(client: FlaskClient, email: str, password: str) -> str:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.get_json()["data"]["token"]


def test_login_returns_token_and_user(client: FlaskClient, make_user):
    """Users should receive a JWT when providing valid credentials."""

    make_user("j1@example.com", "Str0ng!Pass", role="EDITOR", name="Jay")

    response = client.post(
        "/api/auth/login",
        json={"email": "J1@Example.com", "password": "Str0ng!Pass"},
    )

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    assert payload["data"]["token"]
    user = payload["data"]["user"]
    assert user["email"] == "j1@example.com"
    assert user["role"] == "EDITOR"
    assert "password_hash" not in user and "password" not in user


def test_login_records_last_login(app, client: FlaskClient, make_user):
    user_id = make_user("j1@example.com")

    _login(client, "j1@example.com", "Str0ng!Pass")

    with app.app_context():
        assert db.session.get(User, user_id).last_login is not None


def test_login_succeeds_when_last_login_write_fails(client: FlaskClient, make_user):
    make_user("j1@example.com")

    with patch.object(
        Session, "commit", side_effect=OperationalError("UPDATE", {}, Exception("locked"))
    ):
        response = client.post(
            "/api/auth/login", json={"email": "j1@example.com", "password": "Str0ng!Pass"}
        )

    assert response.status_code == 200
    assert response.get_json()["data"]["token"]


@pytest.mark.parametrize(
    "payload, status_code",
    [
        ({"email": "j1@example.com"}, 400),
        ({"password": "Str0ng!Pass"}, 400),
        ({"email": "not-an-email", "password": "Str0ng!Pass"}, 400),
        ({"email": "j1@example.com", "password": "wrong"}, 401),
        ({"email": "nobody@example.com", "password": "Str0ng!Pass"}, 401),
        ({"email": "j1@example.com", "password": 12345678}, 400),
        ({"email": ["j1@example.com"], "password": "Str0ng!Pass"}, 400),
    ],
)
def test_login_validation(client: FlaskClient, make_user, payload, status_code):
    """Login endpoint should validate request bodies and credentials."""

    make_user("j1@example.com")

    response = client.post("/api/auth/login", json=payload)

    assert response.status_code == status_code
    assert response.get_json()["success"] is False


def test_disabled_account_cannot_log_in(client: FlaskClient, make_user):
    make_user("off@example.com", is_active=False)

    response = client.post(
        "/api/auth/login", json={"email": "off@example.com", "password": "Str0ng!Pass"}
    )

    assert response.status_code == 403
    assert "disabled" in response.get_json()["error"]


def test_oauth_only_account_cannot_use_password_login(app, client: FlaskClient):
    with app.app_context():
        db.session.add(User(email="oauth@example.com", password_hash=None))
        db.session.commit()

    response = client.post(
        "/api/auth/login", json={"email": "oauth@example.com", "password": "Str0ng!Pass"}
    )

    assert response.status_code == 401


def test_me_returns_identity_for_issued_token(client: FlaskClient, make_user):
    user_id = make_user("me@example.com", role="AUTHOR", name="Me")
    token = _login(client, "me@example.com", "Str0ng!Pass")

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.get_json()["data"]["user"] == {
        "id": user_id,
        "email": "me@example.com",
        "name": "Me",
        "role": "AUTHOR",
        "isActive": True,
    }


def test_me_rejects_token_of_since_disabled_account(app, client: FlaskClient, make_user):
    user_id = make_user("me@example.com")
    token = _login(client, "me@example.com", "Str0ng!Pass")

    with app.app_context():
        db.session.get(User, user_id).is_active = False
        db.session.commit()

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.get_json()["error"] == "User account has been disabled."


def test_me_requires_token(client: FlaskClient):
    response = client.get("/api/auth/me")

    assert response.status_code == 401


def test_logout_always_succeeds(client: FlaskClient):
    response = client.post("/api/auth/logout")

    assert response.status_code == 200
    assert response.get_json()["success"] is True


def test_public_registration_is_disabled(client: FlaskClient):
    response = client.post(
        "/api/auth/register", json={"email": "new@example.com", "password": "Str0ng!Pass"}
    )

    assert response.status_code == 403
    assert "disabled" in response.get_json()["error"]
