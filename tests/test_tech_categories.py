"""Tests for tech category management and password verification."""

from __future__ import annotations

from http.cookies import SimpleCookie

import pytest

from models import db
from models.tech_category import TechCategory


@pytest.fixture()
def editor_headers(make_user, auth_headers):
    return auth_headers(make_user("editor@example.com", role="EDITOR"))


def _set_cookies(response) -> SimpleCookie:
    cookies = SimpleCookie()
    for header in response.headers.getlist("Set-Cookie"):
        cookies.load(header)
    return cookies


def test_editor_creates_protected_category(app, client, editor_headers):
    response = client.post(
        "/api/tech-categories",
        json={"name": "Internal", "slug": "internal", "isProtected": True, "password": "s3cret!"},
        headers=editor_headers,
    )

    assert response.status_code == 201
    data = response.get_json()["data"]
    assert data["isProtected"] is True
    assert "password" not in data and "password_hash" not in data

    with app.app_context():
        category = TechCategory.find_by_slug("internal")
        assert category.password_hash and category.password_hash != "s3cret!"


@pytest.mark.parametrize(
    "payload, status_code",
    [
        ({"name": "Only name"}, 400),
        ({"name": "Locked", "slug": "locked", "isProtected": True}, 400),
        ({"name": "Locked", "slug": "locked", "isProtected": True, "password": "123"}, 400),
        ({"name": "Existing", "slug": "fresh"}, 409),
        ({"name": "Fresh", "slug": "existing"}, 409),
    ],
)
def test_create_category_validation(client, editor_headers, make_category, payload, status_code):
    make_category("existing", name="Existing")

    response = client.post("/api/tech-categories", json=payload, headers=editor_headers)

    assert response.status_code == status_code


def test_authors_cannot_create_categories(client, make_user, auth_headers):
    headers = auth_headers(make_user("author@example.com", role="AUTHOR"))

    response = client.post(
        "/api/tech-categories", json={"name": "X", "slug": "x"}, headers=headers
    )

    assert response.status_code == 403


def test_list_categories_filters_by_slug(client, make_category):
    make_category("alpha")
    make_category("beta", password="hunter22")

    response = client.get("/api/tech-categories?slug=beta")

    data = response.get_json()["data"]
    assert [category["slug"] for category in data] == ["beta"]
    assert data[0]["isProtected"] is True


def test_list_categories_honours_order(client, editor_headers, make_category):
    first = make_category("first")
    second = make_category("second")

    reorder = client.post(
        "/api/tech-categories/reorder",
        json=[{"id": first, "order": 2}, {"id": second, "order": 1}],
        headers=editor_headers,
    )
    listing = client.get("/api/tech-categories").get_json()["data"]

    assert reorder.status_code == 200
    assert [category["slug"] for category in listing] == ["second", "first"]


def test_removing_protection_clears_password(app, client, editor_headers, make_category):
    category_id = make_category("locked", password="hunter22")

    response = client.put(
        f"/api/tech-categories/{category_id}",
        json={"isProtected": False},
        headers=editor_headers,
    )

    assert response.status_code == 200
    with app.app_context():
        category = db.session.get(TechCategory, category_id)
        assert category.is_protected is False
        assert category.password_hash is None


def test_protecting_requires_password(client, editor_headers, make_category):
    category_id = make_category("open")

    response = client.put(
        f"/api/tech-categories/{category_id}",
        json={"isProtected": True},
        headers=editor_headers,
    )

    assert response.status_code == 400


def test_category_with_solutions_cannot_be_deleted(
    client, editor_headers, make_category, make_solution
):
    category_id = make_category("busy")
    make_solution(category_id, "guide")
    empty_id = make_category("empty")

    blocked = client.delete(f"/api/tech-categories/{category_id}", headers=editor_headers)
    deleted = client.delete(f"/api/tech-categories/{empty_id}", headers=editor_headers)

    assert blocked.status_code == 400
    assert deleted.status_code == 200
    assert client.get(f"/api/tech-categories/{empty_id}").status_code == 404


@pytest.mark.parametrize(
    "payload, status_code",
    [
        ({"slug": "locked"}, 400),
        ({"slug": "unknown", "password": "hunter22"}, 404),
        ({"slug": "locked", "password": "wrong-password"}, 401),
        ({"slug": "locked", "password": 12345678}, 400),
        ({"slug": 7, "password": "hunter22"}, 400),
    ],
)
def test_verify_password_failures(client, make_category, payload, status_code):
    make_category("locked", password="hunter22")

    response = client.post("/api/tech-categories/verify-password", json=payload)

    assert response.status_code == status_code
    assert response.get_json()["success"] is False
    assert "category-locked-verified" not in _set_cookies(response)


def test_verify_password_on_open_category_succeeds(client, make_category):
    make_category("open")

    response = client.post(
        "/api/tech-categories/verify-password", json={"slug": "open", "password": "anything"}
    )

    assert response.status_code == 200
    assert response.get_json()["message"] == "Category is not protected."


def test_verified_password_unlocks_content_page(client, make_category, make_solution):
    category_id = make_category("locked", password="hunter22")
    make_solution(category_id, "guide")

    assert client.get("/tech-solutions/locked/guide").status_code == 302

    response = client.post(
        "/api/tech-categories/verify-password", json={"slug": "locked", "password": "hunter22"}
    )

    assert response.status_code == 200
    cookie = _set_cookies(response)["category-locked-verified"]
    assert cookie["httponly"]
    assert client.get("/tech-solutions/locked/guide").status_code == 200


def test_strict_mode_accepts_issued_cookie(app_builder):
    app = app_builder(CATEGORY_COOKIE_STRICT=True)
    with app.app_context():
        db.create_all()
        category = TechCategory(name="Locked", slug="locked")
        category.protect("hunter22")
        db.session.add(category)
        db.session.commit()

    forger = app.test_client()
    forger.set_cookie("category-locked-verified", "forged")
    assert forger.get("/tech-solutions/locked/guide").status_code == 302

    visitor = app.test_client()
    visitor.post(
        "/api/tech-categories/verify-password", json={"slug": "locked", "password": "hunter22"}
    )
    # Past the gate; the solution itself does not exist.
    assert visitor.get("/tech-solutions/locked/guide").status_code == 404

    with app.app_context():
        db.drop_all()
