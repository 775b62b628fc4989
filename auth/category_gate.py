"""Coarse access gate in front of content pages of protected categories.

Requests for ``/tech-solutions/<category>/<slug>`` are let through unless the
category is password protected and the client presents no verification
evidence: a ``category-<slug>-verified`` cookie or an
``x-category-verified: true`` header. Denied requests are redirected to the
category landing page with ``?access_denied=true`` so it can prompt for the
category password. The gate never checks a password itself; the password
verification endpoint sets the cookie this gate trusts.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

from flask import Flask, redirect, request as current_request
from itsdangerous import BadSignature, URLSafeTimedSerializer

logger = logging.getLogger(__name__)

PATH_PREFIX = "/tech-solutions"
VERIFIED_HEADER = "x-category-verified"
DEFAULT_MAX_AGE_SECONDS = 24 * 60 * 60

CategoryLookup = Callable[[str], Optional[Any]]


def verification_cookie_name(category_slug: str) -> str:
    return f"category-{category_slug}-verified"


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    redirect_to: str | None = None


ALLOW = GateDecision(allowed=True)


class CategoryAccessGate:
    """Decide whether a content page request may proceed."""

    def __init__(
        self,
        category_lookup: CategoryLookup,
        secret_key: str,
        *,
        fail_open: bool = True,
        strict_cookies: bool = False,
        max_age: int = DEFAULT_MAX_AGE_SECONDS,
        path_prefix: str = PATH_PREFIX,
    ):
        self.category_lookup = category_lookup
        self.fail_open = fail_open
        self.strict_cookies = strict_cookies
        self.max_age = max_age
        self.path_prefix = path_prefix.rstrip("/")
        self._serializer = URLSafeTimedSerializer(secret_key, salt="category-verified")
        self._pattern = re.compile(r"^" + re.escape(self.path_prefix) + r"/([^/]+)/([^/]+)$")

    def init_app(self, app: Flask) -> None:
        app.extensions["category_gate"] = self
        app.before_request(self._before_request)

    def _before_request(self):
        category_slug = self.match(current_request.path)
        if category_slug is None:
            return None
        decision = self.check_access(category_slug, current_request)
        if decision.allowed:
            return None
        return redirect(decision.redirect_to)

    def match(self, path: str) -> str | None:
        """Return the category slug when ``path`` is a gated content page."""

        found = self._pattern.match(path)
        return found.group(1) if found else None

    def denied_url(self, category_slug: str) -> str:
        return f"{self.path_prefix}/{category_slug}?access_denied=true"

    def check_access(self, category_slug: str, request) -> GateDecision:
        """Allow the request or redirect it to the category landing page."""

        try:
            category = self.category_lookup(category_slug)
        except Exception:
            logger.exception("Category lookup failed for %s", category_slug)
            if self.fail_open:
                return ALLOW
            return GateDecision(allowed=False, redirect_to=self.denied_url(category_slug))

        if category is None or not category.is_protected:
            return ALLOW

        if self._has_verified_cookie(category_slug, request):
            return ALLOW
        if request.headers.get(VERIFIED_HEADER) == "true":
            return ALLOW

        return GateDecision(allowed=False, redirect_to=self.denied_url(category_slug))

    def issue_verification(self, category_slug: str) -> str:
        """Return a signed cookie value asserting ``category_slug`` was unlocked."""

        return self._serializer.dumps(category_slug)

    def _has_verified_cookie(self, category_slug: str, request) -> bool:
        value = request.cookies.get(verification_cookie_name(category_slug))
        if value is None:
            return False
        if not self.strict_cookies:
            return True
        try:
            signed_slug = self._serializer.loads(value, max_age=self.max_age)
        except BadSignature:
            logger.info("Ignoring invalid verification cookie for %s", category_slug)
            return False
        return signed_slug == category_slug
