"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

import re
from typing import Iterable

from flask import Request
from werkzeug.exceptions import BadRequest

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
    string_keys: Iterable[str] | None = None,
    allow_empty: bool = False,
) -> dict:
    """Return the parsed JSON object body or raise a 400 error.

    Keys listed in ``string_keys`` must hold strings (or null) when present.
    """

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request JSON body is required.")

    if not isinstance(data, dict):
        raise BadRequest("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise BadRequest("Request JSON body must not be empty.")

    if required_keys:
        missing = [key for key in required_keys if not _present(data.get(key))]
        if missing:
            raise BadRequest(
                "Missing required fields: {}.".format(", ".join(sorted(missing)))
            )

    if string_keys:
        wrong_type = [
            key
            for key in string_keys
            if data.get(key) is not None and not isinstance(data[key], str)
        ]
        if wrong_type:
            raise BadRequest(
                "Fields must be strings: {}.".format(", ".join(sorted(wrong_type)))
            )

    return data


def _present(value: object) -> bool:
    if isinstance(value, str):
        return bool(value.strip())
    return value is not None


def normalize_email(raw_email: str | None) -> str:
    """Strip whitespace and lower-case an email address."""

    return (raw_email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_PATTERN.match(email or ""))


def parse_bool(value: object) -> bool | None:
    """Interpret common truthy/falsy spellings; None when unrecognized."""

    if value is None:
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "y"}:
        return True
    if text in {"0", "false", "no", "n"}:
        return False
    return None
