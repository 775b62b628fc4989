"""Helpers for the JSON envelope shared by every endpoint."""

from __future__ import annotations

from http import HTTPStatus

from flask import jsonify


def success_response(data=None, message: str | None = None, status: int = HTTPStatus.OK):
    """Return ``{"success": true, ...}`` with optional data and message."""

    payload: dict = {"success": True}
    if data is not None:
        payload["data"] = data
    if message:
        payload["message"] = message
    return jsonify(payload), status


def error_response(error: str, status: int):
    """Return ``{"success": false, "error": ...}`` with the given status."""

    return jsonify({"success": False, "error": error}), status
