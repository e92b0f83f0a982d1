# Overview: JSON envelope helpers shared by every API route.

"""
Every /api response uses the same envelope:

    {"success": true,  "message"?: str, "data"?: ...}
    {"success": false, "message": str,  "errors"?: str}
"""
from __future__ import annotations

from flask import jsonify


def ok(data=None, message: str | None = None, status: int = 200):
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def fail(message: str, status: int = 400, errors: str | None = None):
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return jsonify(body), status


def server_error():
    return fail("Internal server error", 500)
