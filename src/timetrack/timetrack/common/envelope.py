"""Uniform JSON response envelope shared by every attendance endpoint."""

from __future__ import annotations

from typing import Any, Optional

from flask import jsonify

from ..core.exceptions import (
    AuthenticationError,
    ConcurrentUpdateError,
    DomainError,
    NotFoundError,
)


def success(message: str, data: Any = None, *, status: int = 200):
    body: dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def failure(message: str, *, status: int, error: Optional[str] = None):
    body: dict[str, Any] = {"success": False, "message": message}
    if error:
        body["error"] = error
    return jsonify(body), status


def status_for(exc: DomainError) -> int:
    # NotFound is checked first: NoRecordForTodayError is also a state conflict.
    if isinstance(exc, AuthenticationError):
        return 401
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ConcurrentUpdateError):
        return 409
    return 400


def domain_failure(exc: DomainError):
    return failure(str(exc), status=status_for(exc))
