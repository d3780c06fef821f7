"""Flask glue shared by the controllers: identity, JSON bodies, error mapping."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, g, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role, SessionStatus
from ..core.exceptions import AuthenticationError, DomainError, StorageError, ValidationError
from ..users.model import Identity

logger = logging.getLogger(__name__)

_STATUS_ALIASES = {
    "open": SessionStatus.OPEN,
    "active": SessionStatus.OPEN,
    "closed": SessionStatus.CLOSED,
    "completed": SessionStatus.CLOSED,
}


def current_identity() -> Identity:
    """Identity placed in the Flask session by the external login flow."""
    user_id = session.get("user_id")
    if user_id is None or str(user_id).strip() == "":
        raise AuthenticationError("Authentication required")

    try:
        role = Role(session.get("role") or Role.STAFF.value)
    except ValueError:
        role = Role.STAFF
    return Identity(user_id=str(user_id), role=role)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        g.identity = current_identity()
        return view(*args, **kwargs)

    return wrapper


def json_body() -> dict[str, Any]:
    if not request.data:
        return {}
    data = request.get_json(silent=True, force=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def parse_status(value: Optional[str]) -> Optional[SessionStatus]:
    if value is None or not value.strip():
        return None
    status = _STATUS_ALIASES.get(value.strip().lower())
    if status is None:
        raise ValidationError("status must be OPEN or CLOSED")
    return status


def error_response(kind: str, message: str, status_code: int):
    return jsonify({"success": False, "kind": kind, "message": message}), status_code


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        if isinstance(exc, StorageError):
            return error_response("StorageError", "Internal storage error", exc.status_code)
        return error_response(type(exc).__name__, str(exc), exc.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return error_response("HTTPError", exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return error_response("InternalError", "Internal server error", 500)
