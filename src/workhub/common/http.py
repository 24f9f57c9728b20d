"""JSON envelope, error translation and session helpers shared by controllers."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from .datetime_utils import now_local

logger = logging.getLogger(__name__)

_ERROR_CODES = (
    (ValidationError, 422, "VALIDATION_ERROR"),
    (NotFoundError, 404, "NOT_FOUND"),
    (AuthorizationError, 403, "FORBIDDEN"),
    (AuthenticationError, 401, "AUTHENTICATION_REQUIRED"),
    (BadRequestError, 400, "PARAMETER_MISSING"),
)

_HTTP_CODES = {
    400: "BAD_REQUEST",
    401: "AUTHENTICATION_REQUIRED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    422: "VALIDATION_ERROR",
}


def ok(data: Any = None, *, message: Optional[str] = None, status: int = 200, **extra):
    body = {"success": True, "data": data, "timestamp": now_local().isoformat()}
    if message:
        body["message"] = message
    body.update(extra)
    return jsonify(body), status


def error(message: str, *, status: int, code: str, errors: Any = None):
    body = {
        "success": False,
        "message": message,
        "code": code,
        "errors": errors,
        "timestamp": now_local().isoformat(),
    }
    return jsonify(body), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(e: DomainError):
        for exc_type, status, code in _ERROR_CODES:
            if isinstance(e, exc_type):
                return error(e.message or code, status=status, code=code, errors=e.errors)
        return error(e.message or "Bad request", status=400, code="BAD_REQUEST", errors=e.errors)

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        status = e.code or 500
        return error(e.description or e.name, status=status, code=_HTTP_CODES.get(status, "HTTP_ERROR"))

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        message = str(e) if app.config.get("DEBUG") else "Internal server error"
        return error(message, status=500, code="INTERNAL_SERVER_ERROR")


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def require_params(data: dict, *names: str) -> None:
    missing = [n for n in names if data.get(n) in (None, "")]
    if missing:
        raise BadRequestError(f"Missing parameter: {', '.join(missing)}", errors={"missing": missing})


def current_user_id() -> int:
    user_id = session.get("user_id")
    if user_id is None:
        raise AuthenticationError("Authentication required")
    return int(user_id)


def is_admin_session() -> bool:
    return session.get("role") == Role.ADMIN.value


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        current_user_id()
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        current_user_id()
        if not is_admin_session():
            raise AuthorizationError("Admin privileges required")
        return view(*args, **kwargs)

    return wrapper
