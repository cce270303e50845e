"""Shared helpers for the Flask controllers."""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Dict

from flask import Flask, current_app, g, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BackendUnavailableError,
    ConflictError,
    DomainError,
    NotFoundError,
    PartialBatchError,
    ValidationError,
)

_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (ConflictError, 409),
    (PartialBatchError, 207),
    (ValidationError, 400),
    (BackendUnavailableError, 503),
)


def status_for(error: DomainError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(error, cls):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(e: DomainError):
        status = status_for(e)
        if status >= 500:
            app.logger.error("Backend error: %s", e.message)
        body: Dict[str, Any] = {"success": False, "error": e.to_dict()}
        if isinstance(e, PartialBatchError):
            body["data"] = [item.to_dict() for item in e.succeeded]
        return jsonify(body), status

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        # Unknown routes, wrong methods and the like keep their own status.
        if isinstance(e, HTTPException):
            return jsonify({"success": False, "error": {"message": e.description, "code": e.name}}), e.code
        app.logger.exception("Unhandled error")
        message = str(e) if app.config.get("DEBUG") else "Σφάλμα συστήματος"
        return jsonify({"success": False, "error": {"message": message, "code": "internal_error"}}), 500


def login_required(view: Callable) -> Callable:
    """Resolve the session user into ``g.actor`` or answer 401."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        container = current_app.extensions["container"]
        g.actor = container.auth_service.load_session_user(session.get("user_id"))
        return view(*args, **kwargs)

    return wrapper


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Το σώμα του αιτήματος πρέπει να είναι αντικείμενο JSON")
    return data


def ok(payload: Any = None, status: int = 200):
    body: Dict[str, Any] = {"success": True}
    if payload is not None:
        body["data"] = payload
    return jsonify(body), status
