from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, session

from ..core.exceptions import AuthorizationError, StorageError, ValidationError

logger = logging.getLogger(__name__)


def login_required(view):
    """JSON variant: 401 when the session carries no user."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Login required"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> str:
    return str(session["user_id"])


def query_flag(value) -> bool:
    return str(value or "").strip().lower() in ("1", "true", "yes", "on")


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation_error(e):
        return jsonify({"success": False, "message": str(e)}), 400

    @app.errorhandler(AuthorizationError)
    def _authorization_error(e):
        return jsonify({"success": False, "message": str(e)}), 403

    @app.errorhandler(StorageError)
    def _storage_error(e):
        logger.warning("storage error in request (operation=%s): %s", e.operation, e)
        return jsonify({"success": False, "message": "Data temporarily unavailable", "retryable": e.retryable}), 503
