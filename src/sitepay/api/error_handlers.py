"""Global error handlers for the JSON API.

DomainError renders its own code and status, HTTPException keeps Werkzeug's
status, and anything else becomes INTERNAL_ERROR without leaking details.
"""

from __future__ import annotations

import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)


def error_body(code: str, message: str, **extra) -> dict:
    return {"success": False, "error": {"code": code, "message": message, **extra}}


def register_error_handlers(app: Flask) -> None:
    def domain_error(exc: DomainError):
        logger.warning(
            exc.message,
            extra={"error_code": exc.code, "path": request.path, "method": request.method},
        )
        return jsonify({"success": False, "error": exc.to_dict()}), exc.http_status

    def http_error(exc: HTTPException):
        code = (exc.name or "HTTP_ERROR").upper().replace(" ", "_")
        return jsonify(error_body(code, exc.description or exc.name)), exc.code or 500

    def unhandled_error(exc: Exception):
        logger.error(
            f"Unhandled exception on {request.path}: {exc}",
            exc_info=True,
        )
        return jsonify(error_body("INTERNAL_ERROR", "An unexpected error occurred")), 500

    app.register_error_handler(DomainError, domain_error)
    app.register_error_handler(HTTPException, http_error)
    app.register_error_handler(Exception, unhandled_error)
