"""Error taxonomy raised by the service layer, and the JSON handlers that
render it.

Each error carries the HTTP status it is rendered with, so services never
import Flask response helpers.
"""
import logging

from flask import jsonify
from marshmallow import ValidationError as SchemaValidationError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class LigaError(Exception):
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(LigaError):
    """Malformed input or a request that breaks a domain rule."""

    status_code = 400


class AuthorizationError(LigaError):
    status_code = 403


class NotFoundError(LigaError):
    status_code = 404


class ConflictError(LigaError):
    """The target is not in a state that allows the operation."""

    status_code = 409


def register_error_handlers(app):
    """Every error leaves the API as ``{"error": ...}``."""

    @app.errorhandler(LigaError)
    def handle_liga_error(e):
        logger.info("%s: %s", type(e).__name__, e.message)
        return jsonify({"error": e.message}), e.status_code

    @app.errorhandler(SchemaValidationError)
    def handle_schema_error(e):
        return jsonify({"error": "Validation failed", "messages": e.messages}), 400

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(429)
    def rate_limit_exceeded(e):
        return jsonify({"error": "Rate limit exceeded. Try again later."}), 429

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.exception("Unhandled exception: %s", e)
        return jsonify({"error": "Internal server error"}), 500
