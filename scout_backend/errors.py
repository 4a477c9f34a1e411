"""Application errors and their HTTP mapping.

Services raise these; the handlers registered by ``register_error_handlers``
turn them into ``{"msg": ...}`` JSON responses at the request boundary.
"""
from flask import jsonify, current_app
from marshmallow import ValidationError as SchemaValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from scout_backend.extensions import db


class APIError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None, errors=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.errors = errors

    def to_dict(self):
        payload = {"msg": self.message}
        if self.errors:
            payload["errors"] = self.errors
        return payload


class ValidationError(APIError):
    status_code = 400
    default_message = "Invalid request"


class UnauthorizedError(APIError):
    status_code = 401
    default_message = "Authentication required"


class ForbiddenError(APIError):
    status_code = 403
    default_message = "Access denied"


class NotFoundError(APIError):
    status_code = 404
    default_message = "Not found"


class ConflictError(APIError):
    # conflicts are reported as 400, not 409
    status_code = 400
    default_message = "Conflict"


class ServerError(APIError):
    status_code = 500


def translate_integrity_error(exc, conflict_message="Resource already exists",
                              missing_message="Referenced resource not found"):
    """Map a store constraint violation onto an application error."""
    text = str(getattr(exc, "orig", exc)).lower()
    if "foreign key" in text:
        return NotFoundError(missing_message)
    if "unique" in text or "duplicate" in text:
        return ConflictError(conflict_message)
    return ConflictError("Request conflicts with existing data")


def register_error_handlers(app):
    @app.errorhandler(APIError)
    def handle_api_error(error):
        if error.status_code >= 500:
            current_app.logger.error(f"Server error: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(SchemaValidationError)
    def handle_schema_error(error):
        return jsonify({"msg": "Invalid request", "errors": error.messages}), 400

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(error):
        db.session.rollback()
        translated = translate_integrity_error(error)
        current_app.logger.warning(f"Integrity error reached the request boundary: {error.orig}")
        return jsonify(translated.to_dict()), translated.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"msg": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        current_app.logger.exception(f"Unhandled error: {error}")
        return jsonify({"msg": "Something went wrong"}), 500
