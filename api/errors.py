from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
import logging

from models import StorageError, StorageErrorKind

logger = logging.getLogger(__name__)

ERROR_NAMES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    415: "UNSUPPORTED_MEDIA_TYPE",
}


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    # Validation failures always carry the per-field breakdown
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        messages = err.messages if isinstance(err.messages, dict) else {"_schema": err.messages}
        return error_response("VALIDATION_ERROR", "Validation failed", 400, details=messages)

    # Storage rejections a handler did not translate itself
    @app.errorhandler(StorageError)
    def handle_storage_error(err: StorageError):
        if current_app and current_app.debug:
            logger.exception("Unhandled storage error", exc_info=err)
        if err.kind is StorageErrorKind.UNIQUE_VIOLATION:
            return error_response("CONFLICT", "Unique constraint violated.", 409)
        if err.kind is StorageErrorKind.FOREIGN_KEY_VIOLATION:
            return error_response("CONFLICT", "Conflict: related data still exists.", 409)
        return error_response("BAD_REQUEST", "Constraint failed.", 400)

    # Werkzeug HTTPExceptions (abort(...)) map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 400
        return error_response(ERROR_NAMES.get(status, "HTTP_ERROR"), err.description, status)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        details = None
        # In dev, include exception details to speed up debugging
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)
