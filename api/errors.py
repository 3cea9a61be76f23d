from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
import logging

from utils.exceptions import ServiceError

# status -> error code for werkzeug HTTPExceptions raised through abort()
HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
}


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def _log_in_debug(err):
    if current_app and current_app.debug:
        logging.exception("Unhandled exception", exc_info=err)


def register_error_handlers(app):
    # 404 Not Found (unknown routes and abort(404) without description)
    @app.errorhandler(404)
    def not_found(e):
        _log_in_debug(e)
        message = getattr(e, "description", None) or "Resource not found"
        if message.startswith("The requested URL was not found"):
            message = "Resource not found"
        return error_response("NOT_FOUND", message, 404)

    # Auth service, session middleware and ownership checks
    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        _log_in_debug(err)
        return error_response(err.error, err.message, err.status)

    # Marshmallow validation errors map to 422
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        _log_in_debug(err)
        details = err.messages if isinstance(err.messages, dict) else {"_schema": err.messages}
        return error_response("VALIDATION_ERROR", "Invalid input", 422, details=details)

    # Integrity errors (unique constraints, FK violations, check constraints)
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        message = str(getattr(err, "orig", err))
        lower_msg = message.lower()
        _log_in_debug(err)
        # Heuristics: tailor the status
        if "unique constraint" in lower_msg or "unique violation" in lower_msg:
            return error_response("CONFLICT", "Unique constraint violated.", 409, details={"db_error": message})
        if "foreign key constraint" in lower_msg or "foreign key mismatch" in lower_msg:
            return error_response("BAD_REQUEST", "Foreign key constraint failed.", 400, details={"db_error": message})
        if "check constraint" in lower_msg or "constraint failed" in lower_msg:
            return error_response("BAD_REQUEST", "Check constraint failed.", 400, details={"db_error": message})
        return error_response("BAD_REQUEST", "Integrity error.", 400, details={"db_error": message})

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 400
        return error_response(HTTP_ERROR_CODES.get(status, "BAD_REQUEST"), err.description, status)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        # In dev, include exception details to speed up debugging
        details = None
        if current_app and current_app.debug:
            logging.exception("Unhandled exception", exc_info=err)
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)
