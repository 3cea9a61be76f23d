"""
Service-level errors.

Raised by the auth service, the session middleware and the ownership checks;
api/errors.py renders them into the uniform error envelope.
Input validation failures use marshmallow's ValidationError (422).
"""


class ServiceError(Exception):
    status = 400
    error = "BAD_REQUEST"
    default_message = "Bad request"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(ServiceError):
    status = 404
    error = "NOT_FOUND"
    default_message = "Resource not found"


class Conflict(ServiceError):
    status = 409
    error = "CONFLICT"
    default_message = "Conflict"


class Unauthorized(ServiceError):
    """Missing, invalid, expired or revoked credential."""
    status = 401
    error = "UNAUTHORIZED"
    default_message = "Unauthorized request"


class Forbidden(ServiceError):
    """Authenticated, but not allowed to touch the resource."""
    status = 403
    error = "FORBIDDEN"
    default_message = "You are not allowed to modify this resource"
