"""
Domain error taxonomy.

Every failure the auth guard or the content lifecycle can report is one of
the classes below. Each carries the HTTP status it maps to, so the
exception handlers in ``newsroom.main`` can turn it into the response
envelope without a lookup table.
"""

from typing import Any, Dict, List, Optional


class NewsroomError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message or self.default_message
        self.errors = errors
        self.headers = headers
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__


class ValidationError(NewsroomError):
    """
    One or more fields failed validation.

    ``errors`` lists every violated field as ``{"field": ..., "message": ...}``.
    """

    status_code = 400
    default_message = "Validation failed"


class NotFound(NewsroomError):
    status_code = 404
    default_message = "Resource not found"


class Forbidden(NewsroomError):
    status_code = 403
    default_message = "Access denied"


class Inactive(NewsroomError):
    status_code = 403
    default_message = "Account is not active. Please contact support."


class Locked(NewsroomError):
    status_code = 423
    default_message = "Account temporarily locked due to too many failed login attempts"


class InvalidCredential(NewsroomError):
    status_code = 401
    default_message = "Invalid email or password"


class Expired(NewsroomError):
    status_code = 401
    default_message = "Token expired. Please login again."


class Malformed(NewsroomError):
    status_code = 401
    default_message = "Invalid token."


class DuplicateAccount(NewsroomError):
    status_code = 400
    default_message = "User already exists with this email"


class DuplicateVideo(NewsroomError):
    status_code = 400
    default_message = "Video with this YouTube ID already exists"


class NotPublished(NewsroomError):
    status_code = 403
    default_message = "Content is not published"


class RateLimited(NewsroomError):
    status_code = 429
    default_message = "Too many attempts. Please try again later."

    def __init__(self, retry_after: int, message: Optional[str] = None):
        self.retry_after = retry_after
        super().__init__(message, headers={"Retry-After": str(retry_after)})


def field_error(field: str, message: str) -> Dict[str, str]:
    return {"field": field, "message": message}
