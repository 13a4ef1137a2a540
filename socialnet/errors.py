"""
Error kinds raised by the services and rendered by the API layer.
"""

from typing import Optional


class SocialNetError(Exception):
    """Base class for client-visible errors."""

    status_code = 400
    error_code = "ERROR"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class NotFound(SocialNetError):
    """Entity missing, soft-deleted, or not owned by the caller."""

    status_code = 404
    error_code = "NOT_FOUND"


class InvalidOperation(SocialNetError):
    status_code = 400
    error_code = "INVALID_OPERATION"


class InvalidArgument(SocialNetError):
    status_code = 422
    error_code = "INVALID_ARGUMENT"


class Unauthorized(SocialNetError):
    status_code = 401
    error_code = "UNAUTHORIZED"


class Forbidden(SocialNetError):
    status_code = 403
    error_code = "FORBIDDEN"
