"""
Application Error Taxonomy

Services raise these internally. Boundary functions catch them and turn
them into ``{success: False, error: <message>}`` results, so only the
human-readable message (and an HTTP status hint) ever leaves a service.
"""

from typing import Optional


class AppError(Exception):
    """Base class for all expected application failures."""

    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthError(AppError):
    """No session, or the session token is invalid."""
    status_code = 401
    default_message = "Authentication required"


class NotFoundError(AppError):
    """A referenced entity does not exist."""
    status_code = 404
    default_message = "Not found"


class ValidationError(AppError):
    """Empty cart or otherwise malformed input."""
    status_code = 400
    default_message = "Invalid input"


class UnauthorizedError(AppError):
    """The actor does not own the resource being mutated."""
    status_code = 403
    default_message = "Unauthorized"


class PersistenceError(AppError):
    """A database operation failed."""
    status_code = 500
    default_message = "Database operation failed"


class OrderPlacementError(PersistenceError):
    """The atomic order + line item insert failed and was rolled back."""
    default_message = "Failed to place order"
