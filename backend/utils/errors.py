"""
Error Formatting Utilities

Domain exceptions raised by the services and consistent formatting for
API responses and logs.

Functions:
- format_api_error(exception): Convert to API error response body
- format_log_error(exception): Convert to structured log entry
"""

from typing import Any


class SportsbookError(Exception):
    """Base exception for wager and league operations."""

    status_code: int = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(SportsbookError):
    """Requested league, wager or profile does not exist."""

    status_code = 404


class AuthorizationError(SportsbookError):
    """Acting user may not perform the operation."""

    status_code = 403


class InvalidWagerStateError(SportsbookError):
    """Wager is not in the status the operation requires."""

    status_code = 409


class InsufficientBalanceError(SportsbookError):
    """Token balance too low to cover a stake."""

    status_code = 409


class ValidationFailedError(SportsbookError):
    """Request data is well-formed but semantically invalid."""

    status_code = 422


def format_api_error(exception: Exception) -> dict[str, Any]:
    """Render an exception as the JSON body returned to clients."""
    if isinstance(exception, SportsbookError):
        return {"error": exception.message}
    return {"error": str(exception) or exception.__class__.__name__}


def format_log_error(exception: Exception) -> dict[str, Any]:
    """Render an exception as structured log fields."""
    return {
        "error_type": exception.__class__.__name__,
        "error": str(exception),
        "status_code": getattr(exception, "status_code", None),
    }
