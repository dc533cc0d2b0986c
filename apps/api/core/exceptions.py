"""
Custom exception classes.

Every user-visible failure is a redirect plus a one-time flash message,
except not-found which renders the 404 view. Handlers live in main.py.
"""
from typing import Optional


class AppException(Exception):
    """Base application exception with consistent structure."""

    status_code = 303  # redirect status used by the handler
    error_code = "APP_ERROR"

    def __init__(
        self,
        message: str,
        redirect_to: Optional[str] = None,
        flash_type: str = "error",
    ):
        super().__init__(message)
        self.message = message
        self.redirect_to = redirect_to
        self.flash_type = flash_type


class ValidationError(AppException):
    """Missing or invalid form input. Nothing is written."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, redirect_to: str = "/dashboard"):
        super().__init__(message, redirect_to=redirect_to)


class UnauthorizedError(AppException):
    """No session user."""

    error_code = "UNAUTHORIZED"

    def __init__(self, message: str = "Please log in."):
        super().__init__(message, redirect_to="/login")


class ForbiddenError(AppException):
    """
    Resource does not belong to the session user.

    Also raised for ids that do not exist, so callers cannot tell the two apart.
    """

    error_code = "FORBIDDEN"

    def __init__(self, message: str = "Not allowed."):
        super().__init__(message, redirect_to="/dashboard")


class NotFoundError(AppException):
    """Resource not found. Rendered as the 404 page, not a redirect."""

    status_code = 404  # status of the rendered not-found page
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}")
        self.resource = resource
        self.identifier = identifier

    @property
    def public_message(self) -> str:
        return f"{self.resource} not found"
