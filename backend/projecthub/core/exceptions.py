"""
Custom exception classes for ProjectHub.

Every error the API reports to a client is an ``AppError`` subclass carrying
its HTTP status code. ``AuthorizationError`` marks the kinds raised by the
authorization gate so they can be audit-logged.
"""

from typing import Any, Optional

from fastapi import status


class AppError(Exception):
    """Base exception for ProjectHub application."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong"

    def __init__(self, message: Optional[str] = None, errors: Optional[list[Any]] = None):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)


class AuthorizationError(AppError):
    """Raised by the authorization gate."""


class InvalidArgument(AuthorizationError):
    """Malformed id, missing/empty required field or invalid enum value."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid argument"


class Unauthenticated(AuthorizationError):
    """No credential, or a malformed, expired or badly signed one."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized request"


class PrincipalGone(AuthorizationError):
    """The credential is valid but its user no longer exists."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid access token"


class Forbidden(AuthorizationError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Permission denied"


class NotFound(AuthorizationError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class PreconditionFailed(AuthorizationError):
    """A guard ran before the guard it depends on. This is a server bug, not a client error."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Authorization precondition failed"

