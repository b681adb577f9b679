"""Domain error taxonomy shared by repositories, services and the API layer.

Every error carries the HTTP status the API answers with and a client-safe
``detail`` string. Internal causes are chained with ``raise ... from err`` and
never exposed in ``detail``.
"""

from __future__ import annotations

from fastapi import status

__all__ = [
    "ForumError",
    "ValidationError",
    "PasswordPolicyError",
    "Unauthenticated",
    "Unauthorized",
    "NotFound",
    "DuplicateIdentity",
    "StorageError",
]


class ForumError(Exception):
    """Base class for all expected failures of the forum core."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(ForumError):
    """Malformed or missing input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class PasswordPolicyError(ValidationError):
    """Password rejected by the strength policy."""

    default_detail = "Password does not meet the strength requirements"


class Unauthenticated(ForumError):
    """No valid session, or credentials did not match."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"


class Unauthorized(ForumError):
    """Authenticated, but not allowed to touch the resource."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"


class NotFound(ForumError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class DuplicateIdentity(ForumError):
    """Username or email already taken."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Username or email already exists"


class StorageError(ForumError):
    """Any store failure that is not one of the mapped cases."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Database error"
