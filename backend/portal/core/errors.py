# portal/core/errors.py
"""
Domain exceptions raised by services and identity providers.

Routes never build error bodies for these by hand: the handlers registered in
``portal.main`` map each class to a fixed status code and the standard
``{"error": ..., "message": ...}`` shape.
"""
from __future__ import annotations

from typing import Any


class PortalError(Exception):
    """Base class for expected, client-facing failures."""

    status_code = 500
    error_code = "INTERNAL_ERROR"
    public_message = "Internal server error"

    def __init__(self, message: str | None = None, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message or self.public_message)
        self.message = message or self.public_message
        self.details = details


class ValidationError(PortalError):
    """Malformed or missing input. Never retried."""

    status_code = 400
    error_code = "VALIDATION_ERROR"
    public_message = "Invalid request"

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message, details={"field": field} if field else None)
        self.field = field


class DuplicateUserError(PortalError):
    status_code = 409
    error_code = "CONFLICT"
    public_message = "User already exists with this email"


class AuthenticationFailure(PortalError):
    """Wrong credentials. The message never says which field was wrong."""

    status_code = 401
    error_code = "UNAUTHORIZED"
    public_message = "Invalid email or password"

    def __init__(self) -> None:
        super().__init__(self.public_message)


class StorageUnavailableError(PortalError):
    """Document store I/O failure. The underlying cause is logged, never echoed."""

    status_code = 500
    error_code = "INTERNAL_ERROR"
    public_message = "Internal server error"


class IdentityProviderError(StorageUnavailableError):
    """Identity provider I/O failure (metadata reads/writes, key fetches)."""


class UserNotFoundError(PortalError):
    status_code = 404
    error_code = "NOT_FOUND"
    public_message = "User not found"
