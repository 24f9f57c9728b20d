from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    def __init__(self, message: str = "", *, errors: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class BadRequestError(DomainError):
    """Raised when a required request parameter is missing or malformed."""


class NotFoundError(DomainError):
    """Raised when the requested record does not exist."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or no user is logged in."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""
