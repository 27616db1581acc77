from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is missing, malformed or violates domain rules."""


class DuplicateError(DomainError):
    """Raised when a unique value (email, roll number, identifier) is taken."""

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class ConflictError(DomainError):
    """Raised when the current state forbids the action (already marked, decided, claimed)."""


class AuthenticationError(DomainError):
    """Raised when credentials or the session token are invalid."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class InternalError(DomainError):
    """Unexpected storage failure."""

    status_code = 500
