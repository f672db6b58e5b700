"""Error taxonomy shared by services and routers.

Every failure that reaches the HTTP layer is one of these classes; the app
registers a single handler that turns ``status_code`` and ``message`` into
the response envelope.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Malformed or out-of-range input."""

    status_code = 400


class UnauthenticatedError(AppError):
    """Missing, invalid or expired credentials."""

    status_code = 401


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Duplicate username or email."""

    status_code = 409


class StorageError(AppError):
    """Persistence failure."""


class CompositingError(AppError):
    """Image compositing failed."""


class CompositingInputError(ValidationError):
    """Caption or path cannot be handed to the compositor (embedded NUL)."""


class CredentialError(AppError):
    """Stored password hash could not be parsed."""


class InvalidTokenError(AppError):
    """Token signature, structure or expiration check failed."""

    status_code = 401
