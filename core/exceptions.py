# core/exceptions.py
"""Define standardized exception types for the character import core.

This module provides a small exception hierarchy and helpers used across `core/`
and `data_access/` to propagate actionable error details without losing the
original exception.
"""

from typing import Any


class MysteryCoreError(Exception):
    """Base exception for all core system errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class DatabaseError(MysteryCoreError):
    """Errors related to database operations."""


class DatabaseConnectionError(DatabaseError):
    """Errors related to database connection issues."""


class CharacterPersistenceError(DatabaseError):
    """Signal a failure to persist character rows.

    Notes:
        The REST store reports failures as HTTP errors; this type lets the import
        service tell storage failures apart from parsing outcomes.
    """


class ValidationError(MysteryCoreError):
    """Errors related to data validation."""


class CharacterNameError(ValidationError):
    """Raised when no character name can be determined from a guide."""


def create_error_context(**kwargs: Any) -> dict[str, Any]:
    """Build a context dictionary for structured errors.

    Args:
        **kwargs: Key-value pairs to include.

    Returns:
        A dictionary containing only keys whose values are not `None`.
    """
    return {k: v for k, v in kwargs.items() if v is not None}


def handle_database_error(operation: str, original_error: Exception, **context: Any) -> DatabaseError:
    """Convert an exception into a standardized database error.

    Args:
        operation: Name/description of the database operation that failed.
        original_error: The caught exception.
        **context: Additional structured context to attach.

    Returns:
        `DatabaseConnectionError` when the store could not be reached, otherwise
        `CharacterPersistenceError`.
    """
    status_code = None
    response = getattr(original_error, "response", None)
    if response is not None:
        status_code = getattr(response, "status_code", None)

    error_details = create_error_context(
        operation=operation,
        original_error=str(original_error),
        error_type=type(original_error).__name__,
        status_code=status_code,
        **context,
    )

    if status_code is None and "connect" in (type(original_error).__name__ + str(original_error)).lower():
        return DatabaseConnectionError(f"Database connection failed during {operation}", details=error_details)
    return CharacterPersistenceError(f"Database error during {operation}", details=error_details)
