"""
Centralized Exception Handling Module
=====================================

Defines custom exception classes for the application.

Client errors (validation, not found) carry a precise message and
field-level details that are returned to the caller. Storage errors
carry internal detail for the server log only; the HTTP layer collapses
them into an opaque server error.

Usage:
    raise ValidationError(details={"title": "Title is required"})
    raise IncidentNotFoundError(incident_id)
"""

from typing import Any, Dict, Optional
from fastapi import status


class IncidentDeskException(Exception):
    """
    Base exception class for IncidentDesk.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    @property
    def is_client_error(self) -> bool:
        return self.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR


# ==========================
# Validation Exceptions
# ==========================

class ValidationError(IncidentDeskException):
    """Raised when request input fails field rules."""

    def __init__(
        self,
        details: Optional[Dict[str, str]] = None,
        message: str = "Validation failed",
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


# ==========================
# Resource Exceptions
# ==========================

class NotFoundError(IncidentDeskException):
    """Raised when a resource is not found."""

    def __init__(self, resource: str = "Resource", identifier: Optional[str] = None):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            message=f"{resource} not found",
            status_code=status.HTTP_404_NOT_FOUND,
        )


class IncidentNotFoundError(NotFoundError):
    """Raised when an incident id does not exist."""

    def __init__(self, identifier: Optional[str] = None):
        super().__init__(resource="Incident", identifier=identifier)


# ==========================
# Storage Exceptions
# ==========================

class StorageError(IncidentDeskException):
    """Base class for failures inside the storage layer."""

    def __init__(self, message: str, operation: Optional[str] = None):
        self.operation = operation
        super().__init__(message=message)


class ConstraintViolation(StorageError):
    """Raised when a write breaks a table constraint (uniqueness, enum CHECK)."""


class StorageUnavailable(StorageError):
    """Raised when the database cannot be reached or stays locked past the busy timeout."""
