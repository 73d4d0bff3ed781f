"""
Schemas Package Initialization
==============================

Exports all Pydantic schemas for the application.

Usage:
    from incidentdesk.schemas import IncidentCreate, IncidentResponse
"""

from incidentdesk.schemas.incident import (
    FIELD_ERROR_MESSAGES,
    IncidentCreate,
    IncidentUpdate,
    IncidentResponse,
    IncidentListResponse,
    PaginationResponse,
    ErrorResponse,
    HealthResponse,
    field_errors,
    field_errors_from,
)

__all__ = [
    "FIELD_ERROR_MESSAGES",
    "IncidentCreate",
    "IncidentUpdate",
    "IncidentResponse",
    "IncidentListResponse",
    "PaginationResponse",
    "ErrorResponse",
    "HealthResponse",
    "field_errors",
    "field_errors_from",
]
