"""
Incident Schemas Module
=======================

Pydantic models for incident request/response validation.

Request bodies are parsed into typed models whose severity and status
fields are closed enums, so unrecognized values are rejected while
parsing. Parse failures are reported as a flat ``{field: reason}`` map.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from incidentdesk.core.enums import IncidentStatus, Severity, enum_values


# ==========================
# Field Error Messages
# ==========================

FIELD_ERROR_MESSAGES = {
    "title": "Title is required and must be a non-empty string",
    "service": "Service is required and must be a non-empty string",
    "severity": f"Severity must be one of: {', '.join(enum_values(Severity))}",
    "status": f"Status must be one of: {', '.join(enum_values(IncidentStatus))}",
    "owner": "Owner must be a string",
    "summary": "Summary must be a string",
}

BODY_ERROR_MESSAGE = "Request body must be a JSON object"

# Location prefixes FastAPI adds in front of the field name
_LOCATION_PREFIXES = {"body", "query", "path"}


def field_name_from_loc(loc: tuple) -> str:
    """Reduce a pydantic error location to the top-level field it refers to."""
    parts = [str(part) for part in loc]
    if parts and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]
    return parts[0] if parts else "body"


def field_errors(errors: list[dict[str, Any]]) -> dict[str, str]:
    """
    Collapse pydantic error entries into one human readable reason per field.

    Args:
        errors: Output of ``ValidationError.errors()``

    Returns:
        Mapping of field name to reason
    """
    details: dict[str, str] = {}
    for error in errors:
        if error.get("type") == "json_invalid":
            # loc carries the character offset of the decode failure
            name = "body"
        else:
            name = field_name_from_loc(tuple(error.get("loc", ())))
        if name in details:
            continue
        if name == "body":
            details[name] = BODY_ERROR_MESSAGE if error.get("type") == "model_type" else error["msg"]
        else:
            details[name] = FIELD_ERROR_MESSAGES.get(name, error["msg"])
    return details


def field_errors_from(exc: PydanticValidationError) -> dict[str, str]:
    return field_errors(exc.errors())


# ==========================
# Request Schemas
# ==========================

class _IncidentFields(BaseModel):
    """Shared text rules for create and update payloads."""

    model_config = ConfigDict(extra="ignore")

    @field_validator("title", "service", check_fields=False)
    @classmethod
    def must_not_be_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("must be a non-empty string")
        return value


class IncidentCreate(_IncidentFields):
    """Schema for creating a new incident."""

    title: str = Field(
        ...,
        description="Short description of the incident"
    )
    service: str = Field(
        ...,
        description="Affected service"
    )
    severity: Severity = Field(
        ...,
        description="Urgency tier"
    )
    status: IncidentStatus = Field(
        ...,
        description="Lifecycle status"
    )
    owner: Optional[str] = Field(
        default=None,
        description="Responder handle"
    )
    summary: Optional[str] = Field(
        default=None,
        description="Free text summary"
    )

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "title": "DB down",
                "service": "Database",
                "severity": "SEV1",
                "status": "OPEN",
                "owner": "engineer-4",
                "summary": "Primary is not accepting connections.",
            }
        }
    )


class IncidentUpdate(_IncidentFields):
    """
    Schema for partially updating an incident.

    Every field is optional. Required fields may be omitted but not
    explicitly set to null.
    """

    title: Optional[str] = None
    service: Optional[str] = None
    severity: Optional[Severity] = None
    status: Optional[IncidentStatus] = None
    owner: Optional[str] = None
    summary: Optional[str] = None

    @field_validator("title", "service", "severity", "status", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("may not be null")
        return value

    def changes(self) -> dict[str, Any]:
        """Fields the caller actually sent, as plain JSON values."""
        return self.model_dump(mode="json", exclude_unset=True)


# ==========================
# Response Schemas
# ==========================

class IncidentResponse(BaseModel):
    """Full incident record as returned by the API."""

    id: str
    title: str
    service: str
    severity: Severity
    status: IncidentStatus
    owner: Optional[str] = None
    summary: Optional[str] = None
    created_at: str = Field(..., alias="createdAt")
    updated_at: str = Field(..., alias="updatedAt")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "0b7f7f1c-5a6e-4c4e-8f0e-2f0b7a5b9c11",
                "title": "DB down",
                "service": "Database",
                "severity": "SEV1",
                "status": "OPEN",
                "owner": None,
                "summary": None,
                "createdAt": "2026-01-15T10:30:00.000Z",
                "updatedAt": "2026-01-15T10:30:00.000Z",
            }
        }
    )


class PaginationResponse(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int = Field(..., alias="totalPages")
    has_next_page: bool = Field(..., alias="hasNextPage")
    has_prev_page: bool = Field(..., alias="hasPrevPage")

    model_config = ConfigDict(populate_by_name=True)


class IncidentListResponse(BaseModel):
    """Response schema for one page of incidents."""

    incidents: list[IncidentResponse]
    pagination: PaginationResponse


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str = Field(
        ...,
        description="Error message"
    )
    details: Optional[dict[str, str]] = Field(
        default=None,
        description="Reason per invalid field"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Validation failed",
                "details": {"severity": FIELD_ERROR_MESSAGES["severity"]}
            }
        }
    )


class HealthResponse(BaseModel):
    status: str
