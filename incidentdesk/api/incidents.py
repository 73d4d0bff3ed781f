"""
Incident Routes Module
======================

HTTP endpoints for incidents.

Endpoints:
- POST   /incidents        create
- GET    /incidents        list (filter, sort, paginate)
- GET    /incidents/{id}   fetch one
- PATCH  /incidents/{id}   partial update

Request bodies are accepted as raw JSON and validated in the service
layer, so a PATCH against an unknown id reports not-found before any
body validation happens.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from incidentdesk.core.query.list_query import ListQuery
from incidentdesk.db.session import get_db
from incidentdesk.schemas import (
    ErrorResponse,
    IncidentListResponse,
    IncidentResponse,
)
from incidentdesk.services.incident_service import IncidentService


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/incidents",
    tags=["Incidents"],
    responses={
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)


def get_incident_service(db: Session = Depends(get_db)) -> IncidentService:
    return IncidentService(db)


# =====================================
# Endpoints
# =====================================

@router.post(
    "",
    response_model=IncidentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Incident",
    responses={
        400: {"model": ErrorResponse, "description": "Validation failed"},
    },
)
def create_incident(
    body: Any = Body(default=None),
    service: IncidentService = Depends(get_incident_service),
) -> dict:
    """
    Create an incident.

    The id and both timestamps are assigned by the server.
    """
    return service.create(body)


@router.get(
    "",
    response_model=IncidentListResponse,
    summary="List Incidents",
    description="Filter, sort and paginate incidents. Invalid parameters fall back to defaults.",
)
def list_incidents(
    page: Optional[str] = Query(None, description="Page number (min 1)"),
    limit: Optional[str] = Query(None, description="Page size (1-100, default 10)"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="Sort field"),
    sort_order: Optional[str] = Query(None, alias="sortOrder", description="ASC or DESC"),
    service_name: Optional[str] = Query(None, alias="service", description="Filter by service"),
    severity: Optional[str] = Query(None, description="Filter by severity"),
    incident_status: Optional[str] = Query(None, alias="status", description="Filter by status"),
    search: Optional[str] = Query(None, description="Substring of title, summary or owner"),
    service: IncidentService = Depends(get_incident_service),
) -> dict:
    query = ListQuery.from_params(
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        service=service_name,
        severity=severity,
        status=incident_status,
        search=search,
    )
    return service.list_incidents(query)


@router.get(
    "/{incident_id}",
    response_model=IncidentResponse,
    summary="Get Incident",
    responses={
        404: {"model": ErrorResponse, "description": "Incident not found"},
    },
)
def get_incident(
    incident_id: str,
    service: IncidentService = Depends(get_incident_service),
) -> dict:
    return service.get(incident_id)


@router.patch(
    "/{incident_id}",
    response_model=IncidentResponse,
    summary="Update Incident",
    responses={
        400: {"model": ErrorResponse, "description": "Validation failed"},
        404: {"model": ErrorResponse, "description": "Incident not found"},
    },
)
def update_incident(
    incident_id: str,
    body: Any = Body(default=None),
    service: IncidentService = Depends(get_incident_service),
) -> dict:
    """
    Partially update an incident.

    Only the fields present in the body are changed. An empty body
    returns the record unchanged.
    """
    return service.update(incident_id, body)
