"""
Incident Service Module
=======================

Application logic for the incident endpoints.

Responsibilities:
- Parse and validate request bodies into typed payloads
- Assign ids and timestamps on creation
- Check existence before validating partial updates
- Shape list results into the page contract
"""

import uuid
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from incidentdesk.core.exceptions import IncidentNotFoundError, ValidationError
from incidentdesk.core.logging import get_logger
from incidentdesk.core.query.list_query import ListQuery, Pagination
from incidentdesk.core.timestamps import utc_timestamp
from incidentdesk.models.incident import Incident
from incidentdesk.schemas.incident import IncidentCreate, IncidentUpdate, field_errors_from
from incidentdesk.services.incident_store import IncidentStore

# Initialize logger
logger = get_logger(__name__)


def generate_incident_id() -> str:
    return str(uuid.uuid4())


def parse_create(body: Any) -> IncidentCreate:
    """
    Validate a create body.

    Raises:
        ValidationError: With one reason per invalid field
    """
    try:
        return IncidentCreate.model_validate(body)
    except PydanticValidationError as e:
        raise ValidationError(details=field_errors_from(e)) from e


def parse_update(body: Any) -> IncidentUpdate:
    """
    Validate a partial update body. A missing body counts as no changes.

    Raises:
        ValidationError: With one reason per invalid field
    """
    try:
        return IncidentUpdate.model_validate({} if body is None else body)
    except PydanticValidationError as e:
        raise ValidationError(details=field_errors_from(e)) from e


class IncidentService:
    """
    Incident operations used by the HTTP layer.

    Usage:
        service = IncidentService(db)
        record = service.create({"title": "DB down", ...})
    """

    def __init__(self, db: Session, store: Optional[IncidentStore] = None):
        self.store = store or IncidentStore(db)

    def create(self, body: Any) -> dict:
        """
        Create an incident.

        Args:
            body: Decoded JSON request body

        Returns:
            The stored record

        Raises:
            ValidationError: If the body breaks a field rule
        """
        payload = parse_create(body)
        now = utc_timestamp()

        incident = Incident(
            id=generate_incident_id(),
            title=payload.title,
            service=payload.service,
            severity=payload.severity.value,
            status=payload.status.value,
            owner=payload.owner or None,
            summary=payload.summary or None,
            created_at=now,
            updated_at=now,
        )
        self.store.insert(incident)

        logger.info(
            "incident_created",
            incident_id=incident.id,
            service=incident.service,
            severity=incident.severity,
        )
        return incident.to_dict()

    def get(self, incident_id: str) -> dict:
        """
        Raises:
            IncidentNotFoundError: If the id does not exist
        """
        incident = self.store.get_by_id(incident_id)
        if incident is None:
            raise IncidentNotFoundError(incident_id)
        return incident.to_dict()

    def list_incidents(self, query: ListQuery) -> dict:
        """
        One page of incidents plus pagination metadata.

        The total is counted with the same filters as the page, so it is
        independent of page and limit.
        """
        total = self.store.count(query.filters)
        incidents = self.store.list(query.filters, query.sort, query.page)
        pagination = Pagination.compute(query.page, total)

        logger.debug(
            "incidents_listed",
            total=total,
            page=pagination.page,
            limit=pagination.limit,
            sort_by=query.sort.field,
            sort_order=query.sort.order.value,
        )
        return {
            "incidents": [incident.to_dict() for incident in incidents],
            "pagination": pagination.to_dict(),
        }

    def update(self, incident_id: str, body: Any) -> dict:
        """
        Partially update an incident.

        Existence is checked before the body is validated, so an unknown
        id yields not-found whatever the body contains. An empty change
        set returns the current record without refreshing updatedAt.

        Raises:
            IncidentNotFoundError: If the id does not exist
            ValidationError: If a provided field breaks a rule
        """
        current = self.store.get_by_id(incident_id)
        if current is None:
            raise IncidentNotFoundError(incident_id)

        changes = parse_update(body).changes()
        if not changes:
            return current.to_dict()

        incident = self.store.update(incident_id, changes, updated_at=utc_timestamp())

        logger.info(
            "incident_updated",
            incident_id=incident_id,
            fields=sorted(changes),
        )
        return incident.to_dict()
