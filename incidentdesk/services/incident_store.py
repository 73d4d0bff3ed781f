"""
Incident Store Module
=====================

Persistence for Incident records on top of one SQLAlchemy session.

Features:
- Insert, fetch by id, count, list and partial update
- Translation of driver errors into the storage error taxonomy
- Rollback of the session on any failed write

Errors:
    IntegrityError   -> ConstraintViolation (duplicate id, CHECK failure)
    OperationalError -> StorageUnavailable (connection loss, busy timeout)
"""

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.orm import Query, Session

from incidentdesk.core.exceptions import (
    ConstraintViolation,
    IncidentNotFoundError,
    StorageUnavailable,
)
from incidentdesk.core.logging import get_logger
from incidentdesk.core.query.list_query import FilterSet, PageSpec, SortSpec
from incidentdesk.core.timestamps import utc_timestamp
from incidentdesk.models.incident import MUTABLE_FIELDS, Incident

# Initialize logger
logger = get_logger(__name__)


class IncidentStore:
    """
    Data access for the incidents table.

    Usage:
        store = IncidentStore(db)
        incident = store.get_by_id(incident_id)
    """

    def __init__(self, db: Session):
        """
        Initialize the store.

        Args:
            db: Database session owned by the caller
        """
        self.db = db

    # =====================================
    # Error Translation
    # =====================================

    @contextmanager
    def _storage_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError as e:
            self.db.rollback()
            logger.error("incident_store_constraint_violation", operation=operation, error=str(e.orig))
            raise ConstraintViolation(str(e.orig), operation=operation) from e
        except (OperationalError, InterfaceError) as e:
            self.db.rollback()
            logger.error("incident_store_unavailable", operation=operation, error=str(e.orig))
            raise StorageUnavailable(str(e.orig), operation=operation) from e

    # =====================================
    # Writes
    # =====================================

    def insert(self, incident: Incident) -> Incident:
        """
        Persist a fully populated incident.

        Args:
            incident: Incident with id and timestamps already assigned

        Returns:
            The stored incident

        Raises:
            ConstraintViolation: If the id exists or an enum CHECK fails
            StorageUnavailable: If the database cannot be written
        """
        with self._storage_errors("insert"):
            self.db.add(incident)
            self.db.commit()
        return incident

    def update(
        self,
        incident_id: str,
        changes: Mapping[str, Any],
        updated_at: Optional[str] = None,
    ) -> Incident:
        """
        Apply a partial set of field changes.

        An empty change set returns the current record untouched, without
        refreshing updatedAt. The new updatedAt never precedes the previous
        one.

        Args:
            incident_id: Incident identifier
            changes: Mapping of mutable field name to new value
            updated_at: Timestamp to record; defaults to now

        Returns:
            The updated incident

        Raises:
            IncidentNotFoundError: If the id does not exist
            ValueError: If a change names an immutable or unknown field
        """
        unknown = set(changes) - set(MUTABLE_FIELDS)
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        incident = self.get_by_id(incident_id)
        if incident is None:
            raise IncidentNotFoundError(incident_id)

        if not changes:
            return incident

        with self._storage_errors("update"):
            for name, value in changes.items():
                setattr(incident, name, value)
            incident.updated_at = max(updated_at or utc_timestamp(), incident.updated_at)
            self.db.commit()
        return incident

    # =====================================
    # Reads
    # =====================================

    def get_by_id(self, incident_id: str) -> Optional[Incident]:
        """
        Fetch one incident.

        Returns:
            Incident instance or None when absent
        """
        with self._storage_errors("get_by_id"):
            return self.db.query(Incident).filter(Incident.id == incident_id).first()

    def _filtered(self, filters: FilterSet) -> Query:
        return self.db.query(Incident).filter(*filters.conditions())

    def count(self, filters: FilterSet) -> int:
        """Number of incidents matching the filter set."""
        with self._storage_errors("count"):
            return self._filtered(filters).count()

    def list(self, filters: FilterSet, sort: SortSpec, page: PageSpec) -> list[Incident]:
        """
        One ordered page of incidents matching the filter set.

        Args:
            filters: Equality and search conditions
            sort: Whitelisted ordering
            page: Page number and size

        Returns:
            List of incidents (possibly empty)
        """
        with self._storage_errors("list"):
            return (
                self._filtered(filters)
                .order_by(*sort.order_by())
                .offset(page.offset)
                .limit(page.limit)
                .all()
            )
