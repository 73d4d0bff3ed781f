"""
Incident Model
==============

The single tracked entity: one production issue.

Constraints:
- severity and status are restricted by CHECK constraints, so invalid
  values are rejected by the database even when request validation is
  bypassed.
- Timestamps are stored as fixed-width ISO-8601 UTC strings.

Database Indexes:
- Primary key: id
- idx_service, idx_status, idx_severity, idx_createdAt
"""

from typing import Optional

from sqlalchemy import CheckConstraint, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from incidentdesk.core.enums import IncidentStatus, Severity, enum_values
from incidentdesk.db.base import Base


def _in_clause(column: str, values: list[str]) -> str:
    quoted = ", ".join(f"'{value}'" for value in values)
    return f"{column} IN ({quoted})"


# Fields a partial update may touch
MUTABLE_FIELDS = ("title", "service", "severity", "status", "owner", "summary")


class Incident(Base):
    """
    Incident Entity.

    Attributes:
        id: UUID4 string primary key
        title: Short description
        service: Affected service name
        severity: SEV1..SEV4
        status: OPEN, MITIGATED or RESOLVED
        owner: Optional responder handle
        summary: Optional free text
        created_at: Creation timestamp (column ``createdAt``)
        updated_at: Last mutation timestamp (column ``updatedAt``)
    """

    __tablename__ = "incidents"

    # ==========================
    # Primary Key
    # ==========================
    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    # ==========================
    # Incident Info
    # ==========================
    title: Mapped[str] = mapped_column(Text, nullable=False)
    service: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[str] = mapped_column(String(8), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    owner: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ==========================
    # Timestamps
    # ==========================
    created_at: Mapped[str] = mapped_column("createdAt", String(32), nullable=False)
    updated_at: Mapped[str] = mapped_column("updatedAt", String(32), nullable=False)

    # ==========================
    # Constraints & Indexes
    # ==========================
    __table_args__ = (
        CheckConstraint(_in_clause("severity", enum_values(Severity)), name="ck_incidents_severity"),
        CheckConstraint(_in_clause("status", enum_values(IncidentStatus)), name="ck_incidents_status"),
        Index("idx_service", "service"),
        Index("idx_status", "status"),
        Index("idx_severity", "severity"),
        Index("idx_createdAt", "createdAt"),
    )

    def __repr__(self) -> str:
        return f"<Incident(id={self.id}, severity={self.severity}, status={self.status})>"

    def to_dict(self) -> dict:
        """
        Convert incident to its wire representation.

        Returns:
            Dictionary keyed by the public (camelCase) field names
        """
        return {
            "id": self.id,
            "title": self.title,
            "service": self.service,
            "severity": self.severity,
            "status": self.status,
            "owner": self.owner,
            "summary": self.summary,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
