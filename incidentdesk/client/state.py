"""
Client State Module
===================

Explicit state objects for an incident UI.

- ListState: filters, sorting and the current page of the list view
- page_window: which page buttons a pagination control shows
- IncidentDraft: create/edit form contents

All objects are plain values passed between views; nothing here is
process-wide.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from incidentdesk.core.enums import IncidentStatus, Severity, SortOrder
from incidentdesk.core.query.list_query import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT_FIELD,
    Pagination,
)
from incidentdesk.schemas.incident import IncidentCreate, IncidentUpdate, field_errors_from

FILTER_FIELDS = ("service", "severity", "status")


# =====================================
# List View State
# =====================================

@dataclass(frozen=True)
class ListState:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    sort_by: str = DEFAULT_SORT_FIELD
    sort_order: str = SortOrder.DESC.value
    service: str = ""
    severity: str = ""
    status: str = ""
    search: str = ""

    def with_filter(self, name: str, value: Optional[str]) -> "ListState":
        """Change one equality filter and go back to the first page."""
        if name not in FILTER_FIELDS:
            raise ValueError(f"Unknown filter: {name}")
        return replace(self, **{name: value or ""}, page=1)

    def with_search(self, term: Optional[str]) -> "ListState":
        return replace(self, search=term or "", page=1)

    def with_limit(self, limit: int) -> "ListState":
        return replace(self, limit=limit, page=1)

    def with_page(self, page: int) -> "ListState":
        return replace(self, page=max(1, page))

    def toggle_sort(self, field: str) -> "ListState":
        """
        Clicking the active column flips its direction; clicking another
        column sorts it descending. Either way the list restarts at page 1.
        """
        if field == self.sort_by:
            order = SortOrder.ASC if self.sort_order == SortOrder.DESC.value else SortOrder.DESC
        else:
            order = SortOrder.DESC
        return replace(self, sort_by=field, sort_order=order.value, page=1)

    def clear_filters(self) -> "ListState":
        return replace(self, service="", severity="", status="", search="", page=1)

    def to_query_params(self) -> dict[str, Any]:
        """Query string parameters, leaving out empty filters."""
        params = {
            "page": self.page,
            "limit": self.limit,
            "sortBy": self.sort_by,
            "sortOrder": self.sort_order,
            "service": self.service,
            "severity": self.severity,
            "status": self.status,
            "search": self.search,
        }
        return {key: value for key, value in params.items() if value not in (None, "")}


def page_window(pagination: Pagination, radius: int = 2) -> list[Optional[int]]:
    """
    Page numbers to render in a pagination control.

    Shows ``radius`` pages either side of the current one, plus the first
    and last page when the window does not reach them. ``None`` marks a
    gap of skipped pages.

    Example:
        page 6 of 10 -> [1, None, 4, 5, 6, 7, 8, 9, 10]
    """
    if pagination.total_pages < 1:
        return []

    start = max(1, pagination.page - radius)
    end = min(pagination.total_pages, pagination.page + radius)
    window: list[Optional[int]] = []

    if start > 1:
        window.append(1)
        if start > 2:
            window.append(None)

    window.extend(range(start, end + 1))

    if end < pagination.total_pages:
        if end < pagination.total_pages - 1:
            window.append(None)
        window.append(pagination.total_pages)

    return window


# =====================================
# Form Draft
# =====================================

@dataclass(frozen=True)
class IncidentDraft:
    """
    Contents of the create/edit form.

    Optional fields are kept as empty strings while editing, the way a
    text input holds them.
    """

    title: str = ""
    service: str = ""
    severity: str = Severity.SEV3.value
    status: str = IncidentStatus.OPEN.value
    owner: str = ""
    summary: str = ""

    @classmethod
    def from_incident(cls, record: Mapping[str, Any]) -> "IncidentDraft":
        return cls(
            title=record["title"],
            service=record["service"],
            severity=record["severity"],
            status=record["status"],
            owner=record.get("owner") or "",
            summary=record.get("summary") or "",
        )

    def with_value(self, name: str, value: str) -> "IncidentDraft":
        return replace(self, **{name: value})

    def to_payload(self) -> dict[str, Any]:
        return {item.name: getattr(self, item.name) for item in fields(self)}

    def changes_from(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """Only the fields that differ from the saved record."""
        original = IncidentDraft.from_incident(record)
        return {
            name: value
            for name, value in self.to_payload().items()
            if getattr(original, name) != value
        }

    def validate(self, partial: bool = False) -> dict[str, str]:
        """
        Run the server's field rules locally.

        Returns:
            Mapping of field name to reason; empty when the draft is valid
        """
        schema = IncidentUpdate if partial else IncidentCreate
        try:
            schema.model_validate(self.to_payload())
        except PydanticValidationError as e:
            return field_errors_from(e)
        return {}
