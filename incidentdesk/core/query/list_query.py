"""
Incident List Query Module
==========================

Turns raw list parameters (as they arrive in a query string) into a
normalized, safe description of one page of incidents.

Features:
- Page / page-size clamping
- Whitelisted sort columns with deterministic fallback
- Conjunctive equality filters and a free-text search
- Pagination metadata derived from the matching total

Security:
    ORDER BY columns are taken from SORT_COLUMNS only; request text is
    never interpolated into SQL.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy import ColumnElement, UnaryExpression, or_

from incidentdesk.core.enums import SortOrder
from incidentdesk.models.incident import Incident

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
# Largest page whose offset still fits a signed 64-bit SQL integer
MAX_PAGE = (2**63 - 1) // MAX_PAGE_SIZE + 1
DEFAULT_SORT_FIELD = "createdAt"
DEFAULT_SORT_ORDER = SortOrder.DESC

# Public sort key -> mapped column
SORT_COLUMNS = {
    "createdAt": Incident.created_at,
    "updatedAt": Incident.updated_at,
    "severity": Incident.severity,
    "status": Incident.status,
    "service": Incident.service,
    "title": Incident.title,
}

SEARCH_COLUMNS = (Incident.title, Incident.summary, Incident.owner)

LIKE_ESCAPE = "\\"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


# =====================================
# Parameter Normalization
# =====================================

def parse_int(value: Any) -> Optional[int]:
    """
    Read the leading integer of a query value.

    "3" -> 3, "3abc" -> 3, "2.5" -> 2, "abc" -> None, None -> None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def normalize_page(value: Any) -> int:
    """Clamp to [1, MAX_PAGE]; unparsable values become 1."""
    page = parse_int(value) or DEFAULT_PAGE
    return max(DEFAULT_PAGE, min(MAX_PAGE, page))


def normalize_limit(value: Any) -> int:
    """Absent, unparsable or zero sizes use the default; others clamp to [1, MAX_PAGE_SIZE]."""
    limit = parse_int(value) or DEFAULT_PAGE_SIZE
    return max(1, min(MAX_PAGE_SIZE, limit))


def normalize_sort_field(value: Any) -> str:
    return value if value in SORT_COLUMNS else DEFAULT_SORT_FIELD


def normalize_sort_order(value: Any) -> SortOrder:
    if isinstance(value, str) and value.upper() in SortOrder.__members__:
        return SortOrder(value.upper())
    return DEFAULT_SORT_ORDER


def _clean(value: Optional[str]) -> Optional[str]:
    # Empty filter values mean "no filter", never "match empty string"
    return value if value else None


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


# =====================================
# Query Parts
# =====================================

@dataclass(frozen=True)
class FilterSet:
    """Equality filters plus a free-text search, applied with AND."""

    service: Optional[str] = None
    severity: Optional[str] = None
    status: Optional[str] = None
    search: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("service", "severity", "status", "search"):
            object.__setattr__(self, name, _clean(getattr(self, name)))

    @property
    def is_empty(self) -> bool:
        return not any((self.service, self.severity, self.status, self.search))

    def conditions(self) -> list[ColumnElement[bool]]:
        """
        Build the WHERE conditions for this filter set.

        Returns:
            List of SQLAlchemy boolean expressions (empty when unfiltered)
        """
        clauses: list[ColumnElement[bool]] = []

        if self.service:
            clauses.append(Incident.service == self.service)
        if self.severity:
            clauses.append(Incident.severity == self.severity)
        if self.status:
            clauses.append(Incident.status == self.status)
        if self.search:
            pattern = f"%{escape_like(self.search)}%"
            clauses.append(
                or_(*(column.like(pattern, escape=LIKE_ESCAPE) for column in SEARCH_COLUMNS))
            )

        return clauses


@dataclass(frozen=True)
class SortSpec:
    field: str = DEFAULT_SORT_FIELD
    order: SortOrder = DEFAULT_SORT_ORDER

    def __post_init__(self) -> None:
        object.__setattr__(self, "field", normalize_sort_field(self.field))
        object.__setattr__(self, "order", normalize_sort_order(self.order))

    def order_by(self) -> list[UnaryExpression]:
        """
        ORDER BY expressions for this sort.

        The primary key is appended as a tie breaker so that rows with
        equal sort values keep a stable position across pages.
        """
        column = SORT_COLUMNS[self.field]
        if self.order == SortOrder.ASC:
            return [column.asc(), Incident.id.asc()]
        return [column.desc(), Incident.id.desc()]


@dataclass(frozen=True)
class PageSpec:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        object.__setattr__(self, "page", normalize_page(self.page))
        object.__setattr__(self, "limit", normalize_limit(self.limit))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class ListQuery:
    """A fully normalized list request."""

    filters: FilterSet = field(default_factory=FilterSet)
    sort: SortSpec = field(default_factory=SortSpec)
    page: PageSpec = field(default_factory=PageSpec)

    @classmethod
    def from_params(
        cls,
        page: Any = None,
        limit: Any = None,
        sort_by: Any = None,
        sort_order: Any = None,
        service: Optional[str] = None,
        severity: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> "ListQuery":
        """
        Build a query from raw request parameters.

        Invalid values never raise; each falls back to its default.
        """
        return cls(
            filters=FilterSet(service=service, severity=severity, status=status, search=search),
            sort=SortSpec(field=sort_by, order=sort_order),
            page=PageSpec(page=page, limit=limit),
        )


# =====================================
# Pagination Metadata
# =====================================

@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def compute(cls, page_spec: PageSpec, total: int) -> "Pagination":
        total_pages = math.ceil(total / page_spec.limit) if total else 0
        return cls(
            page=page_spec.page,
            limit=page_spec.limit,
            total=total,
            total_pages=total_pages,
            has_next_page=page_spec.page < total_pages,
            has_prev_page=page_spec.page > 1,
        )

    def to_dict(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
            "hasNextPage": self.has_next_page,
            "hasPrevPage": self.has_prev_page,
        }
