from incidentdesk.core.query.list_query import (
    FilterSet,
    ListQuery,
    PageSpec,
    Pagination,
    SortSpec,
)

__all__ = [
    "FilterSet",
    "ListQuery",
    "PageSpec",
    "Pagination",
    "SortSpec",
]
