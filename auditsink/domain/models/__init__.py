"""Domain models. Pure business entities."""

from auditsink.domain.models.event import AuditEvent, RequestMetadata
from auditsink.domain.models.query import (
    DEFAULT_SORT_FIELD,
    SORT_FIELDS,
    PagedResult,
    SearchCriteria,
    SortOrder,
    resolve_sort_field,
    resolve_sort_order,
)

__all__ = [
    "AuditEvent",
    "DEFAULT_SORT_FIELD",
    "PagedResult",
    "RequestMetadata",
    "SORT_FIELDS",
    "SearchCriteria",
    "SortOrder",
    "resolve_sort_field",
    "resolve_sort_order",
]
