"""Search criteria, sort allow-list and the pagination envelope."""

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")

DEFAULT_SORT_FIELD = "occurred_at_utc"

SORT_FIELDS = frozenset(
    {
        "id",
        "occurred_at_utc",
        "action",
        "outcome",
        "actor_id",
        "subject_id",
        "tenant_id",
    }
)


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def resolve_sort_field(sort_by: Optional[str]) -> str:
    """Return sort_by if allow-listed, else the default. Unknown values are dropped, never echoed."""
    if sort_by in SORT_FIELDS:
        return sort_by
    return DEFAULT_SORT_FIELD


def resolve_sort_order(sort_order: Optional[str]) -> SortOrder:
    """Missing means descending; otherwise only a case-insensitive "desc" sorts descending."""
    if sort_order is None:
        return SortOrder.DESC
    if isinstance(sort_order, SortOrder):
        return sort_order
    return SortOrder.DESC if sort_order.strip().lower() == "desc" else SortOrder.ASC


@dataclass(frozen=True)
class SearchCriteria:
    """Optional equality and inclusive date-range filters. None means unconstrained."""

    tenant_id: Optional[str] = None
    actor_id: Optional[str] = None
    subject_id: Optional[str] = None
    action: Optional[str] = None
    outcome: Optional[str] = None
    correlation_id: Optional[str] = None
    trace_id: Optional[str] = None
    app_id: Optional[str] = None
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None


@dataclass(frozen=True)
class PagedResult(Generic[T]):
    content: List[T]
    page: int
    size: int
    total_elements: int
    total_pages: int
    first: bool
    last: bool

    @classmethod
    def of(cls, content: List[T], page: int, size: int, total_elements: int) -> "PagedResult[T]":
        total_pages = math.ceil(total_elements / size)
        return cls(
            content=content,
            page=page,
            size=size,
            total_elements=total_elements,
            total_pages=total_pages,
            first=page == 0,
            last=page >= total_pages - 1,
        )
