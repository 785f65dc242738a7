"""Read path: point lookup, listing and filtered search over the event store."""

import uuid
from dataclasses import replace
from typing import Optional

from auditsink.application.event_store import EventStore
from auditsink.core.time import to_utc
from auditsink.domain.exceptions import DomainValidationError
from auditsink.domain.models.event import AuditEvent
from auditsink.domain.models.query import (
    PagedResult,
    SearchCriteria,
    resolve_sort_field,
    resolve_sort_order,
)


class QueryEngine:
    """Builds store queries from optional criteria and wraps pages in the pagination envelope."""

    def __init__(self, store: EventStore, max_page_size: int = 500, default_page_size: int = 20) -> None:
        self._store = store
        self._max_page_size = max_page_size
        self._default_page_size = default_page_size

    async def get(self, event_id: uuid.UUID) -> Optional[AuditEvent]:
        return await self._store.find_by_id(event_id)

    async def search(
        self,
        criteria: Optional[SearchCriteria] = None,
        page: int = 0,
        size: Optional[int] = None,
        sort_field: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> PagedResult[AuditEvent]:
        """
        Search with inclusive date bounds. No criteria lists everything. sort_field is
        checked against the allow-list here as well as in the store.
        """
        if size is None:
            size = self._default_page_size
        if page < 0:
            raise DomainValidationError("page must be >= 0")
        if size < 1 or size > self._max_page_size:
            raise DomainValidationError(f"size must be between 1 and {self._max_page_size}")

        criteria = _normalize(criteria or SearchCriteria())
        if (
            criteria.from_date is not None
            and criteria.to_date is not None
            and criteria.from_date > criteria.to_date
        ):
            raise DomainValidationError("fromDate must not be after toDate")

        field = resolve_sort_field(sort_field)
        order = resolve_sort_order(sort_order)
        content = await self._store.scan(criteria, page, size, field, order)
        total = await self._store.count(criteria)
        return PagedResult.of(content, page, size, total)


def _normalize(criteria: SearchCriteria) -> SearchCriteria:
    return replace(
        criteria,
        from_date=to_utc(criteria.from_date) if criteria.from_date is not None else None,
        to_date=to_utc(criteria.to_date) if criteria.to_date is not None else None,
    )
