"""Event store protocol. Application layer depends on this; infrastructure implements it."""

import uuid
from typing import List, Optional, Protocol

from auditsink.domain.models.event import AuditEvent
from auditsink.domain.models.query import SearchCriteria, SortOrder


class EventStore(Protocol):
    """
    Append-only storage for audit events. There is no update or delete.

    Uniqueness of idempotency_key is enforced by the storage layer itself; insert raises
    DuplicateEventError on conflict and StorageError on any other failure.
    """

    async def insert(self, event: AuditEvent) -> uuid.UUID:
        """Persist all fields of event atomically and return its id."""
        ...

    async def find_by_id(self, event_id: uuid.UUID) -> Optional[AuditEvent]:
        ...

    async def find_by_idempotency_key(self, idempotency_key: str) -> Optional[uuid.UUID]:
        """Return the id of the event stored under idempotency_key, or None."""
        ...

    async def scan(
        self,
        criteria: SearchCriteria,
        page: int,
        size: int,
        sort_field: str,
        sort_order: SortOrder,
    ) -> List[AuditEvent]:
        """One page of matching events. Unknown sort fields fall back to occurred_at_utc."""
        ...

    async def count(self, criteria: SearchCriteria) -> int:
        ...

    async def ping(self) -> None:
        """Raise StorageError if the store is unreachable."""
        ...
