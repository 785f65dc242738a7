"""DB-backed event store. Persists audit events to the audit_event table."""

import uuid
from dataclasses import asdict, fields
from datetime import timezone
from typing import List, Optional

from sqlalchemy import func, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auditsink.application.exceptions import DuplicateEventError, StorageError
from auditsink.domain.models.event import AuditEvent
from auditsink.domain.models.query import SearchCriteria, SortOrder
from auditsink.infrastructure.database.models import AuditEventRecord

_EQUALITY_FILTERS = (
    ("tenant_id", AuditEventRecord.tenant_id),
    ("actor_id", AuditEventRecord.actor_id),
    ("subject_id", AuditEventRecord.subject_id),
    ("action", AuditEventRecord.action),
    ("outcome", AuditEventRecord.outcome),
    ("correlation_id", AuditEventRecord.correlation_id),
    ("trace_id", AuditEventRecord.trace_id),
    ("app_id", AuditEventRecord.app_id),
)

# Sort input is resolved to a column object here; the raw string never reaches SQL.
_SORT_COLUMNS = {
    "id": AuditEventRecord.id,
    "occurred_at_utc": AuditEventRecord.occurred_at_utc,
    "action": AuditEventRecord.action,
    "outcome": AuditEventRecord.outcome,
    "actor_id": AuditEventRecord.actor_id,
    "subject_id": AuditEventRecord.subject_id,
    "tenant_id": AuditEventRecord.tenant_id,
}

_EVENT_FIELDS = tuple(f.name for f in fields(AuditEvent))


def _where(criteria: SearchCriteria) -> list:
    clauses = []
    for name, column in _EQUALITY_FILTERS:
        value = getattr(criteria, name)
        if value is not None:
            clauses.append(column == value)
    if criteria.from_date is not None:
        clauses.append(AuditEventRecord.occurred_at_utc >= criteria.from_date)
    if criteria.to_date is not None:
        clauses.append(AuditEventRecord.occurred_at_utc <= criteria.to_date)
    return clauses


def _to_event(row: AuditEventRecord) -> AuditEvent:
    values = {name: getattr(row, name) for name in _EVENT_FIELDS}
    occurred_at = values["occurred_at_utc"]
    # SQLite hands back naive datetimes; everything stored is UTC.
    if occurred_at is not None and occurred_at.tzinfo is None:
        values["occurred_at_utc"] = occurred_at.replace(tzinfo=timezone.utc)
    return AuditEvent(**values)


class DbEventStore:
    """
    Append-only audit event store over an async SQLAlchemy session factory. Implements the
    EventStore protocol. Every call runs in its own short session so a lookup after a
    conflict sees rows committed by other workers.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def insert(self, event: AuditEvent) -> uuid.UUID:
        """Single-row insert and commit. The unique idempotency_key index decides duplicates."""
        async with self._session_factory() as session:
            session.add(AuditEventRecord(**asdict(event)))
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateEventError(event.idempotency_key) from e
            except SQLAlchemyError as e:
                await session.rollback()
                raise StorageError(f"Insert failed: {e}") from e
        return event.id

    async def find_by_id(self, event_id: uuid.UUID) -> Optional[AuditEvent]:
        stmt = select(AuditEventRecord).where(AuditEventRecord.id == event_id)
        async with self._session_factory() as session:
            try:
                row = (await session.execute(stmt)).scalar_one_or_none()
            except SQLAlchemyError as e:
                raise StorageError(f"Lookup failed: {e}") from e
            return _to_event(row) if row is not None else None

    async def find_by_idempotency_key(self, idempotency_key: str) -> Optional[uuid.UUID]:
        stmt = select(AuditEventRecord.id).where(
            AuditEventRecord.idempotency_key == idempotency_key
        )
        async with self._session_factory() as session:
            try:
                return (await session.execute(stmt)).scalar_one_or_none()
            except SQLAlchemyError as e:
                raise StorageError(f"Lookup failed: {e}") from e

    async def scan(
        self,
        criteria: SearchCriteria,
        page: int,
        size: int,
        sort_field: str,
        sort_order: SortOrder,
    ) -> List[AuditEvent]:
        column = _SORT_COLUMNS.get(sort_field, AuditEventRecord.occurred_at_utc)
        if sort_order == SortOrder.DESC:
            ordering = (column.desc(), AuditEventRecord.id.desc())
        else:
            ordering = (column.asc(), AuditEventRecord.id.asc())
        stmt = (
            select(AuditEventRecord)
            .where(*_where(criteria))
            .order_by(*ordering)
            .limit(size)
            .offset(page * size)
        )
        async with self._session_factory() as session:
            try:
                rows = (await session.execute(stmt)).scalars().all()
            except SQLAlchemyError as e:
                raise StorageError(f"Scan failed: {e}") from e
            return [_to_event(row) for row in rows]

    async def count(self, criteria: SearchCriteria) -> int:
        stmt = select(func.count()).select_from(AuditEventRecord).where(*_where(criteria))
        async with self._session_factory() as session:
            try:
                return (await session.execute(stmt)).scalar_one()
            except SQLAlchemyError as e:
                raise StorageError(f"Count failed: {e}") from e

    async def ping(self) -> None:
        async with self._session_factory() as session:
            try:
                await session.execute(text("SELECT 1"))
            except SQLAlchemyError as e:
                raise StorageError(f"Database unavailable: {e}") from e
