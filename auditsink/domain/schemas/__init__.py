"""Domain schemas. Request/response and validation."""

from auditsink.domain.schemas.event import (
    AuditEventRequest,
    AuditEventResponse,
    IngestResponse,
    PagedResponse,
)

__all__ = [
    "AuditEventRequest",
    "AuditEventResponse",
    "IngestResponse",
    "PagedResponse",
]
