"""Domain layer: models, schemas, validators, redaction, fingerprinting. Pure business logic only."""

from auditsink.domain.exceptions import (
    DomainError,
    DomainValidationError,
    RedactionConfigError,
)
from auditsink.domain.idempotency import derive_idempotency_key
from auditsink.domain.models import (
    AuditEvent,
    PagedResult,
    RequestMetadata,
    SearchCriteria,
    SortOrder,
)
from auditsink.domain.redaction import RedactionEngine
from auditsink.domain.schemas import (
    AuditEventRequest,
    AuditEventResponse,
    IngestResponse,
    PagedResponse,
)
from auditsink.domain.validators import validate_audit_event_request

__all__ = [
    "AuditEvent",
    "AuditEventRequest",
    "AuditEventResponse",
    "DomainError",
    "DomainValidationError",
    "IngestResponse",
    "PagedResponse",
    "PagedResult",
    "RedactionConfigError",
    "RedactionEngine",
    "RequestMetadata",
    "SearchCriteria",
    "SortOrder",
    "derive_idempotency_key",
    "validate_audit_event_request",
]
