"""Pydantic schemas for the audit API. camelCase on the wire, snake_case in Python."""

import uuid
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, JsonValue
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# Column widths of the audit_event table; longer values are rejected before any insert.
MAX_FIELD_LENGTH = 255
MAX_IP_LENGTH = 64


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class Subject(CamelModel):
    type: str = Field(..., min_length=1, max_length=MAX_FIELD_LENGTH)
    id: str = Field(..., min_length=1, max_length=MAX_FIELD_LENGTH)


class Actor(CamelModel):
    id: str = Field(..., min_length=1, max_length=MAX_FIELD_LENGTH)
    type: str = Field(..., min_length=1, max_length=MAX_FIELD_LENGTH)
    roles: Optional[List[str]] = None
    tenant_id: Optional[str] = Field(None, max_length=MAX_FIELD_LENGTH)


class Context(CamelModel):
    app_id: Optional[str] = Field(None, max_length=MAX_FIELD_LENGTH)
    track_id: Optional[str] = Field(None, max_length=MAX_FIELD_LENGTH)
    release_id: Optional[str] = Field(None, max_length=MAX_FIELD_LENGTH)
    ticket_key: Optional[str] = Field(None, max_length=MAX_FIELD_LENGTH)
    external_system_id: Optional[str] = Field(None, max_length=MAX_FIELD_LENGTH)


class Policy(CamelModel):
    decision_id: Optional[str] = Field(None, max_length=MAX_FIELD_LENGTH)
    rule_path: Optional[str] = None


class Payload(CamelModel):
    """Arguments and result are arbitrary JSON trees; they are redacted before storage."""

    arguments_redacted: JsonValue = None
    result_redacted: JsonValue = None
    payload_hash: Optional[str] = Field(None, max_length=MAX_FIELD_LENGTH)


class ErrorInfo(CamelModel):
    error_type: Optional[str] = Field(None, max_length=MAX_FIELD_LENGTH)
    error_message_hash: Optional[str] = Field(None, max_length=MAX_FIELD_LENGTH)


class AuditEventRequest(CamelModel):
    """Producer submission. idempotency_key is a hint only; the server derives its own."""

    schema_version: Optional[int] = Field(None, ge=1)
    producer_id: str = Field(..., min_length=1, max_length=MAX_FIELD_LENGTH)
    occurred_at_utc: Optional[datetime] = None
    action: str = Field(..., min_length=1, max_length=MAX_FIELD_LENGTH)
    outcome: str = Field(..., min_length=1, max_length=MAX_FIELD_LENGTH)
    subject: Subject
    actor: Actor
    context: Optional[Context] = None
    channel: Optional[str] = Field(None, max_length=MAX_FIELD_LENGTH)
    correlation_id: Optional[str] = Field(None, max_length=MAX_FIELD_LENGTH)
    trace_id: Optional[str] = Field(None, max_length=MAX_FIELD_LENGTH)
    policy: Optional[Policy] = None
    payload: Optional[Payload] = None
    error: Optional[ErrorInfo] = None
    idempotency_key: Optional[str] = Field(None, max_length=MAX_FIELD_LENGTH)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class IngestResponse(CamelModel):
    event_id: str
    deduped: bool


class AuditEventResponse(CamelModel):
    """Read shape of a stored event: every persisted column."""

    id: uuid.UUID
    occurred_at_utc: datetime
    action: str
    outcome: str
    subject_type: str
    subject_id: str
    actor_id: str
    actor_type: str
    roles: Optional[str] = None
    tenant_id: Optional[str] = None
    channel: Optional[str] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    correlation_id: Optional[str] = None
    trace_id: Optional[str] = None
    app_id: Optional[str] = None
    track_id: Optional[str] = None
    release_id: Optional[str] = None
    ticket_key: Optional[str] = None
    external_system_id: Optional[str] = None
    policy_decision_id: Optional[str] = None
    rule_path: Optional[str] = None
    payload_hash: Optional[str] = None
    args_redacted: Optional[str] = None
    result_redacted: Optional[str] = None
    error_type: Optional[str] = None
    error_message_hash: Optional[str] = None
    schema_version: int
    idempotency_key: str


class PagedResponse(CamelModel, Generic[T]):
    content: List[T]
    page: int
    size: int
    total_elements: int
    total_pages: int
    first: bool
    last: bool
