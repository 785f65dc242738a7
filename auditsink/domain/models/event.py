"""Domain model for audit events. Pure business semantics. No ORM or infrastructure."""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class RequestMetadata:
    """Transport details captured at ingestion; never supplied in the event body."""

    client_ip: Optional[str] = None
    user_agent: Optional[str] = None
    correlation_id: Optional[str] = None
    trace_id: Optional[str] = None


@dataclass(frozen=True)
class AuditEvent:
    """
    One persisted audit record. Frozen: events are append-only and never change after
    ingestion. Payload fields hold the redacted, size-capped JSON text.
    """

    id: uuid.UUID
    occurred_at_utc: datetime
    action: str
    outcome: str
    subject_type: str
    subject_id: str
    actor_id: str
    actor_type: str
    idempotency_key: str
    schema_version: int = 1
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
