# auditsink/infrastructure/database/models.py

from sqlalchemy import Column, DateTime, Integer, String, Text, Uuid

from auditsink.domain.schemas.event import MAX_FIELD_LENGTH, MAX_IP_LENGTH
from auditsink.infrastructure.database.session import Base


class AuditEventRecord(Base):
    """ORM model for the append-only audit_event table. One row per accepted event."""

    __tablename__ = "audit_event"

    id = Column(Uuid(as_uuid=True), primary_key=True)
    occurred_at_utc = Column(DateTime(timezone=True), nullable=False, index=True)
    action = Column(String(MAX_FIELD_LENGTH), nullable=False, index=True)
    outcome = Column(String(MAX_FIELD_LENGTH), nullable=False)
    subject_type = Column(String(MAX_FIELD_LENGTH), nullable=False)
    subject_id = Column(String(MAX_FIELD_LENGTH), nullable=False, index=True)
    actor_id = Column(String(MAX_FIELD_LENGTH), nullable=False, index=True)
    actor_type = Column(String(MAX_FIELD_LENGTH), nullable=False)
    roles = Column(Text, nullable=True)
    tenant_id = Column(String(MAX_FIELD_LENGTH), nullable=True, index=True)
    channel = Column(String(MAX_FIELD_LENGTH), nullable=True)
    ip = Column(String(MAX_IP_LENGTH), nullable=True)
    user_agent = Column(Text, nullable=True)
    correlation_id = Column(String(MAX_FIELD_LENGTH), nullable=True, index=True)
    trace_id = Column(String(MAX_FIELD_LENGTH), nullable=True, index=True)
    app_id = Column(String(MAX_FIELD_LENGTH), nullable=True, index=True)
    track_id = Column(String(MAX_FIELD_LENGTH), nullable=True)
    release_id = Column(String(MAX_FIELD_LENGTH), nullable=True)
    ticket_key = Column(String(MAX_FIELD_LENGTH), nullable=True)
    external_system_id = Column(String(MAX_FIELD_LENGTH), nullable=True)
    policy_decision_id = Column(String(MAX_FIELD_LENGTH), nullable=True)
    rule_path = Column(Text, nullable=True)
    payload_hash = Column(String(MAX_FIELD_LENGTH), nullable=True)
    args_redacted = Column(Text, nullable=True)
    result_redacted = Column(Text, nullable=True)
    error_type = Column(String(MAX_FIELD_LENGTH), nullable=True)
    error_message_hash = Column(String(MAX_FIELD_LENGTH), nullable=True)
    schema_version = Column(Integer, nullable=False, default=1)
    idempotency_key = Column(String(64), nullable=False, unique=True)
