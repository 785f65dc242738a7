"""Validators for audit event domain rules. Pure functions, no infrastructure or DB access."""

from auditsink.domain.exceptions import DomainValidationError
from auditsink.domain.schemas.event import AuditEventRequest


def _require_text(field: str, value: str) -> None:
    if not value or not value.strip():
        raise DomainValidationError(f"{field} must not be blank")


def validate_audit_event_request(request: AuditEventRequest) -> None:
    """
    Enforce non-blank required identity fields. Schema validation already guarantees
    presence; this rejects whitespace-only values before any persistence attempt.
    """
    _require_text("producerId", request.producer_id)
    _require_text("action", request.action)
    _require_text("outcome", request.outcome)
    _require_text("subject.type", request.subject.type)
    _require_text("subject.id", request.subject.id)
    _require_text("actor.id", request.actor.id)
    _require_text("actor.type", request.actor.type)
    if request.actor.roles is not None and any("," in role for role in request.actor.roles):
        raise DomainValidationError("actor.roles entries must not contain ','")
