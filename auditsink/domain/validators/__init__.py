"""Domain validators. Pure validation functions."""

from auditsink.domain.validators.event_validator import validate_audit_event_request

__all__ = ["validate_audit_event_request"]
