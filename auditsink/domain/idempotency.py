"""Server-side idempotency fingerprint for audit event submissions."""

import base64
import hashlib

from auditsink.domain.schemas.event import AuditEventRequest

# Tag prefixes keep ("ab", "c") and ("a", "bc") from joining to the same string.
FINGERPRINT_FIELDS = ("p", "a", "st", "si", "c")


def derive_idempotency_key(request: AuditEventRequest) -> str:
    """
    base64(SHA-256) over producer id, action, subject type, subject id and correlation id.

    Only retry-stable, producer-controlled fields take part: a genuine retry may differ in
    timestamp, client IP, user agent or payload and must still map to the same key. A
    client-supplied idempotency_key is ignored here so one producer cannot collide with
    another producer's dedup space.
    """
    values = (
        request.producer_id,
        request.action,
        request.subject.type,
        request.subject.id,
        request.correlation_id or "",
    )
    material = "|".join(f"{tag}:{value}" for tag, value in zip(FINGERPRINT_FIELDS, values))
    digest = hashlib.sha256(material.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")
