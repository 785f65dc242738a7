"""Ingestion pipeline: normalize, redact, fingerprint, insert, resolve duplicates."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from auditsink.application.event_store import EventStore
from auditsink.application.exceptions import (
    DedupLookupInconsistencyError,
    DuplicateEventError,
    IngestionError,
)
from auditsink.core.time import to_utc, utcnow
from auditsink.domain.exceptions import DomainValidationError
from auditsink.domain.idempotency import derive_idempotency_key
from auditsink.domain.models.event import AuditEvent, RequestMetadata
from auditsink.domain.redaction import RedactionEngine
from auditsink.domain.schemas.event import AuditEventRequest
from auditsink.domain.validators.event_validator import validate_audit_event_request
from auditsink.observability.metrics import (
    EVENTS_DEDUPED,
    EVENTS_INGESTED,
    EVENTS_RECEIVED,
    EVENTS_REJECTED,
    MetricsSink,
)


@dataclass(frozen=True)
class IngestResult:
    event_id: uuid.UUID
    deduped: bool


class IngestionPipeline:
    """
    Turns a producer submission into exactly one stored event per idempotency key.

    No locks: the store's unique constraint on idempotency_key is the only serialization
    point. The loser of a concurrent race gets DuplicateEventError from the store and answers
    with the winner's id. If the winner's row is not yet visible, the lookup is retried with
    bounded exponential backoff; an id is never invented.
    """

    def __init__(
        self,
        store: EventStore,
        redaction: RedactionEngine,
        metrics: MetricsSink,
        logger: logging.Logger,
        *,
        lookup_attempts: int = 5,
        lookup_initial_backoff: float = 0.05,
        lookup_max_backoff: float = 1.0,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
    ) -> None:
        self._store = store
        self._redaction = redaction
        self._metrics = metrics
        self._logger = logger
        self._lookup_attempts = lookup_attempts
        self._lookup_initial_backoff = lookup_initial_backoff
        self._lookup_max_backoff = lookup_max_backoff
        self._clock = clock
        self._id_factory = id_factory

    async def ingest(self, request: AuditEventRequest, metadata: RequestMetadata) -> IngestResult:
        self._metrics.increment(EVENTS_RECEIVED)
        self._logger.info(
            "audit_event_received",
            extra={
                "producer_id": request.producer_id,
                "action": request.action,
                "outcome": request.outcome,
                "subject": f"{request.subject.type}:{request.subject.id}",
                "actor": f"{request.actor.type}:{request.actor.id}",
            },
        )

        try:
            validate_audit_event_request(request)
        except DomainValidationError as e:
            self._metrics.increment(EVENTS_REJECTED, category="validation")
            self._logger.warning("audit_event_invalid", extra={"error": e.message})
            raise

        event = self.build_event(request, metadata)
        if request.idempotency_key is not None and request.idempotency_key != event.idempotency_key:
            self._logger.warning(
                "client_idempotency_key_ignored",
                extra={
                    "client_idempotency_key": request.idempotency_key,
                    "idempotency_key": event.idempotency_key,
                },
            )

        try:
            event_id = await self._store.insert(event)
        except DuplicateEventError:
            return await self._resolve_duplicate(event)
        except Exception as e:
            self._reject(event, e)
            raise IngestionError("Failed to store audit event") from e

        self._metrics.increment(EVENTS_INGESTED)
        self._logger.info(
            "audit_event_ingested",
            extra={"event_id": str(event_id), "action": event.action, "deduped": False},
        )
        return IngestResult(event_id=event_id, deduped=False)

    def build_event(self, request: AuditEventRequest, metadata: RequestMetadata) -> AuditEvent:
        """Normalize a request into the record that will be stored. No I/O."""
        context = request.context
        policy = request.policy
        payload = request.payload
        error = request.error
        roles = request.actor.roles
        occurred_at = request.occurred_at_utc
        return AuditEvent(
            id=self._id_factory(),
            occurred_at_utc=to_utc(occurred_at if occurred_at is not None else self._clock()),
            action=request.action,
            outcome=request.outcome,
            subject_type=request.subject.type,
            subject_id=request.subject.id,
            actor_id=request.actor.id,
            actor_type=request.actor.type,
            roles=",".join(roles) if roles is not None else None,
            tenant_id=request.actor.tenant_id,
            channel=request.channel,
            ip=metadata.client_ip,
            user_agent=metadata.user_agent,
            correlation_id=request.correlation_id or metadata.correlation_id,
            trace_id=request.trace_id or metadata.trace_id,
            app_id=context.app_id if context else None,
            track_id=context.track_id if context else None,
            release_id=context.release_id if context else None,
            ticket_key=context.ticket_key if context else None,
            external_system_id=context.external_system_id if context else None,
            policy_decision_id=policy.decision_id if policy else None,
            rule_path=policy.rule_path if policy else None,
            payload_hash=payload.payload_hash if payload else None,
            args_redacted=self._redaction.redact(payload.arguments_redacted) if payload else None,
            result_redacted=self._redaction.redact(payload.result_redacted) if payload else None,
            error_type=error.error_type if error else None,
            error_message_hash=error.error_message_hash if error else None,
            schema_version=request.schema_version or 1,
            idempotency_key=derive_idempotency_key(request),
        )

    async def _resolve_duplicate(self, event: AuditEvent) -> IngestResult:
        try:
            existing_id = await self._find_existing_id(event.idempotency_key)
        except Exception as e:
            self._reject(event, e)
            if isinstance(e, IngestionError):
                raise
            raise IngestionError("Failed to resolve duplicate audit event") from e

        self._metrics.increment(EVENTS_DEDUPED)
        self._logger.info(
            "audit_event_deduped",
            extra={
                "event_id": str(existing_id),
                "action": event.action,
                "deduped": True,
                "idempotency_key": event.idempotency_key,
            },
        )
        return IngestResult(event_id=existing_id, deduped=True)

    async def _find_existing_id(self, idempotency_key: str) -> uuid.UUID:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._lookup_attempts),
            wait=wait_exponential(
                multiplier=self._lookup_initial_backoff,
                max=self._lookup_max_backoff,
            ),
            retry=retry_if_result(lambda found: found is None),
            before_sleep=self._log_lookup_retry,
        )
        try:
            return await retrying(self._store.find_by_idempotency_key, idempotency_key)
        except RetryError as e:
            raise DedupLookupInconsistencyError(
                f"Conflicting event not visible after {self._lookup_attempts} lookups"
            ) from e

    def _log_lookup_retry(self, retry_state: RetryCallState) -> None:
        self._logger.warning(
            "dedup_lookup_retry",
            extra={"attempt": retry_state.attempt_number},
        )

    def _reject(self, event: AuditEvent, error: Exception) -> None:
        self._metrics.increment(EVENTS_REJECTED, category="storage")
        self._logger.error(
            "audit_event_ingest_failed",
            extra={
                "action": event.action,
                "subject": f"{event.subject_type}:{event.subject_id}",
                "error": str(error),
            },
            exc_info=error,
        )
