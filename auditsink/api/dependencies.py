"""FastAPI dependency injection: session factory, event store, pipeline, query engine, metrics."""

import logging
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auditsink.api.middleware import request_metadata
from auditsink.application.event_store import EventStore
from auditsink.application.ingestion import IngestionPipeline
from auditsink.application.query import QueryEngine
from auditsink.config.settings import AppSettings, get_settings
from auditsink.domain.models.event import RequestMetadata
from auditsink.domain.redaction import RedactionEngine
from auditsink.infrastructure.database.event_store_db import DbEventStore
from auditsink.infrastructure.database.session import get_session_factory
from auditsink.observability.metrics import MetricsCollector

_metrics: MetricsCollector | None = None
_redaction: RedactionEngine | None = None


def get_metrics() -> MetricsCollector:
    """Return singleton metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def get_redaction_engine(
    settings: Annotated[AppSettings, Depends(get_settings)],
) -> RedactionEngine:
    """Return singleton redaction engine built from settings."""
    global _redaction
    if _redaction is None:
        _redaction = RedactionEngine(settings.redact_keys, settings.payload_max_json_bytes)
    return _redaction


def get_event_store(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> EventStore:
    return DbEventStore(session_factory)


def get_ingestion_pipeline(
    store: Annotated[EventStore, Depends(get_event_store)],
    redaction: Annotated[RedactionEngine, Depends(get_redaction_engine)],
    metrics: Annotated[MetricsCollector, Depends(get_metrics)],
    settings: Annotated[AppSettings, Depends(get_settings)],
) -> IngestionPipeline:
    """Build IngestionPipeline with injected store, redaction, metrics sink and logger."""
    return IngestionPipeline(
        store=store,
        redaction=redaction,
        metrics=metrics,
        logger=logging.getLogger("auditsink.ingestion"),
        lookup_attempts=settings.dedup_lookup_attempts,
        lookup_initial_backoff=settings.dedup_lookup_initial_backoff_seconds,
        lookup_max_backoff=settings.dedup_lookup_max_backoff_seconds,
    )


def get_query_engine(
    store: Annotated[EventStore, Depends(get_event_store)],
    settings: Annotated[AppSettings, Depends(get_settings)],
) -> QueryEngine:
    return QueryEngine(
        store,
        max_page_size=settings.max_page_size,
        default_page_size=settings.default_page_size,
    )


def get_request_metadata(request: Request) -> RequestMetadata:
    """Client IP, user agent, client-sent correlation ID and trace ID for the current request."""
    return request_metadata(request)
