"""Observability layer: in-process ingestion counters. No external SaaS."""

from auditsink.observability.metrics import (
    EVENTS_DEDUPED,
    EVENTS_INGESTED,
    EVENTS_RECEIVED,
    EVENTS_REJECTED,
    MetricsCollector,
    MetricsSink,
)

__all__ = [
    "EVENTS_DEDUPED",
    "EVENTS_INGESTED",
    "EVENTS_RECEIVED",
    "EVENTS_REJECTED",
    "MetricsCollector",
    "MetricsSink",
]
