"""Prometheus-style metrics collector. Thread-safe, in-memory. No real Prometheus dependency."""

import threading
from typing import Any, Protocol

EVENTS_RECEIVED = "audit_events_received"
EVENTS_INGESTED = "audit_events_ingested"
EVENTS_DEDUPED = "audit_events_deduped"
EVENTS_REJECTED = "audit_events_rejected"


class MetricsSink(Protocol):
    """What the ingestion pipeline needs from observability: counters only."""

    def increment(
        self,
        name: str,
        value: float = 1.0,
        *,
        category: str | None = None,
    ) -> None:
        ...


class MetricsCollector:
    """
    In-memory Prometheus-style registry. Tracks plain and labeled counters.
    Thread-safe. Exposes increment, export_metrics, reset.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # Counters: name -> value or name -> {label key -> value}
        self._counters: dict[str, float] = {}
        self._counters_by_labels: dict[str, dict[str, float]] = {}

    def increment(
        self,
        name: str,
        value: float = 1.0,
        *,
        category: str | None = None,
    ) -> None:
        """Increment a counter. With category, also tracks a labeled series."""
        with self._lock:
            self._counters[name] = self._counters.get(name, 0) + value
            if category is not None:
                key = f"{name}:category={category}"
                labeled = self._counters_by_labels.setdefault(name, {})
                labeled[key] = labeled.get(key, 0) + value

    def get(self, name: str) -> float:
        with self._lock:
            return self._counters.get(name, 0)

    def export_metrics(self) -> dict[str, Any]:
        """Export all metrics as a dict (simulated Prometheus-style)."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "counters_by_labels": {
                    k: dict(v) for k, v in self._counters_by_labels.items()
                },
            }

    def reset(self) -> None:
        """Reset all metrics (for tests)."""
        with self._lock:
            self._counters.clear()
            self._counters_by_labels.clear()
