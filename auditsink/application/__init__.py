# Application layer: services that orchestrate domain and infrastructure.

from auditsink.application.event_store import EventStore
from auditsink.application.exceptions import (
    ApplicationError,
    DedupLookupInconsistencyError,
    DuplicateEventError,
    IngestionError,
    StorageError,
)
from auditsink.application.ingestion import IngestionPipeline, IngestResult
from auditsink.application.query import QueryEngine

__all__ = [
    "ApplicationError",
    "DedupLookupInconsistencyError",
    "DuplicateEventError",
    "EventStore",
    "IngestResult",
    "IngestionError",
    "IngestionPipeline",
    "QueryEngine",
    "StorageError",
]
