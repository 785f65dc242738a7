"""Application-layer exceptions. Do not reuse domain exceptions."""


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DuplicateEventError(ApplicationError):
    """Raised by the store when an event with the same idempotency key is already stored."""

    def __init__(self, idempotency_key: str) -> None:
        self.idempotency_key = idempotency_key
        super().__init__("An event with this idempotency key already exists")


class StorageError(ApplicationError):
    """Raised by the store for any persistence failure other than a key conflict."""


class IngestionError(ApplicationError):
    """Raised when an event could not be ingested. Nothing was stored for the request."""


class DedupLookupInconsistencyError(IngestionError):
    """Insert hit a key conflict but the existing event never became visible to lookups."""
