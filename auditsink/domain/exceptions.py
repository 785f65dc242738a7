"""Domain-specific exceptions. Pure domain layer. No infrastructure."""


class DomainError(Exception):
    """Base for all domain-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DomainValidationError(DomainError):
    """Raised when an incoming audit event violates domain rules."""


class RedactionConfigError(DomainError):
    """Raised when the redaction cap cannot hold the truncation marker."""
