"""Error taxonomy for migration runs."""

from typing import Optional


class MigrationError(Exception):
    """Base class for all migration errors."""


class ConfigurationError(MigrationError):
    """Raised when settings from the environment or command line are unusable."""


class StoreConnectionError(MigrationError):
    """Raised when a source or destination store cannot be reached at startup."""

    def __init__(self, store: str, cause: Exception) -> None:
        self.store = store
        self.cause = cause
        super().__init__(f"Could not connect to {store}: {cause}")


class RecordError(MigrationError):
    """An error tied to a single record. Never fatal to the run."""

    def __init__(self, record_id: str, message: str) -> None:
        self.record_id = record_id
        super().__init__(message)


class DecodeError(RecordError):
    """A source document could not be decoded from its wire representation."""


class TransformError(RecordError):
    """A record failed validation while being mapped to its canonical shape."""


class WriteError(RecordError):
    """The destination rejected a write."""

    def __init__(self, record_id: str, message: str, cause: Optional[Exception] = None) -> None:
        self.cause = cause
        super().__init__(record_id, message)


class IdempotencyCheckError(WriteError):
    """The existence lookup failed for a reason other than "not found"."""
