"""Record models for migration data."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from enum import Enum
from datetime import datetime


class OutcomeKind(str, Enum):
    """What happened to a single source record."""
    TRANSFORMED = "transformed"
    SKIPPED_EXISTING = "skipped_existing"
    DECODE_ERROR = "decode_error"
    TRANSFORM_ERROR = "transform_error"
    WRITE_ERROR = "write_error"

    @property
    def is_failure(self) -> bool:
        return self in (
            OutcomeKind.DECODE_ERROR,
            OutcomeKind.TRANSFORM_ERROR,
            OutcomeKind.WRITE_ERROR,
        )


class RunState(str, Enum):
    """Lifecycle of a single migration job run."""
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    DONE = "done"


@dataclass
class SourceRecord:
    """A record pulled from a source collection."""
    id: str
    source_entity: str
    data: Dict[str, Any]
    position: int = 0
    decode_error: Optional[str] = None  # Set when the wire payload could not be decoded
    extracted_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_decoded(self) -> bool:
        return self.decode_error is None


@dataclass
class Outcome:
    """Result of pushing one source record through the pipeline."""
    record_id: str
    kind: OutcomeKind
    natural_key: Optional[str] = None
    error: Optional[str] = None
    completed_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def success(self) -> bool:
        return not self.kind.is_failure


@dataclass
class RunSummary:
    """Aggregate statistics for one job run."""
    job: str
    state: RunState = RunState.IDLE
    counts: Dict[OutcomeKind, int] = field(
        default_factory=lambda: {kind: 0 for kind in OutcomeKind}
    )
    processed: int = 0
    dry_run: bool = False
    deadline_reached: bool = False
    source_error: Optional[str] = None  # Cursor failed mid-stream
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    elapsed_seconds: float = 0.0

    @property
    def failed(self) -> int:
        return sum(n for kind, n in self.counts.items() if kind.is_failure)

    @property
    def has_failures(self) -> bool:
        return self.failed > 0 or self.source_error is not None

    def count(self, kind: OutcomeKind) -> int:
        return self.counts.get(kind, 0)

    def summary_line(self) -> str:
        """Human-readable completion line."""
        return f"Conversion done. Processed {self.processed} documents in {self.elapsed_seconds:.2f} seconds."
