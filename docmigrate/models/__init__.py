"""Data models for the migration application."""

from .entities import (
    CanonicalRecord,
    Bot,
    Post,
    User,
    Partner,
    BlogPost,
    BlogEntry,
)
from .fields import (
    Scalar,
    SequenceOf,
    decode_variant,
    resolve_variant,
)
from .migration import (
    MigrationConfig,
    MigrationJob,
    DataSource,
    DataTarget,
    StoreType,
)
from .record import (
    SourceRecord,
    Outcome,
    OutcomeKind,
    RunState,
    RunSummary,
)

__all__ = [
    "CanonicalRecord",
    "Bot",
    "Post",
    "User",
    "Partner",
    "BlogPost",
    "BlogEntry",
    "Scalar",
    "SequenceOf",
    "decode_variant",
    "resolve_variant",
    "MigrationConfig",
    "MigrationJob",
    "DataSource",
    "DataTarget",
    "StoreType",
    "SourceRecord",
    "Outcome",
    "OutcomeKind",
    "RunState",
    "RunSummary",
]
