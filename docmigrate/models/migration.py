"""Migration execution models."""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from enum import Enum

from dotenv import load_dotenv

from ..exceptions import ConfigurationError


class StoreType(str, Enum):
    """Kinds of stores a job can read from or write to."""
    MONGO = "mongo"
    SQL = "sql"


@dataclass
class DataSource:
    """Where a job reads its documents from."""
    entity: str  # Transform to apply (e.g., "bots", "posts")
    database: str
    collection: str
    batch_size: int = 100
    filters: Dict[str, Any] = field(default_factory=dict)  # Query passed to find()


@dataclass
class DataTarget:
    """Where a job writes its canonical records."""
    type: StoreType
    name: str  # Collection or table name
    database: Optional[str] = None  # Only used for Mongo targets
    unique_key: Optional[str] = None  # Mongo field to enforce uniqueness on before writing


@dataclass
class MigrationJob:
    """A single source collection -> destination pairing."""
    name: str
    source: DataSource
    target: DataTarget
    description: str = ""


def _env_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class MigrationConfig:
    """Configuration for a migration invocation."""
    mongodb_uri: Optional[str] = None
    bots_mongodb_uri: Optional[str] = None  # Bot listings live in a separate cluster
    mysql_uri: Optional[str] = None

    # Execution options
    dry_run: bool = False
    parallel_workers: int = 16
    timeout_seconds: Optional[float] = None  # Deadline for admitting new records
    strict: bool = False  # Non-zero exit if any record failed
    connect_timeout_ms: int = 10000

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation (connection strings omitted)."""
        return {
            "dry_run": self.dry_run,
            "parallel_workers": self.parallel_workers,
            "timeout_seconds": self.timeout_seconds,
            "strict": self.strict,
            "connect_timeout_ms": self.connect_timeout_ms,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationConfig":
        """
        Create from dictionary representation.

        Raises:
            ConfigurationError: a numeric option is malformed or out of range
        """
        timeout = data.get("timeout_seconds")
        try:
            parallel_workers = int(data.get("parallel_workers", 16))
            timeout_seconds = float(timeout) if timeout not in (None, "") else None
            connect_timeout_ms = int(data.get("connect_timeout_ms", 10000))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid migration setting: {e}") from e

        if parallel_workers < 1:
            raise ConfigurationError(f"parallel_workers must be at least 1, got {parallel_workers}")
        if timeout_seconds is not None and timeout_seconds < 0:
            raise ConfigurationError(f"timeout_seconds cannot be negative, got {timeout_seconds}")

        return cls(
            mongodb_uri=data.get("mongodb_uri"),
            bots_mongodb_uri=data.get("bots_mongodb_uri"),
            mysql_uri=data.get("mysql_uri"),
            dry_run=data.get("dry_run", False),
            parallel_workers=parallel_workers,
            timeout_seconds=timeout_seconds,
            strict=data.get("strict", False),
            connect_timeout_ms=connect_timeout_ms,
        )

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "MigrationConfig":
        """
        Build configuration from environment variables.

        A .env file is loaded first when present; variables already set in
        the environment take precedence over it.

        Args:
            env_file: Explicit path to a .env file

        Returns:
            MigrationConfig populated from the environment
        """
        load_dotenv(env_file)

        return cls.from_dict({
            "mongodb_uri": os.getenv("MONGODB_URI"),
            "bots_mongodb_uri": os.getenv("BOTS_MONGODB_URI") or os.getenv("MONGODB_URI"),
            "mysql_uri": os.getenv("MYSQL_URI"),
            "dry_run": _env_bool(os.getenv("MIGRATION_DRY_RUN")),
            "parallel_workers": os.getenv("MIGRATION_WORKERS", "16"),
            "timeout_seconds": os.getenv("MIGRATION_TIMEOUT"),
            "strict": _env_bool(os.getenv("MIGRATION_STRICT")),
            "connect_timeout_ms": os.getenv("MIGRATION_CONNECT_TIMEOUT_MS", "10000"),
        })
