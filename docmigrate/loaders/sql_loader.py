"""Relational destination loader built on SQLAlchemy Core."""

import logging
from typing import Optional

from sqlalchemy import MetaData, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .base import BaseLoader
from .sql_tables import metadata as default_metadata
from ..exceptions import IdempotencyCheckError, WriteError
from ..models.entities import CanonicalRecord

logger = logging.getLogger(__name__)


class SQLLoader(BaseLoader):
    """
    Loader that inserts canonical records as table rows.

    Each record becomes one parameterized INSERT, followed by one INSERT
    per nested child row (e.g. the content blocks of a blog post). A record
    and its children are written in a single transaction.
    """

    def __init__(
        self,
        engine: Engine,
        table_name: str,
        dry_run: bool = False,
        metadata: Optional[MetaData] = None
    ):
        """
        Initialize the SQL loader.

        Args:
            engine: SQLAlchemy engine for the destination database
            table_name: Table receiving the parent rows
            dry_run: If True, simulate without making changes
            metadata: Table definitions (defaults to the SocialFlux tables)
        """
        super().__init__(table_name, dry_run)
        self.engine = engine
        self.metadata = metadata or default_metadata
        self.table = self.metadata.tables[table_name]

    def exists(self, record: CanonicalRecord) -> bool:
        column = self.table.c[record.natural_key_field]
        query = select(column).where(column == record.natural_key).limit(1)
        try:
            with self.engine.connect() as conn:
                return conn.execute(query).first() is not None
        except SQLAlchemyError as e:
            raise IdempotencyCheckError(record.natural_key, f"Lookup on {self.target} failed: {e}", e) from e

    def write(self, record: CanonicalRecord) -> None:
        try:
            with self.engine.begin() as conn:
                conn.execute(insert(self.table), record.to_row())

                for child_name, rows in record.child_rows().items():
                    child = self.metadata.tables[child_name]
                    for row in rows:
                        conn.execute(insert(child), row)
        except SQLAlchemyError as e:
            raise WriteError(record.natural_key, f"Insert into {self.target} failed: {e}", e) from e

        logger.debug(f"Inserted {self.target} {record.natural_key}")
