"""Base extractor interface."""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional
from datetime import datetime
import logging

from ..models.record import SourceRecord
from ..models.migration import DataSource

logger = logging.getLogger(__name__)


class BaseExtractor(ABC):
    """
    Base class for all data extractors.

    Extractors hold one open cursor against a source collection and turn
    what it yields into SourceRecord objects, one at a time. Iteration is
    forward-only and single-threaded.
    """

    def __init__(self, source: DataSource):
        """
        Initialize the extractor.

        Args:
            source: Data source configuration
        """
        self.source = source
        self._extracted_count = 0
        self._errors: List[Dict[str, Any]] = []
        self.stream_error: Optional[str] = None  # Set when the cursor fails mid-stream

    @abstractmethod
    def _open_cursor(self) -> Any:
        """Open the underlying cursor."""
        pass

    @abstractmethod
    def _close_cursor(self, cursor: Any) -> None:
        """Release the underlying cursor."""
        pass

    @abstractmethod
    def _iter_records(self, cursor: Any) -> Iterator[SourceRecord]:
        """
        Turn cursor output into records.

        A document that cannot be decoded must still be yielded, as a
        SourceRecord with decode_error set, so it is counted downstream.
        """
        pass

    @contextmanager
    def open(self) -> Iterator[Iterator[SourceRecord]]:
        """
        Open the source cursor for the duration of a with-block.

        The cursor is closed on every exit path, including a caller that
        stops iterating early.

        Yields:
            Lazy iterator of SourceRecord objects
        """
        cursor = self._open_cursor()
        logger.info(f"Opened cursor on {self.source.database}.{self.source.collection}")
        try:
            yield self._counted(self._iter_records(cursor))
        finally:
            self._close_cursor(cursor)
            logger.debug(f"Closed cursor on {self.source.database}.{self.source.collection}")

    def _counted(self, records: Iterator[SourceRecord]) -> Iterator[SourceRecord]:
        for record in records:
            self._extracted_count += 1
            yield record

    @property
    def extracted_count(self) -> int:
        return self._extracted_count

    @property
    def errors(self) -> List[Dict[str, Any]]:
        return self._errors.copy()

    def create_record(
        self,
        id: str,
        data: Dict[str, Any],
        position: int,
        decode_error: Optional[str] = None
    ) -> SourceRecord:
        """Create a SourceRecord from extracted data."""
        return SourceRecord(
            id=str(id),
            source_entity=self.source.entity,
            data=data,
            position=position,
            decode_error=decode_error,
        )

    def add_error(
        self,
        message: str,
        record_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add an error to the extraction."""
        error = {
            "message": message,
            "record_id": record_id,
            "timestamp": datetime.utcnow().isoformat(),
        }
        if details:
            error.update(details)
        self._errors.append(error)
        logger.error(f"Extraction error: {message}")
