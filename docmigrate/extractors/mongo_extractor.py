"""MongoDB source extractor."""

import logging
from typing import Any, Dict, Iterator, Mapping

import bson
from bson.codec_options import CodecOptions
from bson.errors import BSONError
from bson.raw_bson import RawBSONDocument
from pymongo.errors import PyMongoError

from .base import BaseExtractor
from ..models.record import SourceRecord
from ..models.migration import DataSource

logger = logging.getLogger(__name__)


class MongoExtractor(BaseExtractor):
    """
    Extractor for a MongoDB collection.

    The cursor hands back undecoded BSON so that each document is decoded
    on its own: one corrupt document becomes a decode failure for that
    position instead of killing the cursor.
    """

    RAW_OPTIONS = CodecOptions(document_class=RawBSONDocument)
    DECODE_OPTIONS = CodecOptions()

    def __init__(self, source: DataSource, client: Any):
        """
        Initialize the extractor.

        Args:
            source: Data source configuration
            client: Connected pymongo client (or anything indexable the same way)
        """
        super().__init__(source)
        self.client = client

    @property
    def collection(self):
        return self.client[self.source.database][self.source.collection]

    def _open_cursor(self) -> Any:
        collection = self.collection.with_options(codec_options=self.RAW_OPTIONS)
        return collection.find(self.source.filters, batch_size=self.source.batch_size)

    def _close_cursor(self, cursor: Any) -> None:
        cursor.close()

    def _iter_records(self, cursor: Any) -> Iterator[SourceRecord]:
        position = 0
        try:
            for raw in cursor:
                yield self.decode(raw, position)
                position += 1
        except (PyMongoError, BSONError) as e:
            # A failed or corrupt reply batch leaves the cursor unusable; end the stream and let the run drain
            self.stream_error = str(e)
            self.add_error(
                f"Cursor on {self.source.collection} failed after {position} documents: {e}",
                details={"position": position},
            )

    def decode(self, raw: Any, position: int) -> SourceRecord:
        """
        Decode one raw document.

        Args:
            raw: RawBSONDocument, BSON bytes, or an already decoded mapping
            position: Position of the document in the stream

        Returns:
            SourceRecord, with decode_error set if the payload was unreadable
        """
        try:
            data = self._to_dict(raw)
        except BSONError as e:
            record_id = f"#{position}"
            logger.error(f"Failed to decode {self.source.collection} document {record_id}: {e}")
            return self.create_record(record_id, {}, position, decode_error=str(e))

        record_id = data.get("_id")
        if record_id is None:
            record_id = f"#{position}"
        return self.create_record(record_id, data, position)

    def _to_dict(self, raw: Any) -> Dict[str, Any]:
        if isinstance(raw, RawBSONDocument):
            return bson.decode(raw.raw, codec_options=self.DECODE_OPTIONS)
        if isinstance(raw, (bytes, bytearray)):
            return bson.decode(bytes(raw), codec_options=self.DECODE_OPTIONS)
        if isinstance(raw, Mapping):
            return dict(raw)
        raise BSONError(f"Unsupported document payload: {type(raw).__name__}")
