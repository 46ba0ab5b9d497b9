"""MongoDB destination loader."""

import logging
from typing import Any

from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from .base import BaseLoader
from ..exceptions import IdempotencyCheckError, WriteError
from ..models.entities import CanonicalRecord

logger = logging.getLogger(__name__)


def document_key(record: CanonicalRecord) -> str:
    """Name of the natural key field as it appears in the stored document."""
    field = type(record).model_fields[record.natural_key_field]
    return field.alias or record.natural_key_field


class MongoLoader(BaseLoader):
    """Loader that inserts canonical records as documents, one insert per record."""

    def __init__(self, collection: Any, dry_run: bool = False):
        """
        Initialize the Mongo loader.

        Args:
            collection: pymongo Collection receiving the documents
            dry_run: If True, simulate without making changes
        """
        super().__init__(collection.name, dry_run)
        self.collection = collection

    def ensure_unique_index(self, key: str) -> bool:
        """
        Create a unique index on the natural key field.

        Two source documents resolving to the same key within one run can
        both pass the existence check; with the index the second insert is
        rejected as a write error instead of stored twice.

        Returns:
            True if the index exists after the call
        """
        try:
            self.collection.create_index([(key, ASCENDING)], unique=True)
        except PyMongoError as e:
            logger.warning(f"Could not create unique index on {self.target}.{key}, duplicates will not be rejected: {e}")
            return False
        return True

    def exists(self, record: CanonicalRecord) -> bool:
        query = {document_key(record): record.natural_key}
        try:
            return self.collection.find_one(query, projection={"_id": 1}) is not None
        except PyMongoError as e:
            raise IdempotencyCheckError(record.natural_key, f"Lookup on {self.target} failed: {e}", e) from e

    def write(self, record: CanonicalRecord) -> None:
        try:
            result = self.collection.insert_one(record.to_document())
        except PyMongoError as e:
            raise WriteError(record.natural_key, f"Insert into {self.target} failed: {e}", e) from e
        logger.debug(f"Inserted {self.target} {record.natural_key} as {result.inserted_id}")
