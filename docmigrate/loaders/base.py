"""Base loader interface for destination stores."""

from abc import ABC, abstractmethod
import logging

from ..exceptions import IdempotencyCheckError, WriteError
from ..models.entities import CanonicalRecord
from ..models.record import Outcome, OutcomeKind

logger = logging.getLogger(__name__)


class BaseLoader(ABC):
    """
    Base class for data loaders.

    Loaders write canonical records into a destination store. Before each
    write the destination is checked for a record with the same natural
    key; matches are skipped, so re-running a migration adds nothing new.

    The check and the insert are two separate operations. Two workers
    holding the same natural key (two runs at once, or duplicate source
    documents in one run) can both pass the check; unique constraints on
    the destination are the only guard against a double insert. SQL tables
    declare them, and Mongo targets get a unique index before the run
    (see MongoLoader.ensure_unique_index).
    """

    def __init__(self, target: str, dry_run: bool = False):
        """
        Initialize the loader.

        Args:
            target: Collection or table receiving the records
            dry_run: If True, check and report but never write
        """
        self.target = target
        self.dry_run = dry_run

    @abstractmethod
    def exists(self, record: CanonicalRecord) -> bool:
        """
        Check whether the destination already holds this natural key.

        Raises:
            IdempotencyCheckError: the lookup itself failed
        """
        pass

    @abstractmethod
    def write(self, record: CanonicalRecord) -> None:
        """
        Write a single record.

        Raises:
            WriteError: the destination rejected the write
        """
        pass

    def load_record(self, record: CanonicalRecord, record_id: str) -> Outcome:
        """
        Load a single record unless the destination already has it.

        Args:
            record: Canonical record to load
            record_id: Identity of the source record it came from

        Returns:
            Outcome for the record; write failures never raise
        """
        key = record.natural_key

        try:
            if self.exists(record):
                logger.debug(f"Skipping {self.target} {key}: already migrated")
                return Outcome(record_id=record_id, kind=OutcomeKind.SKIPPED_EXISTING, natural_key=key)

            if self.dry_run:
                logger.debug(f"Dry run: would write {self.target} {key}")
            else:
                self.write(record)

        except IdempotencyCheckError as e:
            logger.error(f"Existence check failed for {self.target} {key} (source {record_id}): {e}")
            return Outcome(record_id=record_id, kind=OutcomeKind.WRITE_ERROR, natural_key=key, error=str(e))

        except WriteError as e:
            logger.error(f"Failed to write {self.target} {key} (source {record_id}): {e}")
            return Outcome(record_id=record_id, kind=OutcomeKind.WRITE_ERROR, natural_key=key, error=str(e))

        return Outcome(record_id=record_id, kind=OutcomeKind.TRANSFORMED, natural_key=key)
