"""Migration orchestrator - drives records from source to destination."""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, List, Optional

from .exceptions import DecodeError, TransformError
from .extractors.base import BaseExtractor
from .extractors.mongo_extractor import MongoExtractor
from .loaders.base import BaseLoader
from .loaders.mongo_loader import MongoLoader
from .loaders.sql_loader import SQLLoader
from .models.migration import MigrationConfig, MigrationJob, StoreType
from .models.record import Outcome, OutcomeKind, RunState, RunSummary, SourceRecord
from .services.transformer import TransformEngine

logger = logging.getLogger(__name__)


class OutcomeCollector:
    """Thread-safe sink for per-record outcomes."""

    def __init__(self, summary: RunSummary):
        self.summary = summary
        self.failures: List[Outcome] = []
        self._lock = threading.Lock()

    def add(self, outcome: Outcome) -> None:
        with self._lock:
            self.summary.counts[outcome.kind] += 1
            self.summary.processed += 1
            if not outcome.success:
                self.failures.append(outcome)


class MigrationOrchestrator:
    """
    Runs migration jobs end to end.

    Handles:
    - Opening the source cursor for each job
    - Dispatching each record to a bounded worker pool
    - Decode, transform, existence check and write per record
    - Collecting outcomes and reporting a summary per job

    Store handles are passed in by the caller, which also owns closing them.
    """

    def __init__(
        self,
        config: MigrationConfig,
        source_client: Any = None,
        sql_engine: Any = None,
        transformer: Optional[TransformEngine] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Migration configuration
            source_client: pymongo client for the source (and Mongo destinations)
            sql_engine: SQLAlchemy engine for relational destinations
            transformer: Transform engine (defaults to the built-in transforms)
        """
        if config.parallel_workers < 1:
            raise ValueError(f"parallel_workers must be at least 1, got {config.parallel_workers}")

        self.config = config
        self.source_client = source_client
        self.sql_engine = sql_engine
        self.transformer = transformer or TransformEngine()

    def run_migration(self, jobs: List[MigrationJob]) -> List[RunSummary]:
        """
        Run several jobs one after another.

        Returns:
            One RunSummary per job, in the order the jobs ran
        """
        summaries = []
        for job in jobs:
            logger.info(f"=== {job.name.upper()}: {job.description} ===")
            summaries.append(self.run_job(job))
        return summaries

    def run_job(self, job: MigrationJob) -> RunSummary:
        """Run a single job against the configured stores."""
        extractor = self._create_extractor(job)
        loader = self._create_loader(job)
        return self.execute(job.name, extractor, loader)

    def execute(self, name: str, extractor: BaseExtractor, loader: BaseLoader) -> RunSummary:
        """
        Push every record from an extractor through transform and load.

        Reading stays on the calling thread. Each record is handed to a pool
        worker, and at most `parallel_workers` records are in flight at any
        moment: a slot is taken before the next record is pulled and given
        back when that record's outcome is collected.

        Args:
            name: Job name used in logs and the summary
            extractor: Source of records
            loader: Destination for canonical records

        Returns:
            Finalized RunSummary
        """
        workers = self.config.parallel_workers
        summary = RunSummary(job=name, dry_run=self.config.dry_run)
        collector = OutcomeCollector(summary)
        slots = threading.BoundedSemaphore(workers)

        summary.started_at = datetime.utcnow()
        started = time.monotonic()

        with extractor.open() as records:
            summary.state = RunState.RUNNING
            timeout = self.config.timeout_seconds
            deadline = started + timeout if timeout is not None else None

            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"migrate-{name}") as pool:
                while True:
                    if not self._acquire_slot(slots, deadline):
                        summary.deadline_reached = True
                        logger.warning(f"{name}: deadline reached, no new records will be admitted")
                        break

                    record = next(records, None)
                    if record is None:
                        slots.release()
                        break

                    try:
                        pool.submit(self._run_pipeline, record, loader, collector, slots)
                    except RuntimeError:
                        slots.release()
                        raise

                summary.state = RunState.DRAINING
                logger.debug(f"{name}: draining in-flight records")

        summary.source_error = extractor.stream_error
        summary.completed_at = datetime.utcnow()
        summary.elapsed_seconds = time.monotonic() - started
        summary.state = RunState.DONE

        logger.info(
            f"{name}: {summary.count(OutcomeKind.TRANSFORMED)} written, "
            f"{summary.count(OutcomeKind.SKIPPED_EXISTING)} already present, "
            f"{summary.failed} failed"
        )
        if collector.failures:
            failed_ids = ", ".join(o.natural_key or o.record_id for o in collector.failures)
            logger.warning(f"{name}: records to replay: {failed_ids}")
        return summary

    def _acquire_slot(self, slots: threading.BoundedSemaphore, deadline: Optional[float]) -> bool:
        if deadline is None:
            slots.acquire()
            return True
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return False
        return slots.acquire(timeout=remaining)

    def _run_pipeline(
        self,
        record: SourceRecord,
        loader: BaseLoader,
        collector: OutcomeCollector,
        slots: threading.BoundedSemaphore
    ) -> None:
        try:
            collector.add(self.process_record(record, loader))
        finally:
            slots.release()

    def process_record(self, record: SourceRecord, loader: BaseLoader) -> Outcome:
        """
        Decode, transform and load one record.

        Every failure is turned into an Outcome here; nothing raised for a
        single record escapes to the run. Unexpected errors before the load
        count as transform errors, and during the load as write errors.
        """
        try:
            canonical = self.transformer.transform_record(record)
        except DecodeError as e:
            logger.error(f"Decode error for {record.source_entity} {record.id}: {e}")
            return Outcome(record_id=record.id, kind=OutcomeKind.DECODE_ERROR, error=str(e))
        except TransformError as e:
            logger.error(f"Transform error for {record.source_entity} {record.id}: {e}")
            return Outcome(record_id=record.id, kind=OutcomeKind.TRANSFORM_ERROR, error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error transforming {record.source_entity} {record.id}: {e}")
            return Outcome(record_id=record.id, kind=OutcomeKind.TRANSFORM_ERROR, error=str(e))

        try:
            return loader.load_record(canonical, record.id)
        except Exception as e:
            # Loader bugs still count against the record, not the run
            logger.exception(f"Unexpected error loading {record.source_entity} {canonical.natural_key}: {e}")
            return Outcome(
                record_id=record.id,
                kind=OutcomeKind.WRITE_ERROR,
                natural_key=canonical.natural_key,
                error=str(e),
            )

    def _create_extractor(self, job: MigrationJob) -> BaseExtractor:
        """Create an extractor for the job's source."""
        if self.source_client is None:
            raise ValueError(f"No source client configured for job {job.name}")
        return MongoExtractor(job.source, self.source_client)

    def _create_loader(self, job: MigrationJob) -> BaseLoader:
        """Create a loader for the job's destination."""
        target = job.target

        if target.type == StoreType.MONGO:
            database = target.database or job.source.database
            collection = self.source_client[database][target.name]
            loader = MongoLoader(collection, dry_run=self.config.dry_run)
            if target.unique_key and not self.config.dry_run:
                loader.ensure_unique_index(target.unique_key)
            return loader
        elif target.type == StoreType.SQL:
            if self.sql_engine is None:
                raise ValueError(f"No SQL engine configured for job {job.name}")
            return SQLLoader(self.sql_engine, target.name, dry_run=self.config.dry_run)
        else:
            raise ValueError(f"Unsupported target type: {target.type}")
