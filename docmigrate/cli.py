"""Command line entry point for the migration tools."""

import argparse
import logging
import sys
from contextlib import ExitStack
from typing import Dict, List, Optional

from .connections import connect_mongo, connect_sql
from .exceptions import ConfigurationError, StoreConnectionError
from .jobs import SERVICES, get_jobs
from .models.migration import MigrationConfig, StoreType
from .models.record import OutcomeKind, RunSummary
from .orchestrator import MigrationOrchestrator

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONNECTION_ERROR = 1
EXIT_CONFIG_ERROR = 1
EXIT_RECORD_FAILURES = 2

# Short names kept from the old command menu
SERVICE_ALIASES = {
    "conv": "bots",
}


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def non_negative_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number, got {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"cannot be negative, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docmigrate",
        description="One-shot migrations from legacy MongoDB collections",
    )
    parser.add_argument(
        "service",
        nargs="?",
        default="all",
        choices=sorted(SERVICES) + sorted(SERVICE_ALIASES) + ["all"],
        help="Service to migrate (default: all)",
    )
    parser.add_argument("--workers", type=positive_int, help="Max records processed concurrently")
    parser.add_argument("--timeout", type=non_negative_float, help="Stop admitting new records after this many seconds")
    parser.add_argument("--strict", action="store_true", default=None,
                        help="Exit non-zero if any record failed")
    parser.add_argument("--dry-run", action="store_true", default=None,
                        help="Transform and check, but write nothing")
    parser.add_argument("--env-file", help="Path to a .env file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    return parser


def resolve_services(selector: str) -> List[str]:
    if selector == "all":
        return list(SERVICES)
    return [SERVICE_ALIASES.get(selector, selector)]


def build_config(args: argparse.Namespace) -> MigrationConfig:
    """Environment configuration with command line overrides applied."""
    config = MigrationConfig.from_env(args.env_file)

    if args.workers is not None:
        config.parallel_workers = args.workers
    if args.timeout is not None:
        config.timeout_seconds = args.timeout
    if args.strict:
        config.strict = True
    if args.dry_run:
        config.dry_run = True

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Set up logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        config = build_config(args)
    except ConfigurationError as e:
        logger.error(str(e))
        return EXIT_CONFIG_ERROR

    logger.debug(f"Configuration: {config.to_dict()}")
    services = resolve_services(args.service)

    try:
        summaries = run_services(services, config)
    except StoreConnectionError as e:
        logger.error(str(e))
        return EXIT_CONNECTION_ERROR

    if config.strict and any(s.has_failures for s in summaries):
        logger.error("Strict mode: some records failed, see the log for details")
        return EXIT_RECORD_FAILURES

    return EXIT_OK


def run_services(services: List[str], config: MigrationConfig) -> List[RunSummary]:
    """
    Connect every store the services need, then run their jobs.

    All connections are opened before any job starts, so an unreachable
    store aborts the invocation without migrating anything.
    """
    summaries = []

    with ExitStack() as stack:
        orchestrators: Dict[str, MigrationOrchestrator] = {}
        for service in services:
            source_uri = config.bots_mongodb_uri if service == "bots" else config.mongodb_uri
            client = connect_mongo(source_uri, config.connect_timeout_ms)
            stack.callback(client.close)

            engine = None
            if any(job.target.type == StoreType.SQL for job in get_jobs(service)):
                engine = connect_sql(config.mysql_uri)
                stack.callback(engine.dispose)

            orchestrators[service] = MigrationOrchestrator(config, source_client=client, sql_engine=engine)

        for service in services:
            orchestrator = orchestrators[service]
            for summary in orchestrator.run_migration(get_jobs(service)):
                print_summary(summary)
                summaries.append(summary)

    return summaries


def print_summary(summary: RunSummary) -> None:
    """Print the completion lines for one job."""
    print(summary.summary_line())
    print(
        f"[{summary.job}] written={summary.count(OutcomeKind.TRANSFORMED)} "
        f"skipped={summary.count(OutcomeKind.SKIPPED_EXISTING)} "
        f"decode_errors={summary.count(OutcomeKind.DECODE_ERROR)} "
        f"transform_errors={summary.count(OutcomeKind.TRANSFORM_ERROR)} "
        f"write_errors={summary.count(OutcomeKind.WRITE_ERROR)}"
        + (" (dry run)" if summary.dry_run else "")
    )
    if summary.deadline_reached:
        print(f"[{summary.job}] Deadline reached before the source was exhausted")
    if summary.source_error:
        print(f"[{summary.job}] Source cursor failed: {summary.source_error}")


if __name__ == "__main__":
    sys.exit(main())
