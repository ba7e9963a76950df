import argparse
import asyncio
import logging
import sys
import time
from datetime import UTC, datetime
from pathlib import Path

from gtfsrt_validator.app import mcp
from gtfsrt_validator.data.config import get_validator_config
from gtfsrt_validator.models.responses import HealthResponse
from gtfsrt_validator.validation.engine import ValidationEngine
from gtfsrt_validator.validation.index import ReferenceIndex
from gtfsrt_validator.validation.rules import list_rules

logger = logging.getLogger(__name__)


@mcp.tool()
def health() -> HealthResponse:
    """Check if the validator server is running and healthy.

    Returns the server status, version, and current timestamp.
    """
    from gtfsrt_validator import __version__

    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
    )


async def run_ingest(gtfs_path: Path, db_path: Path) -> None:
    """Run GTFS ingestion."""
    from gtfsrt_validator.data.gtfs_loader import GTFSLoader

    loader = GTFSLoader(db_path)
    row_counts = await loader.ingest(gtfs_path)

    print("\nIngestion complete. Row counts:")
    for table, count in row_counts.items():
        print(f"  {table}: {count:,}")


async def run_validate(feed_path: Path, previous_path: Path | None, db_path: Path | None) -> int:
    """Validate a feed file and print the JSON report.

    Returns:
        Process exit code: 0 when the run completed, 1 when a validator could not run.
    """
    from gtfsrt_validator.data.gtfsrt_client import parse_feed_message

    feed = parse_feed_message(feed_path.read_bytes())
    previous_feed = parse_feed_message(previous_path.read_bytes()) if previous_path else None

    index = None
    if db_path is not None and db_path.exists():
        index = await ReferenceIndex.from_database(db_path)
    else:
        logger.warning("No static GTFS database, reference checks will not run")

    engine = ValidationEngine()
    report = engine.evaluate(int(time.time()), index, feed, previous_feed)
    if index is not None:
        static_report = engine.check_reference(index)
        report.groups.extend(static_report.groups)

    print(report.model_dump_json(indent=2))
    return 0 if report.complete else 1


def print_rules() -> None:
    for rule in list_rules():
        print(f"{rule.code}  {rule.severity.value:<7}  {rule.title}")


def main() -> None:
    # register MCP tools
    import gtfsrt_validator.tools.rule_tools  # noqa: F401
    import gtfsrt_validator.tools.validation_tools  # noqa: F401

    config = get_validator_config()
    parser = argparse.ArgumentParser(
        prog="gtfsrt-validator",
        description="GTFS-realtime feed validator",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    subparsers = parser.add_subparsers(dest="command")

    # ingest command
    ingest_parser = subparsers.add_parser(
        "ingest",
        help="Ingest static GTFS data into SQLite database",
    )
    ingest_parser.add_argument(
        "gtfs_path",
        type=Path,
        help="Path to GTFS directory or ZIP file",
    )
    ingest_parser.add_argument(
        "--db",
        type=Path,
        default=config.db_path,
        help="SQLite database path (default: data/gtfs.db or GTFSRT_DB_PATH env var)",
    )

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a GTFS-realtime protobuf file",
    )
    validate_parser.add_argument("feed_path", type=Path, help="Path to the feed (.pb)")
    validate_parser.add_argument(
        "--previous",
        type=Path,
        default=None,
        help="Previous iteration of the same feed, for header timestamp checks",
    )
    validate_parser.add_argument(
        "--db",
        type=Path,
        default=config.db_path,
        help="SQLite database path (default: data/gtfs.db or GTFSRT_DB_PATH env var)",
    )

    # rules command
    subparsers.add_parser("rules", help="List validation rules")

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "ingest":
        asyncio.run(run_ingest(args.gtfs_path, args.db))
    elif args.command == "validate":
        sys.exit(asyncio.run(run_validate(args.feed_path, args.previous, args.db)))
    elif args.command == "rules":
        print_rules()
    else:
        # Default: run MCP server
        mcp.run()


if __name__ == "__main__":
    main()
