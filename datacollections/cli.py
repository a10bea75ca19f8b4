"""
Offline maintenance commands.

Usage:
    datacollections consolidate
    datacollections import data/sales.csv
    datacollections clear
    python -m datacollections.cli consolidate --db data/other.db

Exit status is 0 when the run completed (including "nothing to do" and
partially rejected inserts) and 1 when it aborted.
"""

import argparse
import asyncio
import logging
import sqlite3
import sys
from pathlib import Path
from typing import Optional, Sequence

from datacollections.config import Config
from datacollections.database.connection import Database
from datacollections.exceptions import DataCollectionsError
from datacollections.ingest.readers import read_path
from datacollections.logging_config import setup_logging
from datacollections.maintenance.progress import MaintenanceProgress
from datacollections.maintenance.service import MaintenanceService
from datacollections.store.record_store import FailedRecord, RecordStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="datacollections", description="DataCollections maintenance tasks"
    )
    parser.add_argument("--db", type=Path, help="Record store file (overrides config)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("consolidate", help="Merge duplicate category/branch/supplier/article rows")
    import_cmd = commands.add_parser("import", help="Replace all records with a CSV or .xlsx file")
    import_cmd.add_argument("path", type=Path, help="File to import")
    commands.add_parser("clear", help="Delete all records")
    return parser


def _log_failures(failed: list[FailedRecord]) -> None:
    for failure in failed:
        logger.warning("Record %d rejected: %s", failure.index, failure.error)


async def run_command(args: argparse.Namespace, config: Config) -> int:
    db = Database(args.db or config.db_path)
    try:
        await db.connect()
        store = RecordStore(db, batch_size=config.settings.performance.batch_size)
        progress = MaintenanceProgress(config.reports_dir / "maintenance_status.json")
        service = MaintenanceService(store=store, progress=progress, db=db)

        if args.command == "consolidate":
            result = await service.run_consolidation()
            _log_failures(result.failed_records)
            logger.info(
                "Summary: original=%d consolidated=%d merged=%d space saved=%.2f%% status=%s",
                result.original_count,
                result.consolidated_count,
                result.duplicates_removed,
                result.space_saved_percent,
                result.status,
            )
        elif args.command == "import":
            records = read_path(args.path)
            logger.info("File read successfully. Total records: %d", len(records))
            result = await service.replace_from_records(records, source=str(args.path))
            _log_failures(result.failed_records)
            logger.info(
                "Imported %d / %d records (status=%s)",
                result.inserted_count, result.received_count, result.status,
            )
        elif args.command == "clear":
            deleted = await service.clear()
            logger.info("Cleared %d records", deleted)
        return 0

    except (DataCollectionsError, sqlite3.Error) as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1
    finally:
        await db.close()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = Config.load()
    setup_logging(config.store, verbose=args.verbose)
    if args.db is None:
        config.db_path.parent.mkdir(parents=True, exist_ok=True)
    return asyncio.run(run_command(args, config))


if __name__ == "__main__":
    sys.exit(main())
