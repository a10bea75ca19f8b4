"""Offline maintenance runs: consolidation, upload replace and clear.

All three rewrite the whole record table, so they share one single-flight
guard; a second run while one is active fails fast instead of queueing.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from datacollections.consolidation.consolidator import ConsolidationPlan, consolidate
from datacollections.database.connection import Database
from datacollections.exceptions import DataCollectionsError, EmptyUploadError, MaintenanceError
from datacollections.maintenance.progress import MaintenanceProgress
from datacollections.store.record_store import FailedRecord, InsertReport, RecordStore

logger = logging.getLogger(__name__)

OPERATION_CONSOLIDATE = "consolidate"
OPERATION_IMPORT = "import"
OPERATION_CLEAR = "clear"


@dataclass
class ConsolidationResult:
    """Summary of a consolidation run."""

    status: str
    original_count: int
    consolidated_count: int
    duplicates_removed: int
    started_at: datetime
    finished_at: datetime
    inserted_count: int = 0
    space_saved_percent: float = 0.0
    failed_records: list[FailedRecord] = field(default_factory=list)


@dataclass
class ImportResult:
    """Summary of an upload-replace run."""

    status: str
    source: str
    received_count: int
    inserted_count: int
    deleted_count: int
    started_at: datetime
    finished_at: datetime
    failed_records: list[FailedRecord] = field(default_factory=list)


def _status_for(report: InsertReport) -> str:
    return "partial" if report.failed else "success"


class MaintenanceService:
    """Coordinate whole-table rewrites of the record store."""

    def __init__(self, store: RecordStore, progress: MaintenanceProgress, db: Database):
        self.store = store
        self.progress = progress
        self.db = db
        self._lock = asyncio.Lock()
        self._running = False

    def is_running(self) -> bool:
        return self._running or self._lock.locked()

    def _ensure_idle(self) -> None:
        if self.is_running():
            raise MaintenanceError("Maintenance task already running")

    async def run_consolidation(self) -> ConsolidationResult:
        """Merge duplicate key groups and write the merged set back."""
        self._ensure_idle()

        async with self._lock:
            self._running = True
            started_at = datetime.now()
            original_count = 0
            try:
                self.progress.start(OPERATION_CONSOLIDATE)
                self.progress.update("fetch", "Fetching all records")
                plan: Optional[ConsolidationPlan] = None

                def merge(records: list[dict[str, Any]]) -> Optional[list[dict[str, Any]]]:
                    nonlocal plan, original_count
                    original_count = len(records)
                    self.progress.update(
                        "group", "Grouping records", original_count=original_count
                    )
                    plan = consolidate(records)
                    if plan.is_noop:
                        return None
                    logger.info(
                        "Consolidated %d duplicate records; %d records remain (was %d)",
                        plan.duplicates_removed, plan.consolidated_count, plan.original_count,
                    )
                    self.progress.update(
                        "write",
                        f"Writing {plan.consolidated_count} consolidated records",
                        duplicates_removed=plan.duplicates_removed,
                    )
                    return plan.records

                report = await self.store.rewrite_all(merge)

                if report is None:
                    message = (
                        "No data found, nothing to consolidate"
                        if not original_count
                        else "No duplicates found, data is already consolidated"
                    )
                    logger.info(message)
                    result = ConsolidationResult(
                        status="noop",
                        original_count=original_count,
                        consolidated_count=original_count,
                        duplicates_removed=0,
                        started_at=started_at,
                        finished_at=datetime.now(),
                    )
                    self.progress.finish_success(message, status="noop")
                    await self._record_history(
                        OPERATION_CONSOLIDATE, result.status, started_at, result.finished_at,
                        original_count, original_count, 0,
                    )
                    return result

                result = ConsolidationResult(
                    status=_status_for(report),
                    original_count=original_count,
                    consolidated_count=plan.consolidated_count,
                    duplicates_removed=plan.duplicates_removed,
                    inserted_count=report.inserted,
                    space_saved_percent=plan.space_saved_percent,
                    failed_records=report.failed,
                    started_at=started_at,
                    finished_at=datetime.now(),
                )
                logger.info(
                    "Consolidation finished: original=%d consolidated=%d merged=%d "
                    "space saved=%.2f%%",
                    result.original_count, result.consolidated_count,
                    result.duplicates_removed, result.space_saved_percent,
                )
                self.progress.update("finalize", "Finalizing", inserted_count=report.inserted)
                self.progress.finish_success("Consolidation completed", status=result.status)
                await self._record_history(
                    OPERATION_CONSOLIDATE, result.status, started_at, result.finished_at,
                    original_count, report.inserted, report.failed_count,
                )
                return result

            except Exception as exc:
                self.progress.finish_error(str(exc))
                await self._record_history(
                    OPERATION_CONSOLIDATE, "error", started_at, datetime.now(),
                    original_count, 0, 0, error_message=str(exc),
                )
                raise
            finally:
                self._running = False

    async def replace_from_records(
        self, records: list[Mapping[str, Any]], source: str = "upload"
    ) -> ImportResult:
        """Replace the whole record set with freshly ingested rows."""
        if not records:
            raise EmptyUploadError(f"{source} contains no records")
        self._ensure_idle()

        async with self._lock:
            self._running = True
            started_at = datetime.now()
            try:
                self.progress.start(OPERATION_IMPORT)
                self.progress.update(
                    "write", f"Replacing data with {len(records)} records from {source}"
                )
                report = await self.store.replace_all(records)
                result = ImportResult(
                    status=_status_for(report),
                    source=source,
                    received_count=len(records),
                    inserted_count=report.inserted,
                    deleted_count=report.deleted,
                    failed_records=report.failed,
                    started_at=started_at,
                    finished_at=datetime.now(),
                )
                logger.info(
                    "Imported %d / %d records from %s (%d replaced)",
                    report.inserted, len(records), source, report.deleted,
                )
                self.progress.finish_success(
                    f"Imported {report.inserted} records", status=result.status
                )
                await self._record_history(
                    OPERATION_IMPORT, result.status, started_at, result.finished_at,
                    report.deleted, report.inserted, report.failed_count,
                )
                return result

            except Exception as exc:
                self.progress.finish_error(str(exc))
                await self._record_history(
                    OPERATION_IMPORT, "error", started_at, datetime.now(),
                    0, 0, 0, error_message=str(exc),
                )
                raise
            finally:
                self._running = False

    async def clear(self) -> int:
        """Delete every record."""
        self._ensure_idle()

        async with self._lock:
            self._running = True
            started_at = datetime.now()
            try:
                deleted = await self.store.delete_all()
                await self._record_history(
                    OPERATION_CLEAR, "success", started_at, datetime.now(), deleted, 0, 0
                )
                return deleted
            finally:
                self._running = False

    async def history(self, limit: int = 10) -> list[dict[str, Any]]:
        rows = await self.db.execute_read(
            """
            SELECT operation, started_at, finished_at, status,
                   original_count, result_count, failed_count, error_message
            FROM maintenance_history
            ORDER BY id DESC
            LIMIT ?
            """,
            [limit],
        )
        return [
            {
                "operation": row[0],
                "started_at": row[1],
                "finished_at": row[2],
                "status": row[3],
                "original_count": row[4],
                "result_count": row[5],
                "failed_count": row[6],
                "error_message": row[7],
            }
            for row in rows
        ]

    async def _record_history(
        self,
        operation: str,
        status: str,
        started_at: datetime,
        finished_at: datetime,
        original_count: int,
        result_count: int,
        failed_count: int,
        error_message: Optional[str] = None,
    ) -> None:
        try:
            await self.db.execute_write(
                """
                INSERT INTO maintenance_history (
                    operation, started_at, finished_at, status,
                    original_count, result_count, failed_count, error_message
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    operation,
                    started_at.isoformat(),
                    finished_at.isoformat(),
                    status,
                    original_count,
                    result_count,
                    failed_count,
                    error_message,
                ],
            )
        except (DataCollectionsError, sqlite3.Error):
            logger.exception("Could not record %s run in maintenance history", operation)
