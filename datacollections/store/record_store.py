"""SQLite-backed store for loose sales records.

Each record is kept whole as a JSON document. The key and filter fields are
copied into indexed columns, and the measures into coerced REAL columns, so
filtering and totals run in SQL with the same zero-on-garbage rule that
consolidation uses.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Optional

from datacollections.database.connection import Database
from datacollections.models.records import MeasureTotals, RecordFilters
from datacollections.records.fields import (
    ARTICLE_FIELD,
    BRANCH_FIELD,
    CATEGORY_FIELD,
    CREATED_AT_FIELD,
    ID_FIELD,
    MEASURE_FIELDS,
    SUPPLIER_FIELD,
    UPDATED_AT_FIELD,
    VERSION_FIELD,
    coerce_number,
    strip_lifecycle,
)

logger = logging.getLogger(__name__)

TABLE_RECORDS = "sales_records"

DEFAULT_BATCH_SIZE = 1000

# Record field -> indexed column
FIELD_COLUMNS = {
    CATEGORY_FIELD: "category_short_name",
    BRANCH_FIELD: "branch",
    SUPPLIER_FIELD: "supplier_alias",
    ARTICLE_FIELD: "article_no",
}

MEASURE_COLUMNS = {
    "NetSlsQty": "net_sls_qty",
    "NetAmount": "net_amount",
    "NetSlsCostValue": "net_sls_cost_value",
    "SlsExtCostValue": "sls_ext_cost_value",
}

_INSERT_SQL = f"""
    INSERT INTO {TABLE_RECORDS} (
        category_short_name, branch, supplier_alias, article_no,
        net_sls_qty, net_amount, net_sls_cost_value, sls_ext_cost_value,
        document, version, created_at, updated_at
    )
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 0, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
"""

# Errors that reject a single row; anything else aborts the whole write
_ROW_ERRORS = (sqlite3.IntegrityError, sqlite3.InterfaceError, sqlite3.DataError, OverflowError)


@dataclass
class FailedRecord:
    """A record the store refused, identified by its position in the input."""

    index: int
    error: str


@dataclass
class InsertReport:
    inserted: int = 0
    batches: int = 0
    deleted: int = 0
    failed: list[FailedRecord] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return len(self.failed)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Value of type {type(value).__name__} is not JSON serializable")


def _column_value(value: Any) -> Any:
    """Scalar stored in an indexed column; containers go in as JSON text."""
    if value is None or isinstance(value, (str, int, float)):
        return value
    return json.dumps(value, sort_keys=True, default=str)


def _where_clause(filters: Optional[RecordFilters]) -> tuple[str, list[Any]]:
    if filters is None:
        return "", []

    clauses: list[str] = []
    params: list[Any] = []
    for field_name, values in filters.restrictions().items():
        placeholders = ",".join(["?"] * len(values))
        clauses.append(f"{FIELD_COLUMNS[field_name]} IN ({placeholders})")
        params.extend(values)

    if not clauses:
        return "", []
    return "WHERE " + " AND ".join(clauses), params


class RecordStore:
    """Batch insert, replace-all, filtered reads and totals over sales records.

    Every operation holds the store's lock, so a replace-all is never
    observed half done: readers see the old set or the new one.
    """

    def __init__(self, db: Database, batch_size: int = DEFAULT_BATCH_SIZE):
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self.db = db
        self.batch_size = batch_size
        self._lock = asyncio.Lock()

    # =========================================================================
    # Writes
    # =========================================================================

    async def insert_many(self, records: Iterable[Mapping[str, Any]]) -> InsertReport:
        """Insert records in unordered batches; rejected rows are reported."""
        report = InsertReport()
        async with self._lock:
            async with self.db.transaction():
                await self._insert_batches(list(records), report)
        return report

    async def replace_all(self, records: Iterable[Mapping[str, Any]]) -> InsertReport:
        """Delete every record and insert ``records`` as one transaction."""
        records = list(records)
        async with self._lock:
            async with self.db.transaction():
                return await self._replace(records)

    async def rewrite_all(
        self, transform: Callable[[list[dict[str, Any]]], Optional[list[Mapping[str, Any]]]]
    ) -> Optional[InsertReport]:
        """Replace the whole set with ``transform(current records)``.

        The read, the transform and the rewrite share one write transaction,
        so a writer on another connection (a CLI run against the server's
        file) waits for it instead of being overwritten by a stale snapshot.
        ``transform`` returns None to leave the store as it is.
        """
        async with self._lock:
            async with self.db.transaction():
                current = await self._find(None, 0, None)
                logger.info("Fetched %d records", len(current))
                replacement = transform(current)
                if replacement is None:
                    return None
                return await self._replace(list(replacement))

    async def _replace(self, records: list) -> InsertReport:
        report = InsertReport()
        report.deleted = await self.db.execute_write_no_commit(f"DELETE FROM {TABLE_RECORDS}")
        logger.info("Cleared %d existing records", report.deleted)
        await self._insert_batches(records, report)
        return report

    async def delete_all(self) -> int:
        async with self._lock:
            deleted = await self.db.execute_write(f"DELETE FROM {TABLE_RECORDS}")
        logger.info("Deleted %d records", deleted)
        return deleted

    async def _insert_batches(self, records: list, report: InsertReport) -> None:
        total = len(records)
        for offset in range(0, total, self.batch_size):
            batch = records[offset : offset + self.batch_size]
            await self._insert_batch(batch, offset, report)
            report.batches += 1
            logger.info("Inserted %d / %d records", report.inserted, total)

        if report.failed:
            logger.warning(
                "%d of %d records rejected by the store (positions: %s)",
                report.failed_count,
                total,
                ", ".join(str(f.index) for f in report.failed[:20]),
            )

    async def _insert_batch(self, batch: list, offset: int, report: InsertReport) -> None:
        rows: list[tuple] = []
        positions: list[int] = []
        for index, record in enumerate(batch, start=offset):
            try:
                rows.append(self._to_row(record))
                positions.append(index)
            except (TypeError, ValueError) as exc:
                report.failed.append(FailedRecord(index=index, error=str(exc)))

        if not rows:
            return

        try:
            async with self.db.savepoint("record_batch"):
                await self.db.executemany_no_commit(_INSERT_SQL, rows)
            report.inserted += len(rows)
            return
        except _ROW_ERRORS as exc:
            logger.warning(
                "Batch at offset %d rejected (%s); inserting row by row", offset, exc
            )

        for index, row in zip(positions, rows):
            try:
                async with self.db.savepoint("record_row"):
                    await self.db.execute_write_no_commit(_INSERT_SQL, row)
                report.inserted += 1
            except _ROW_ERRORS as exc:
                report.failed.append(FailedRecord(index=index, error=str(exc)))

    @staticmethod
    def _to_row(record: Mapping[str, Any]) -> tuple:
        if not isinstance(record, Mapping):
            raise TypeError(f"Record must be a mapping, got {type(record).__name__}")

        document = strip_lifecycle(record)
        payload = json.dumps(document, ensure_ascii=False, allow_nan=False, default=_json_default)
        return (
            *(_column_value(document.get(name)) for name in FIELD_COLUMNS),
            *(coerce_number(document.get(measure)) for measure in MEASURE_FIELDS),
            payload,
        )

    # =========================================================================
    # Reads
    # =========================================================================

    async def count(self, filters: Optional[RecordFilters] = None) -> int:
        async with self._lock:
            return await self._count(filters)

    async def find(
        self,
        filters: Optional[RecordFilters] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Matching records in insertion order, with lifecycle fields attached."""
        async with self._lock:
            return await self._find(filters, skip, limit)

    async def find_page(
        self, filters: Optional[RecordFilters], skip: int, limit: int
    ) -> tuple[int, list[dict[str, Any]]]:
        """Total match count and one slice, read from the same snapshot."""
        async with self._lock:
            total = await self._count(filters)
            records = await self._find(filters, skip, limit)
        return total, records

    async def _count(self, filters: Optional[RecordFilters]) -> int:
        where, params = _where_clause(filters)
        rows = await self.db.execute_read(
            f"SELECT COUNT(*) FROM {TABLE_RECORDS} {where}", params
        )
        return rows[0][0]

    async def _find(
        self, filters: Optional[RecordFilters], skip: int, limit: Optional[int]
    ) -> list[dict[str, Any]]:
        where, params = _where_clause(filters)
        params = [*params, -1 if limit is None else limit, max(skip, 0)]
        rows = await self.db.execute_read(
            f"""
            SELECT id, version, created_at, updated_at, document
            FROM {TABLE_RECORDS}
            {where}
            ORDER BY id
            LIMIT ? OFFSET ?
            """,
            params,
        )
        return [self._row_to_record(row) for row in rows]

    async def find_all(self) -> list[dict[str, Any]]:
        return await self.find()

    async def distinct(self, field_name: str) -> list[Any]:
        """Raw non-null distinct values of a key or filter field."""
        column = FIELD_COLUMNS.get(field_name)
        if column is None:
            raise ValueError(f"Field {field_name!r} is not an indexed record field")
        async with self._lock:
            rows = await self.db.execute_read(
                f"SELECT DISTINCT {column} FROM {TABLE_RECORDS} WHERE {column} IS NOT NULL"
            )
        return [row[0] for row in rows]

    async def totals(self, filters: Optional[RecordFilters] = None) -> MeasureTotals:
        where, params = _where_clause(filters)
        sums_sql = ", ".join(
            f"COALESCE(SUM({MEASURE_COLUMNS[measure]}), 0)" for measure in MEASURE_FIELDS
        )
        async with self._lock:
            rows = await self.db.execute_read(
                f"SELECT {sums_sql} FROM {TABLE_RECORDS} {where}", params
            )
        return MeasureTotals.from_sums(dict(zip(MEASURE_FIELDS, rows[0])))

    @staticmethod
    def _row_to_record(row) -> dict[str, Any]:
        record = json.loads(row[4])
        record[ID_FIELD] = row[0]
        record[VERSION_FIELD] = row[1]
        record[CREATED_AT_FIELD] = row[2]
        record[UPDATED_AT_FIELD] = row[3]
        return record
