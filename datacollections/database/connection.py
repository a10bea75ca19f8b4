"""Database connection utilities."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Sequence
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from datacollections.exceptions import StoreConnectionError


class Database:
    """Async SQLite database wrapper."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
        try:
            self._connection = await aiosqlite.connect(self.db_path)
            await self._init_schema()
        except sqlite3.Error as exc:
            raise StoreConnectionError(f"Cannot open record store {self.db_path}: {exc}") from exc

    async def _init_schema(self) -> None:
        schema_path = Path(__file__).parent / "schema.sql"
        schema = schema_path.read_text(encoding="utf-8")
        await self._connection.executescript(schema)
        await self._connection.commit()

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise StoreConnectionError("Record store is not connected")
        return self._connection

    async def execute_read(self, query: str, params=None):
        """Execute a read query and return all results."""
        async with self.connection.execute(query, params or []) as cursor:
            return await cursor.fetchall()

    async def execute_write(self, query: str, params=None) -> int:
        """Execute a write and commit; returns the affected row count."""
        async with self.connection.execute(query, params or []) as cursor:
            rowcount = cursor.rowcount
        await self.connection.commit()
        return rowcount

    # =========================================================================
    # Transaction support for atomic batch operations
    # =========================================================================

    @asynccontextmanager
    async def transaction(self):
        """Context manager for explicit transaction control.

        All writes inside the block succeed together or all roll back. The
        write lock is taken at BEGIN, so reads inside the block cannot be
        invalidated by another connection committing before the writes.

        Usage:
            async with db.transaction():
                await db.execute_write_no_commit(...)
                await db.executemany_no_commit(...)
            # Commits on exit, rolls back on exception
        """
        connection = self.connection
        await connection.execute("BEGIN IMMEDIATE")
        try:
            yield
            await connection.commit()
        except BaseException:
            await connection.rollback()
            raise

    @asynccontextmanager
    async def savepoint(self, name: str):
        """Nested rollback point inside an open transaction.

        On error only the writes since the savepoint are undone; the
        enclosing transaction stays open.
        """
        connection = self.connection
        await connection.execute(f"SAVEPOINT {name}")
        try:
            yield
        except Exception:
            await connection.execute(f"ROLLBACK TO SAVEPOINT {name}")
            await connection.execute(f"RELEASE SAVEPOINT {name}")
            raise
        await connection.execute(f"RELEASE SAVEPOINT {name}")

    async def execute_write_no_commit(self, query: str, params=None) -> int:
        """Execute write without immediate commit (use within transaction)."""
        async with self.connection.execute(query, params or []) as cursor:
            return cursor.rowcount

    async def executemany_no_commit(self, query: str, params: Iterable[Sequence]) -> None:
        """Execute many without immediate commit (use within transaction)."""
        await self.connection.executemany(query, params)

    async def close(self) -> None:
        if self._connection:
            await self._connection.close()
            self._connection = None
