"""SQLite executor.

Uses the built-in sqlite3 module in autocommit mode: every statement
commits on its own unless ``begin_transaction`` opened an explicit
transaction. Suitable for:
- Development and testing
- Embedded, single-process applications
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from ormspine.errors import ExecutorError
from ormspine.logging import get_logger
from ormspine.protocols import Holder

logger = get_logger(__name__)

TABLE_EXISTS_QUERY = "SELECT name FROM sqlite_master WHERE type='table' AND name = ?"


class SQLiteCursor:
    """Cursor over a sqlite3 result set."""

    def __init__(self, cursor: sqlite3.Cursor, sql: str):
        self._cursor = cursor
        self._sql = sql
        self._row: tuple | None = None

    def next(self) -> bool:
        try:
            self._row = self._cursor.fetchone()
        except sqlite3.Error as e:
            raise ExecutorError(f"fetch failed: {e}", cause=e).with_context(sql=self._sql) from e
        return self._row is not None

    def read_into(self, *holders: Holder) -> None:
        if self._row is None:
            raise ExecutorError("no current row").with_context(sql=self._sql)
        if len(holders) != len(self._row):
            raise ExecutorError(
                f"row has {len(self._row)} columns, {len(holders)} holders given"
            ).with_context(sql=self._sql)
        for holder, raw in zip(holders, self._row):
            holder.scan(raw)

    def finish(self) -> None:
        self._cursor.close()


class SQLiteExecutor:
    """
    Executor over one sqlite3 connection.

    Example:
        executor = SQLiteExecutor("app.db")
        with executor.transaction():
            executor.execute("DELETE FROM `User`")
        executor.release()
    """

    def __init__(self, path: str = ":memory:", *, timeout: float = 5.0):
        self._path = path
        self._timeout = timeout
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Open the connection."""
        uri = self._path.startswith("file:")
        try:
            self._conn = sqlite3.connect(
                self._path,
                timeout=self._timeout,
                check_same_thread=False,
                isolation_level=None,
                uri=uri,
            )
            self._conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as e:
            raise ExecutorError(f"Failed to connect to SQLite: {e}", cause=e) from e
        logger.debug("sqlite_connected", path=self._path)

    def get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self.connect()
        return self._conn

    @property
    def in_transaction(self) -> bool:
        return self._conn is not None and self._conn.in_transaction

    # ── Statements ───────────────────────────────────────────────

    def _run(self, sql: str) -> sqlite3.Cursor:
        conn = self.get_connection()
        try:
            return conn.execute(sql)
        except sqlite3.Error as e:
            raise ExecutorError(str(e), cause=e).with_context(sql=sql) from e

    def query(self, sql: str) -> SQLiteCursor:
        return SQLiteCursor(self._run(sql), sql)

    def execute(self, sql: str) -> int:
        cursor = self._run(sql)
        try:
            return cursor.rowcount
        finally:
            cursor.close()

    def insert(self, sql: str) -> Any:
        cursor = self._run(sql)
        try:
            return cursor.lastrowid
        finally:
            cursor.close()

    def table_exists(self, name: str) -> bool:
        conn = self.get_connection()
        try:
            row = conn.execute(TABLE_EXISTS_QUERY, (name,)).fetchone()
        except sqlite3.Error as e:
            raise ExecutorError(str(e), cause=e).with_context(sql=TABLE_EXISTS_QUERY) from e
        return row is not None

    # ── Transactions ─────────────────────────────────────────────

    def begin_transaction(self) -> None:
        self._run("BEGIN")

    def commit_transaction(self) -> None:
        if self.in_transaction:
            self._run("COMMIT")

    def rollback_transaction(self) -> None:
        if self.in_transaction:
            self._run("ROLLBACK")

    @contextmanager
    def transaction(self) -> Iterator[SQLiteExecutor]:
        """Transaction context manager."""
        self.begin_transaction()
        try:
            yield self
            self.commit_transaction()
        except Exception:
            self.rollback_transaction()
            raise

    def release(self) -> None:
        """Close the connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None


__all__ = ["SQLiteCursor", "SQLiteExecutor"]
