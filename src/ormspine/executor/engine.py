"""SQLAlchemy executor.

``create_orm_engine`` builds an engine with SQLite-friendly defaults;
``EngineExecutor`` drives one ``Connection`` from it. Statements arrive as
finished text, so they go through ``exec_driver_sql`` untouched (no bind
parameter parsing of literal text).

Outside an explicit transaction every statement is committed right away,
matching the autocommit behaviour of :class:`SQLiteExecutor`.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event, inspect
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from ormspine.errors import ExecutorError
from ormspine.logging import get_logger
from ormspine.protocols import Holder

logger = get_logger(__name__)


def create_orm_engine(url: str, *, echo: bool = False, **kwargs: Any) -> Engine:
    """Create a SQLAlchemy engine.

    Parameters
    ----------
    url:
        SQLAlchemy database URL (``sqlite:///app.db``, ``sqlite://``).
    echo:
        If ``True``, log all SQL through SQLAlchemy's engine logger.
    **kwargs:
        Extra arguments forwarded to ``sqlalchemy.create_engine``.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = _sa_create_engine(url, echo=echo, **kwargs)
        in_memory = url in ("sqlite://", "sqlite:///:memory:") or ":memory:" in url

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
            cursor = dbapi_connection.cursor()
            if not in_memory:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return _sa_create_engine(url, echo=echo, **kwargs)


class EngineCursor:
    """Cursor over rows fetched eagerly from a SQLAlchemy result."""

    def __init__(self, rows: list[tuple[Any, ...]], sql: str):
        self._rows = rows
        self._sql = sql
        self._index = -1

    def next(self) -> bool:
        self._index += 1
        return self._index < len(self._rows)

    def read_into(self, *holders: Holder) -> None:
        if not 0 <= self._index < len(self._rows):
            raise ExecutorError("no current row").with_context(sql=self._sql)
        row = self._rows[self._index]
        if len(holders) != len(row):
            raise ExecutorError(
                f"row has {len(row)} columns, {len(holders)} holders given"
            ).with_context(sql=self._sql)
        for holder, raw in zip(holders, row):
            holder.scan(raw)

    def finish(self) -> None:
        self._rows = []


class EngineExecutor:
    """
    Executor over one SQLAlchemy connection.

    Example:
        executor = EngineExecutor(create_orm_engine("sqlite:///app.db"))
        executor.begin_transaction()
        executor.execute("DELETE FROM `User`")
        executor.commit_transaction()
        executor.release()
    """

    def __init__(self, engine: Engine):
        self._engine = engine
        self._conn: Connection | None = None
        self._explicit = False

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_connection(self) -> Connection:
        if self._conn is None:
            try:
                self._conn = self._engine.connect()
            except SQLAlchemyError as e:
                raise ExecutorError(f"Failed to connect: {e}", cause=e) from e
            logger.debug("engine_connected", url=self._engine.url.render_as_string(hide_password=True))
        return self._conn

    @property
    def in_transaction(self) -> bool:
        return self._explicit

    def _run(self, sql: str) -> Any:
        conn = self.get_connection()
        try:
            return conn.exec_driver_sql(sql)
        except SQLAlchemyError as e:
            if not self._explicit:
                conn.rollback()
            raise ExecutorError(str(getattr(e, "orig", None) or e), cause=e).with_context(sql=sql) from e

    def _autocommit(self) -> None:
        if not self._explicit:
            self._conn.commit()

    # ── Statements ───────────────────────────────────────────────

    def query(self, sql: str) -> EngineCursor:
        result = self._run(sql)
        rows = [tuple(row) for row in result.fetchall()]
        self._autocommit()
        return EngineCursor(rows, sql)

    def execute(self, sql: str) -> int:
        result = self._run(sql)
        count = result.rowcount
        self._autocommit()
        return count

    def insert(self, sql: str) -> Any:
        result = self._run(sql)
        key = result.lastrowid
        self._autocommit()
        return key

    def table_exists(self, name: str) -> bool:
        conn = self.get_connection()
        try:
            return inspect(conn).has_table(name)
        except SQLAlchemyError as e:
            raise ExecutorError(str(e), cause=e) from e

    # ── Transactions ─────────────────────────────────────────────

    def begin_transaction(self) -> None:
        conn = self.get_connection()
        if conn.in_transaction():
            conn.commit()
        conn.begin()
        self._explicit = True

    def commit_transaction(self) -> None:
        if self._conn is not None and self._explicit:
            self._explicit = False
            try:
                self._conn.commit()
            except SQLAlchemyError as e:
                raise ExecutorError(str(e), cause=e) from e

    def rollback_transaction(self) -> None:
        if self._conn is not None and self._explicit:
            self._explicit = False
            self._conn.rollback()

    def release(self) -> None:
        """Close the connection (the engine stays usable)."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self._explicit = False


__all__ = ["EngineCursor", "EngineExecutor", "create_orm_engine"]
