"""
Protocol definitions for the mapper's collaborators.

The orchestrator never talks to a database driver or renders dialect text
itself. It drives two collaborators through structural protocols:

Architecture:
    ::

        protocols.py
        ├── Holder    : scan target for one result column
        ├── Cursor    : next() / read_into(*holders) / finish()
        ├── Executor  : query / execute / insert / table_exists + transactions
        └── Builder   : statement text for schema, rows, relations, batches

        Implementations:
        ┌────────────────────────────────────────────────────────┐
        │ Executor → executor.sqlite.SQLiteExecutor (sqlite3)     │
        │            executor.engine.EngineExecutor (SQLAlchemy)  │
        │ Builder  → builder.sqlite.SQLiteBuilder                 │
        └────────────────────────────────────────────────────────┘

Manifesto:
    Protocols define contracts without inheritance. Any object with the
    right shape works, which keeps the orchestrator testable with a mock
    executor and portable across drivers.

Guardrails:
    ❌ DON'T: Add implementation logic to protocol classes
    ✅ DO: Keep protocols minimal and focused

Tags:
    protocol, executor, builder, cursor, ormspine
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ormspine.filter import Filter
    from ormspine.model import Info, Item


@runtime_checkable
class Holder(Protocol):
    """Receives one raw column value from a cursor."""

    def scan(self, raw: Any) -> None:
        ...


@runtime_checkable
class Cursor(Protocol):
    """Forward-only result cursor.

    Usage:
        cursor = executor.query(sql)
        try:
            while cursor.next():
                cursor.read_into(*holders)
        finally:
            cursor.finish()
    """

    def next(self) -> bool:
        """Advance to the next row; False when exhausted."""
        ...

    def read_into(self, *holders: Holder) -> None:
        """Scan the current row positionally into ``holders``."""
        ...

    def finish(self) -> None:
        """Release the cursor."""
        ...


@runtime_checkable
class Executor(Protocol):
    """
    Synchronous statement executor owning one database connection.

    Every method raises ``ExecutorError`` when the driver fails. Outside an
    explicit transaction each statement commits on its own.
    """

    def query(self, sql: str) -> Cursor:
        """Run a SELECT and return a cursor over its rows."""
        ...

    def execute(self, sql: str) -> int:
        """Run a statement and return the affected row count."""
        ...

    def insert(self, sql: str) -> Any:
        """Run an INSERT and return the generated key."""
        ...

    def table_exists(self, name: str) -> bool:
        ...

    def begin_transaction(self) -> None:
        ...

    def commit_transaction(self) -> None:
        ...

    def rollback_transaction(self) -> None:
        ...

    def release(self) -> None:
        """Close the underlying connection."""
        ...


@runtime_checkable
class Builder(Protocol):
    """
    Dialect statement builder.

    ``info`` arguments are bound to a live record wherever row values are
    needed (insert, update, delete, query, relation rows).
    """

    def table_name(self, info: Info) -> str:
        ...

    def relation_table_name(self, info: Info, item: Item) -> str:
        ...

    def build_create_schema(self, info: Info) -> str:
        ...

    def build_drop_schema(self, info: Info) -> str:
        ...

    def build_create_relation_schema(self, info: Info, item: Item) -> str:
        ...

    def build_drop_relation_schema(self, info: Info, item: Item) -> str:
        ...

    def build_insert(self, info: Info) -> str:
        ...

    def build_update(self, info: Info) -> str:
        ...

    def build_delete(self, info: Info) -> str:
        ...

    def build_query(self, info: Info) -> str:
        ...

    def build_insert_relation(self, info: Info, item: Item, dependent: Info) -> str:
        ...

    def build_delete_relation(self, info: Info, item: Item) -> tuple[str | None, str]:
        """Return (dependent delete or None when referenced, join-row delete)."""
        ...

    def build_query_relation(self, info: Info, item: Item) -> str:
        ...

    def build_batch_query(self, info: Info, filter: Filter | None) -> str:
        ...

    def build_count(self, info: Info, filter: Filter | None) -> str:
        ...


__all__ = [
    "Builder",
    "Cursor",
    "Executor",
    "Holder",
]
