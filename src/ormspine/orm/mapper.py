"""The mapper entry point: ``Orm``."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from ormspine.builder import SQLiteBuilder
from ormspine.errors import OrmError
from ormspine.filter import Filter
from ormspine.logging import log_context
from ormspine.model import Info
from ormspine.orm.base import Runner, logger
from ormspine.orm.batch import batch_query, count_records
from ormspine.orm.create import create_schema
from ormspine.orm.delete import delete_record
from ormspine.orm.drop import drop_schema
from ormspine.orm.insert import insert_record
from ormspine.orm.query import query_record
from ormspine.orm.update import update_record
from ormspine.protocols import Builder, Executor
from ormspine.provider import Provider
from ormspine.settings import OrmSettings, get_settings

T = TypeVar("T")


class Orm:
    """
    Object-relational mapper over one executor.

    Each instance owns exactly one executor (one connection) and is meant
    to be used from one thread at a time. Several instances may share a
    ``Provider``.

    Multi-statement operations are not wrapped in a transaction; bracket
    them with ``transaction()`` when atomicity matters.

    Example:
        orm = Orm(SQLiteExecutor(), Provider("default"))
        orm.create(Group)
        group = orm.insert(Group(name="admins", users=[User(name="ada")]))
        loaded = orm.query(Group(id=group.id))
    """

    def __init__(
        self,
        executor: Executor,
        provider: Provider | None = None,
        builder: Builder | None = None,
        *,
        settings: OrmSettings | None = None,
    ):
        settings = settings or get_settings()
        self._executor = executor
        self._provider = provider if provider is not None else Provider("default")
        self._builder = builder if builder is not None else SQLiteBuilder(self._provider.get_info)
        self._runner = Runner(
            executor,
            self._builder,
            self._provider.get_info,
            trace_sql=settings.trace_sql,
            relation_depth=settings.relation_depth,
        )

    @property
    def executor(self) -> Executor:
        return self._executor

    @property
    def provider(self) -> Provider:
        return self._provider

    @property
    def builder(self) -> Builder:
        return self._builder

    # ── Schema ───────────────────────────────────────────────────

    def create(self, entity: Any) -> None:
        """Create the tables of a record (instance or class)."""
        info = self._schema(entity)
        self._run("create", info, lambda: create_schema(self._runner, info))

    def drop(self, entity: Any) -> None:
        """Drop the tables of a record (instance or class)."""
        info = self._schema(entity)
        self._run("drop", info, lambda: drop_schema(self._runner, info))

    # ── Rows ─────────────────────────────────────────────────────

    def insert(self, entity: T) -> T:
        info = self._provider.bind(entity)
        self._run("insert", info, lambda: insert_record(self._runner, info))
        return entity

    def update(self, entity: T) -> T:
        info = self._provider.bind(entity)
        self._run("update", info, lambda: update_record(self._runner, info))
        return entity

    def delete(self, entity: Any) -> None:
        info = self._provider.bind(entity)
        self._run("delete", info, lambda: delete_record(self._runner, info))

    def query(self, entity: T) -> T:
        """Load a record by the primary key already set on ``entity``."""
        info = self._provider.bind(entity)
        self._run("query", info, lambda: query_record(self._runner, info))
        return entity

    def batch_query(self, record_type: type[T], filter: Filter | None = None) -> list[T]:
        info = self._provider.get_info(record_type)
        return self._run("batch_query", info, lambda: batch_query(self._runner, info, filter))

    def count(self, record_type: type, filter: Filter | None = None) -> int:
        info = self._provider.get_info(record_type)
        return self._run("count", info, lambda: count_records(self._runner, info, filter))

    # ── Transactions ─────────────────────────────────────────────

    def begin_transaction(self) -> None:
        self._executor.begin_transaction()

    def commit_transaction(self) -> None:
        self._executor.commit_transaction()

    def rollback_transaction(self) -> None:
        self._executor.rollback_transaction()

    @contextmanager
    def transaction(self) -> Iterator[Orm]:
        """Run the block in one transaction; roll back on any exception."""
        self.begin_transaction()
        try:
            yield self
            self.commit_transaction()
        except Exception:
            self.rollback_transaction()
            raise

    def release(self) -> None:
        """Release the executor's connection."""
        self._executor.release()

    # ── Internals ────────────────────────────────────────────────

    def _schema(self, entity: Any) -> Info:
        if isinstance(entity, type):
            return self._provider.get_info(entity)
        return self._provider.bind(entity)

    def _run(self, operation: str, info: Info, step: Callable[[], T]) -> T:
        with log_context(owner=self._provider.owner):
            logger.debug("orm.start", operation=operation, record=info.name)
            try:
                result = step()
            except OrmError as e:
                e.with_context(operation=operation, record=info.name)
                logger.error("orm.failed", **e.to_dict())
                raise
            logger.debug("orm.done", operation=operation, record=info.name)
            return result


__all__ = ["Orm"]
