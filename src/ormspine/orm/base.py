"""Shared plumbing for the CRUD operation modules.

A ``Runner`` bundles what every operation step needs: the executor, the
statement builder, the type resolver for nested records, and the tracing
switches. Operation modules are plain functions over a runner and a
bound ``Info``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from ormspine.errors import OrmError, SchemaError
from ormspine.logging import get_logger
from ormspine.marshal import ColumnHolder, Resolver
from ormspine.model import Info, Item
from ormspine.protocols import Builder, Executor, Holder
from ormspine.types import TypeKind

logger = get_logger(__name__)


class Runner:
    """Executes builder output against an executor, one step at a time."""

    def __init__(
        self,
        executor: Executor,
        builder: Builder,
        resolve: Resolver,
        *,
        trace_sql: bool = False,
        relation_depth: int = 3,
    ):
        self.executor = executor
        self.builder = builder
        self.resolve = resolve
        self.trace_sql = trace_sql
        self.relation_depth = relation_depth

    def trace(self, step: str, sql: str) -> None:
        if self.trace_sql:
            logger.debug("orm.sql", step=step, sql=sql)

    def execute(self, sql: str, step: str) -> int:
        self.trace(step, sql)
        return self.executor.execute(sql)

    def insert(self, sql: str, step: str) -> Any:
        self.trace(step, sql)
        return self.executor.insert(sql)

    def table_exists(self, name: str) -> bool:
        return self.executor.table_exists(name)

    def fetch(self, sql: str, make_holders: Callable[[], list[Holder]], step: str) -> list[list[Holder]]:
        """Drain a query into fresh holders per row.

        The cursor is finished before returning so nested statements never
        overlap an open result set.
        """
        self.trace(step, sql)
        cursor = self.executor.query(sql)
        rows = []
        try:
            while cursor.next():
                holders = make_holders()
                cursor.read_into(*holders)
                rows.append(holders)
        finally:
            cursor.finish()
        return rows


@contextmanager
def relation_step(item: Item) -> Iterator[None]:
    """Tag any failure inside the block with the relation field's name."""
    try:
        yield
    except OrmError as e:
        raise e.with_context(field=item.name)


def dependents(item: Item) -> list[Info]:
    """Bound Infos for the current value of a relation item, skipping None."""
    value = item.value
    if value is None:
        return []
    values = value if item.type_kind is TypeKind.SLICE else [value]
    return [item.depend_info.bind(v) for v in values if v is not None]


def linked_keys(runner: Runner, info: Info, item: Item) -> list[Any]:
    """Primary keys of the dependents joined to ``info`` through ``item``, in join order."""
    right = item.depend_info.primary_item()
    if right is None:
        raise SchemaError(f"{item.depend_info.name} has no primary key")
    rows = runner.fetch(
        runner.builder.build_query_relation(info, item),
        lambda: [ColumnHolder(right)],
        "query_relation",
    )
    return [row[0].value for row in rows]


__all__ = ["Runner", "dependents", "linked_keys", "logger", "relation_step"]
