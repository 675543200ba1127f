"""Query: one record by primary key, relations resolved recursively."""

from __future__ import annotations

from typing import Any

from ormspine.errors import NotFoundError
from ormspine.marshal import ColumnHolder
from ormspine.model import Info, Item
from ormspine.orm.base import Runner, linked_keys, relation_step
from ormspine.types import TypeKind


def query_record(runner: Runner, info: Info, depth: int | None = None) -> None:
    """Load the bound record's columns, then its relations.

    Relation fields whose current value is ``None`` are left alone.
    ``depth`` bounds how many relation levels are resolved.
    """
    if depth is None:
        depth = runner.relation_depth

    columns = info.column_items()
    rows = runner.fetch(
        runner.builder.build_query(info),
        lambda: [ColumnHolder(item) for item in columns],
        "query",
    )
    if not rows:
        raise NotFoundError(f"no {info.name} row matches the primary key")
    for item, holder in zip(columns, rows[0]):
        item.update_value(holder.value)

    if depth <= 0:
        return
    for item in info.relation_items():
        if item.value is None:
            continue
        with relation_step(item):
            query_relation(runner, info, item, depth)


def query_relation(runner: Runner, info: Info, item: Item, depth: int) -> None:
    keys = linked_keys(runner, info, item)

    if item.type_kind is TypeKind.STRUCT:
        if not keys:
            if item.is_owned:
                raise NotFoundError(f"no {item.depend_info.name} linked to {info.name}.{item.name}")
            item.update_value(None)
            return
        item.update_value(_load(runner, item.depend_info, keys[0], depth - 1))
        return

    item.update_value([_load(runner, item.depend_info, key, depth - 1) for key in keys])


def _load(runner: Runner, template: Info, key: Any, depth: int) -> Any:
    dependent = template.instantiate()
    dependent.primary_item().update_value(key)
    query_record(runner, dependent, depth)
    return dependent.entity
