"""Batch query and count over a Filter.

Relations are not resolved per row: relation fields of the returned
records keep their default values.
"""

from __future__ import annotations

from typing import Any

from ormspine.filter import Filter
from ormspine.marshal import ColumnHolder
from ormspine.model import Info
from ormspine.orm.base import Runner


def batch_query(runner: Runner, info: Info, filter: Filter | None) -> list[Any]:
    columns = info.column_items()
    rows = runner.fetch(
        runner.builder.build_batch_query(info, filter),
        lambda: [ColumnHolder(item) for item in columns],
        "batch_query",
    )
    records = []
    for row in rows:
        bound = info.instantiate()
        for item, holder in zip(bound.column_items(), row):
            item.update_value(holder.value)
        records.append(bound.entity)
    return records


class _CountHolder:
    def __init__(self) -> None:
        self.value = 0

    def scan(self, raw: Any) -> None:
        self.value = int(raw or 0)


def count_records(runner: Runner, info: Info, filter: Filter | None) -> int:
    rows = runner.fetch(runner.builder.build_count(info, filter), lambda: [_CountHolder()], "count")
    return rows[0][0].value if rows else 0
