"""Insert: primary row first, then dependents and join rows."""

from __future__ import annotations

from ormspine.model import Info, Item
from ormspine.orm.base import Runner, dependents, relation_step


def insert_record(runner: Runner, info: Info) -> None:
    """Insert the bound record and its relations.

    An auto-assigned primary key is written back onto the record before
    any join row refers to it.
    """
    key = runner.insert(runner.builder.build_insert(info), "insert")
    primary = info.primary_item()
    if primary is not None and primary.is_auto and key is not None:
        primary.set_value(key)

    for item in info.relation_items():
        with relation_step(item):
            insert_relation(runner, info, item)


def insert_relation(runner: Runner, info: Info, item: Item) -> None:
    for dependent in dependents(item):
        if item.is_owned:
            insert_record(runner, dependent)
        runner.execute(runner.builder.build_insert_relation(info, item, dependent), "insert_relation")
