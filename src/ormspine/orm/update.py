"""Update: scalar columns, then wholesale relation replacement."""

from __future__ import annotations

from ormspine.model import Info
from ormspine.orm.base import Runner, relation_step
from ormspine.orm.delete import delete_relation
from ormspine.orm.insert import insert_relation


def update_record(runner: Runner, info: Info) -> None:
    """Update the bound record.

    Every relation is replaced: existing join rows (and owned dependent
    rows) are deleted and the current value is inserted again, so owned
    dependents with auto keys receive new keys on every update.
    """
    runner.execute(runner.builder.build_update(info), "update")

    for item in info.relation_items():
        with relation_step(item):
            delete_relation(runner, info, item)
            insert_relation(runner, info, item)
