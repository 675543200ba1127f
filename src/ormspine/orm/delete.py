"""Delete: exactly one primary row, then join rows and owned dependents."""

from __future__ import annotations

from ormspine.errors import ConsistencyError
from ormspine.model import Info, Item
from ormspine.orm.base import Runner, linked_keys, relation_step


def delete_record(runner: Runner, info: Info) -> None:
    count = runner.execute(runner.builder.build_delete(info), "delete")
    if count != 1:
        raise ConsistencyError(
            f"delete of {info.name} affected {count} rows, expected 1",
            expected=1,
            actual=count,
        )

    for item in info.relation_items():
        with relation_step(item):
            delete_relation(runner, info, item)


def delete_relation(runner: Runner, info: Info, item: Item) -> None:
    """Remove ``item``'s join rows and, when owned, the dependents below it.

    Owned dependents are cleared bottom-up: their own relations go before
    their rows, since the dependent delete selects keys through the join
    rows.
    """
    if item.is_owned and item.depend_info.relation_items():
        for key in linked_keys(runner, info, item):
            dependent = item.depend_info.instantiate()
            dependent.primary_item().update_value(key)
            for nested in dependent.relation_items():
                with relation_step(nested):
                    delete_relation(runner, dependent, nested)

    dependent_sql, join_sql = runner.builder.build_delete_relation(info, item)
    if dependent_sql is not None:
        runner.execute(dependent_sql, "delete_dependents")
    runner.execute(join_sql, "delete_relation")
