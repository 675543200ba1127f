"""Drop: primary table, owned dependent tables, join tables."""

from __future__ import annotations

from ormspine.model import Info
from ormspine.orm.base import Runner, logger, relation_step


def drop_schema(runner: Runner, info: Info) -> None:
    builder = runner.builder
    table = builder.table_name(info)
    if runner.table_exists(table):
        runner.execute(builder.build_drop_schema(info), "drop_schema")
        logger.info("orm.table_dropped", table=table)

    for item in info.relation_items():
        with relation_step(item):
            if item.is_owned:
                drop_schema(runner, item.depend_info)
            relation = builder.relation_table_name(info, item)
            if runner.table_exists(relation):
                runner.execute(builder.build_drop_relation_schema(info, item), "drop_relation_schema")
                logger.info("orm.table_dropped", table=relation, field=item.name)
