"""Create: primary table, owned dependent tables, join tables."""

from __future__ import annotations

from ormspine.model import Info
from ormspine.orm.base import Runner, logger, relation_step


def create_schema(runner: Runner, info: Info) -> None:
    """Create the tables of ``info`` that do not exist yet.

    Owned relation targets are created recursively; referenced targets
    belong to another record, so only the join table is created for them.
    """
    builder = runner.builder
    table = builder.table_name(info)
    if not runner.table_exists(table):
        runner.execute(builder.build_create_schema(info), "create_schema")
        logger.info("orm.table_created", table=table)

    for item in info.relation_items():
        with relation_step(item):
            if item.is_owned:
                create_schema(runner, item.depend_info)
            relation = builder.relation_table_name(info, item)
            if not runner.table_exists(relation):
                runner.execute(builder.build_create_relation_schema(info, item), "create_relation_schema")
                logger.info("orm.table_created", table=relation, field=item.name)
