"""SQLite statement builder.

Renders every statement the orchestrator issues as literal SQL text.
Values are embedded through the value marshaller, so strings are quoted
with doubled single quotes and records resolve to their primary key.

Naming::

    primary table     `User`
    join table        `GroupUsers2User` (`id` autoincrement, `left`, `right`)

Relation filters in batch queries select primary keys through the join
table::

    `id` IN (SELECT DISTINCT `left` FROM `GroupUsers2User` WHERE `right` in (1,2))
"""

from __future__ import annotations

from ormspine.errors import SchemaError, TypeMismatchError
from ormspine.filter import Filter
from ormspine.marshal import Resolver, encode_column, encode_value
from ormspine.model import Info, Item, derive_info
from ormspine.types import TypeKind

LEFT = "left"
RIGHT = "right"
RELATION_ID = "id"


def quote_name(name: str) -> str:
    """Backtick-quote an identifier."""
    return "`" + name.replace("`", "``") + "`"


def _camel(name: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


class SQLiteBuilder:
    """Builds SQLite statement text from derived schemas."""

    def __init__(self, resolve: Resolver = derive_info):
        self._resolve = resolve

    @property
    def name(self) -> str:
        return "sqlite"

    # ── Naming ───────────────────────────────────────────────────

    def table_name(self, info: Info) -> str:
        return info.name

    def relation_table_name(self, info: Info, item: Item) -> str:
        return f"{info.name}{_camel(item.name)}2{item.depend_info.name}"

    def column_type(self, item: Item) -> str:
        kind = item.type_kind
        if kind is TypeKind.BOOLEAN:
            return "TINYINT"
        if kind.is_integer:
            return "INTEGER"
        if kind.is_float:
            return "REAL"
        if kind is TypeKind.DATETIME:
            return "DATETIME"
        if kind in (TypeKind.STRING, TypeKind.SLICE):
            return "TEXT"
        raise SchemaError(f"field {item.name!r} is not stored as a column")

    # ── Schema ───────────────────────────────────────────────────

    def build_create_schema(self, info: Info) -> str:
        columns = []
        primary = info.primary_item()
        for item in info.column_items():
            if item.is_primary and item.is_auto:
                if not item.type_kind.is_integer:
                    raise SchemaError(
                        f"auto key {info.name}.{item.name} must be an integer"
                    ).with_context(record=info.name, field=item.name)
                columns.append(f"{quote_name(item.storage_name)} INTEGER PRIMARY KEY AUTOINCREMENT")
                continue
            null = "" if item.is_pointer else " NOT NULL"
            columns.append(f"{quote_name(item.storage_name)} {self.column_type(item)}{null}")
        if primary is not None and not primary.is_auto:
            columns.append(f"PRIMARY KEY ({quote_name(primary.storage_name)})")
        if not columns:
            raise SchemaError(f"{info.name} has no column fields").with_context(record=info.name)
        body = ",\n    ".join(columns)
        return f"CREATE TABLE IF NOT EXISTS {quote_name(self.table_name(info))} (\n    {body}\n)"

    def build_drop_schema(self, info: Info) -> str:
        return f"DROP TABLE IF EXISTS {quote_name(self.table_name(info))}"

    def build_create_relation_schema(self, info: Info, item: Item) -> str:
        left = self._require_primary(info)
        right = self._require_primary(item.depend_info)
        return (
            f"CREATE TABLE IF NOT EXISTS {quote_name(self.relation_table_name(info, item))} (\n"
            f"    {quote_name(RELATION_ID)} INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            f"    {quote_name(LEFT)} {self.column_type(left)} NOT NULL,\n"
            f"    {quote_name(RIGHT)} {self.column_type(right)} NOT NULL\n"
            f")"
        )

    def build_drop_relation_schema(self, info: Info, item: Item) -> str:
        return f"DROP TABLE IF EXISTS {quote_name(self.relation_table_name(info, item))}"

    # ── Rows ─────────────────────────────────────────────────────

    def build_insert(self, info: Info) -> str:
        names, values = [], []
        for item in info.column_items():
            if item.is_auto:
                continue
            value = item.value
            if value is None and item.is_pointer:
                continue
            names.append(quote_name(item.storage_name))
            values.append(encode_column(item, value, self._resolve))

        table = quote_name(self.table_name(info))
        if not names:
            return f"INSERT INTO {table} DEFAULT VALUES"
        return f"INSERT INTO {table} ({','.join(names)}) VALUES ({','.join(values)})"

    def build_update(self, info: Info) -> str:
        primary = self._require_primary(info)
        assignments = [
            f"{quote_name(item.storage_name)} = {encode_column(item, item.value, self._resolve)}"
            for item in info.column_items()
            if not item.is_primary
        ]
        if not assignments:
            column = quote_name(primary.storage_name)
            assignments = [f"{column} = {column}"]
        return (
            f"UPDATE {quote_name(self.table_name(info))} SET {','.join(assignments)} "
            f"WHERE {self._key_predicate(info)}"
        )

    def build_delete(self, info: Info) -> str:
        return f"DELETE FROM {quote_name(self.table_name(info))} WHERE {self._key_predicate(info)}"

    def build_query(self, info: Info) -> str:
        return (
            f"SELECT {self._column_list(info)} FROM {quote_name(self.table_name(info))} "
            f"WHERE {self._key_predicate(info)}"
        )

    # ── Relations ────────────────────────────────────────────────

    def build_insert_relation(self, info: Info, item: Item, dependent: Info) -> str:
        return (
            f"INSERT INTO {quote_name(self.relation_table_name(info, item))} "
            f"({quote_name(LEFT)},{quote_name(RIGHT)}) "
            f"VALUES ({self._key_literal(info)},{self._key_literal(dependent)})"
        )

    def build_delete_relation(self, info: Info, item: Item) -> tuple[str | None, str]:
        relation = quote_name(self.relation_table_name(info, item))
        left_key = self._key_literal(info)
        dependent_sql = None
        if item.is_owned:
            right = self._require_primary(item.depend_info)
            dependent_sql = (
                f"DELETE FROM {quote_name(self.table_name(item.depend_info))} "
                f"WHERE {quote_name(right.storage_name)} IN "
                f"(SELECT {quote_name(RIGHT)} FROM {relation} WHERE {quote_name(LEFT)} = {left_key})"
            )
        join_sql = f"DELETE FROM {relation} WHERE {quote_name(LEFT)} = {left_key}"
        return dependent_sql, join_sql

    def build_query_relation(self, info: Info, item: Item) -> str:
        relation = quote_name(self.relation_table_name(info, item))
        return (
            f"SELECT {quote_name(RIGHT)} FROM {relation} "
            f"WHERE {quote_name(LEFT)} = {self._key_literal(info)} "
            f"ORDER BY {quote_name(RELATION_ID)}"
        )

    # ── Batch ────────────────────────────────────────────────────

    def build_batch_query(self, info: Info, filter: Filter | None) -> str:
        sql = f"SELECT {self._column_list(info)} FROM {quote_name(self.table_name(info))}"
        if filter is None:
            return sql

        conditions = self._conditions(info, filter)
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)

        order = []
        for key in filter.sort_keys:
            item = _find_column(info, key.key)
            if item is not None:
                order.append(f"{quote_name(item.storage_name)} {'ASC' if key.ascending else 'DESC'}")
        if order:
            sql += " ORDER BY " + ",".join(order)

        window = filter.pagination
        if window is not None:
            sql += f" LIMIT {window.limit} OFFSET {window.offset}"
        return sql

    def build_count(self, info: Info, filter: Filter | None) -> str:
        primary = info.primary_item()
        counted = quote_name(primary.storage_name) if primary is not None else "*"
        sql = f"SELECT COUNT({counted}) FROM {quote_name(self.table_name(info))}"
        if filter is not None:
            conditions = self._conditions(info, filter)
            if conditions:
                sql += " WHERE " + " AND ".join(conditions)
        return sql

    def _conditions(self, info: Info, filter: Filter) -> list[str]:
        conditions = []
        for item in info.items:
            predicate = filter.item_for(item)
            if predicate is None:
                continue
            if item.is_relation:
                inner = predicate.render(RIGHT, item, self._resolve)
                if not inner:
                    continue
                primary = self._require_primary(info)
                conditions.append(
                    f"{quote_name(primary.storage_name)} IN "
                    f"(SELECT DISTINCT {quote_name(LEFT)} "
                    f"FROM {quote_name(self.relation_table_name(info, item))} WHERE {inner})"
                )
                continue
            text = predicate.render(item.storage_name, item, self._resolve)
            if text:
                conditions.append(text)
        return conditions

    # ── Helpers ──────────────────────────────────────────────────

    def _column_list(self, info: Info) -> str:
        return ",".join(quote_name(item.storage_name) for item in info.column_items())

    def _require_primary(self, info: Info) -> Item:
        primary = info.primary_item()
        if primary is None:
            raise SchemaError(f"{info.name} has no primary key").with_context(record=info.name)
        return primary

    def _key_literal(self, info: Info) -> str:
        primary = self._require_primary(info)
        key = primary.value
        if key is None:
            raise TypeMismatchError(
                f"{info.name}.{primary.name} is not set", expected=primary.type_kind
            ).with_context(record=info.name, field=primary.name)
        return encode_value(key, self._resolve)

    def _key_predicate(self, info: Info) -> str:
        primary = self._require_primary(info)
        return f"{quote_name(primary.storage_name)} = {self._key_literal(info)}"


def _find_column(info: Info, key: str) -> Item | None:
    for item in info.column_items():
        if key in (item.name, item.storage_name):
            return item
    return None


__all__ = ["SQLiteBuilder", "quote_name"]
