"""
Value marshalling between record fields and statement text.

Outbound, ``encode_value`` renders an operand as SQL literal text for
filters and key lookups, and ``encode_column`` renders a column value for
insert and update statements. Inbound, ``ColumnHolder`` scans a raw
driver value back into the declared kind of a field.

Encoding table::

    bool        1 / 0
    int         decimal digits
    float       shortest exact repr
    str         'text' (single quotes doubled)
    datetime    'YYYY-MM-DD HH:MM:SS[.ffffff]'
    record      primary key text of the record
    list        element text joined with commas (filters)
                quoted JSON array (basic list columns)

Tags:
    marshalling, sql-literals, ormspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import dataclasses
import json
import math
from collections.abc import Callable
from datetime import datetime
from typing import Any

from ormspine.errors import SchemaError, TypeMismatchError
from ormspine.model import Info, Item, derive_info, parse_datetime
from ormspine.types import TypeKind

Resolver = Callable[[type], Info]

DATETIME_STORAGE = "%Y-%m-%d %H:%M:%S"
DATETIME_STORAGE_FRACTION = "%Y-%m-%d %H:%M:%S.%f"

NULL = "NULL"


def quote(text: str) -> str:
    """Single-quote a string literal."""
    return "'" + text.replace("'", "''") + "'"


def format_datetime(value: datetime) -> str:
    if value.microsecond:
        return value.strftime(DATETIME_STORAGE_FRACTION)
    return value.strftime(DATETIME_STORAGE)


def encode_value(value: Any, resolve: Resolver = derive_info) -> str:
    """Render an operand as literal text.

    Raises:
        TypeMismatchError: the value has no literal form
        SchemaError: a record operand has no primary key
    """
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return "%d" % value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise TypeMismatchError(f"float {value!r} has no literal form", value=value)
        return repr(value)
    if isinstance(value, str):
        return quote(value)
    if isinstance(value, datetime):
        return quote(format_datetime(value))
    if isinstance(value, (list, tuple)):
        return ",".join(encode_value(v, resolve) for v in value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return encode_primary(value, resolve)
    raise TypeMismatchError(f"value {value!r} has no literal form", value=value)


def encode_primary(entity: Any, resolve: Resolver = derive_info) -> str:
    """Render the primary key of a record as literal text."""
    info = resolve(type(entity))
    primary = info.primary_item()
    if primary is None:
        raise SchemaError(f"{info.name} has no primary key").with_context(record=info.name)
    key = getattr(entity, primary.name)
    if key is None:
        raise TypeMismatchError(
            f"{info.name}.{primary.name} is not set", value=entity, expected=primary.type_kind
        ).with_context(record=info.name, field=primary.name)
    return encode_value(key, resolve)


def encode_column(item: Item, value: Any, resolve: Resolver = derive_info) -> str:
    """Render a column value for insert or update statements."""
    if value is None:
        return NULL
    if item.type_kind is TypeKind.SLICE:
        return quote(json.dumps([_jsonable(v) for v in value]))
    return encode_value(value, resolve)


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_datetime(value)
    return value


# =============================================================================
# DECODING
# =============================================================================


def decode_column(kind: TypeKind, raw: Any, elem_kind: TypeKind | None = None) -> Any:
    """Convert a raw driver value into the declared kind."""
    if raw is None:
        return None
    if isinstance(raw, (bytes, bytearray, memoryview)):
        raw = bytes(raw).decode("utf-8")

    if kind is TypeKind.BOOLEAN:
        return bool(int(raw))
    if kind.is_integer:
        return int(raw)
    if kind.is_float:
        return float(raw)
    if kind is TypeKind.STRING:
        return str(raw)
    if kind is TypeKind.DATETIME:
        return _decode_datetime(raw)
    if kind is TypeKind.SLICE:
        elements = json.loads(raw) if isinstance(raw, str) else list(raw)
        return [decode_column(elem_kind, v) for v in elements]
    raise TypeMismatchError(f"{kind.value} values are not stored as columns", value=raw, expected=kind)


def _decode_datetime(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return raw
    text = str(raw)
    for layout in (DATETIME_STORAGE, DATETIME_STORAGE_FRACTION):
        try:
            return datetime.strptime(text, layout)
        except ValueError:
            continue
    return parse_datetime(text)


class ColumnHolder:
    """Scan target for one result column of an item's kind."""

    def __init__(self, item: Item):
        self.item = item
        self.value: Any = None

    def scan(self, raw: Any) -> None:
        value = decode_column(self.item.type_kind, raw, self.item.elem_kind)
        if value is None and not self.item.is_pointer:
            value = self.item.zero_value()
        self.value = value

    def __repr__(self) -> str:
        return f"ColumnHolder({self.item.name!r}, value={self.value!r})"


__all__ = [
    "DATETIME_STORAGE",
    "NULL",
    "ColumnHolder",
    "Resolver",
    "decode_column",
    "encode_column",
    "encode_primary",
    "encode_value",
    "format_datetime",
    "quote",
]
