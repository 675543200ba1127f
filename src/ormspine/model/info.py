"""
Info: the derived schema of one record type.

``derive_info`` walks the declared type graph of a dataclass once and
produces an ``Info`` whose items describe every storable field, the
primary key, and a nested ``Info`` for each relation field. Derivation
follows declared types only, never live data. A declared graph that
loops back to a type still being derived is rejected so the tree stays
finite.

Manifesto:
    - **Derive once:** An Info is built per record type and never mutated
    - **Bind per call:** ``bind(entity)`` copies the items onto a live record
    - **Explicit ownership:** Relation items carry OWNED or REFERENCED

Architecture:
    ::

        derive_info(Group)
              │
              ▼
        Info(name="Group")
          ├── Item id      INT        key auto
          ├── Item name    STRING
          ├── Item users   SLICE ──▶ Info(name="User")   OWNED
          └── Item admin   STRUCT ─▶ Info(name="User")   REFERENCED (Optional)

Examples:
    >>> info = derive_info(User)
    >>> info.primary_item().storage_name
    'id'
    >>> bound = info.bind(User(name="ada"))
    >>> bound.item("name").value
    'ada'

Tags:
    schema, introspection, dataclasses, ormspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import dataclasses
import typing
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from ormspine.errors import SchemaError, TypeMismatchError
from ormspine.model.item import Item, Ownership
from ormspine.model.tag import ORM_TAG, Tag
from ormspine.model.value import ObjectValue
from ormspine.types import TypeKind, classify, list_element, unwrap_optional


class Info:
    """Schema of one record type, optionally bound to a live record."""

    def __init__(
        self,
        name: str,
        package_path: str,
        is_pointer: bool,
        items: list[Item],
        record_type: type,
        entity: Any = None,
    ):
        self.name = name
        self.package_path = package_path
        self.is_pointer = is_pointer
        self.items = items
        self.record_type = record_type
        self.entity = entity

    # ── Lookup ───────────────────────────────────────────────────

    def primary_item(self) -> Item | None:
        for item in self.items:
            if item.is_primary:
                return item
        return None

    def item(self, name: str) -> Item | None:
        for item in self.items:
            if item.name == name:
                return item
        return None

    def column_items(self) -> list[Item]:
        """Items stored as columns of the record's own table."""
        return [item for item in self.items if not item.is_relation]

    def relation_items(self) -> list[Item]:
        """Items stored through a join table."""
        return [item for item in self.items if item.is_relation]

    # ── Binding ──────────────────────────────────────────────────

    def bind(self, entity: Any) -> Info:
        """Copy of this Info whose item slots are ``entity``'s attributes."""
        if not isinstance(entity, self.record_type):
            raise TypeMismatchError(
                f"expected a {self.name} record, got {type(entity).__name__}",
                value=entity,
                expected=self.name,
            )
        return Info(
            self.name,
            self.package_path,
            self.is_pointer,
            [item.bind(entity) for item in self.items],
            self.record_type,
            entity,
        )

    def new_entity(self) -> Any:
        """Construct a record whose fields hold defaults or zero values."""
        kwargs: dict[str, Any] = {}
        deferred: list[Item] = []
        fields = {f.name: f for f in dataclasses.fields(self.record_type)}
        for item in self.items:
            f = fields[item.name]
            if f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING:
                continue
            if f.init:
                kwargs[item.name] = item.zero_value()
            else:
                deferred.append(item)

        entity = self.record_type(**kwargs)
        for item in deferred:
            setattr(entity, item.name, item.zero_value())
        return entity

    def instantiate(self) -> Info:
        """Bound Info over a fresh zero-valued record."""
        return self.bind(self.new_entity())

    # ── Values ───────────────────────────────────────────────────

    def from_mapping(self, values: Mapping[str, Any]) -> Any:
        """Build a record from a mapping of attribute name to input value."""
        bound = self.instantiate()
        for item in bound.items:
            if values.get(item.name) is not None:
                item.set_value(values[item.name])
        return bound.entity

    def to_value(self) -> ObjectValue:
        """Snapshot the bound record as a plain ``ObjectValue``."""
        return ObjectValue(
            self.name,
            self.package_path,
            {item.name: _plain(item, item.value) for item in self.items},
        )

    def assign_value(self, value: ObjectValue) -> None:
        """Assign every present item of ``value`` with type checking.

        The value must describe the same record type (name and module).
        Missing or ``None`` entries leave the item untouched.
        """
        if value.type_name != self.name or value.package_path != self.package_path:
            raise TypeMismatchError(
                f"value of {value.package_path}.{value.type_name} cannot be "
                f"assigned to {self.package_path}.{self.name}",
                value=value,
                expected=self.name,
            )
        for item in self.items:
            item_value = value.items.get(item.name)
            if item_value is None:
                continue
            item.set_value(item_value)

    def __repr__(self) -> str:
        return f"Info(name={self.name!r}, package={self.package_path!r}, items={len(self.items)})"


def _plain(item: Item, value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    if item.type_kind is TypeKind.STRUCT:
        return dict(item.depend_info.bind(value).to_value().items)
    if item.type_kind is TypeKind.SLICE:
        if item.depend_info is not None:
            return [
                None if v is None else dict(item.depend_info.bind(v).to_value().items)
                for v in value
            ]
        return [v.isoformat() if isinstance(v, datetime) else v for v in value]
    return value


# =============================================================================
# DERIVATION
# =============================================================================


def derive_info(tp: Any) -> Info:
    """Derive the schema of a record type.

    Args:
        tp: A dataclass type, optionally ``Optional``-wrapped

    Raises:
        SchemaError: the type, or one of its fields, is not representable
    """
    return _derive(tp, ())


def _derive(tp: Any, stack: tuple[type, ...]) -> Info:
    record_type, is_pointer = unwrap_optional(tp)
    if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
        raise SchemaError(f"{record_type!r} is not a dataclass record type")
    if record_type in stack:
        path = " -> ".join(t.__name__ for t in stack + (record_type,))
        raise SchemaError(f"recursive record type: {path}").with_context(record=record_type.__name__)

    try:
        hints = typing.get_type_hints(record_type)
    except NameError as e:
        raise SchemaError(
            f"cannot resolve annotations of {record_type.__name__}: {e}", cause=e
        ).with_context(record=record_type.__name__) from e

    inner_stack = stack + (record_type,)
    items = []
    for f in dataclasses.fields(record_type):
        try:
            items.append(_derive_item(f, hints[f.name], inner_stack))
        except SchemaError as e:
            raise e.with_context(record=record_type.__name__, field=f.name)

    primaries = [item.name for item in items if item.is_primary]
    if len(primaries) > 1:
        raise SchemaError(
            f"{record_type.__name__} declares more than one primary key: {primaries}"
        ).with_context(record=record_type.__name__)

    return Info(
        record_type.__name__,
        record_type.__module__,
        is_pointer,
        items,
        record_type,
    )


def _derive_item(f: dataclasses.Field, hint: Any, stack: tuple[type, ...]) -> Item:
    tag = Tag.parse(f.metadata.get(ORM_TAG, ""), f.name)
    field_type, is_pointer = unwrap_optional(hint)
    kind = classify(field_type)

    if kind is TypeKind.STRUCT:
        if tag.is_primary:
            raise SchemaError(f"relation field {f.name!r} cannot be a primary key")
        return Item(
            f.name,
            tag,
            kind,
            is_pointer,
            depend_info=_derive(hint, stack),
            ownership=Ownership.REFERENCED if is_pointer else Ownership.OWNED,
        )

    if kind is TypeKind.SLICE:
        element = list_element(field_type)
        element_type, elem_pointer = unwrap_optional(element)
        elem_kind = classify(element_type)
        if elem_kind is TypeKind.SLICE:
            raise SchemaError(f"field {f.name!r}: nested lists are not representable")
        if elem_kind is TypeKind.STRUCT:
            if tag.is_primary:
                raise SchemaError(f"relation field {f.name!r} cannot be a primary key")
            return Item(
                f.name,
                tag,
                kind,
                is_pointer,
                depend_info=_derive(element, stack),
                elem_kind=elem_kind,
                elem_pointer=elem_pointer,
                ownership=Ownership.REFERENCED if elem_pointer else Ownership.OWNED,
            )
        return Item(f.name, tag, kind, is_pointer, elem_kind=elem_kind, elem_pointer=elem_pointer)

    return Item(f.name, tag, kind, is_pointer)


__all__ = ["Info", "derive_info"]
