"""
Item: one mapped field of a record type.

An ``Item`` pairs the immutable description of a field (tag, kind,
pointer-wrap, dependent schema, ownership) with a value slot. Template
items derived from a type hold a local slot; items of an ``Info`` bound
to a live record read and write that record's attribute directly.

Assignment through ``set_value`` is type checked::

    input kind      │ accepted by
    ────────────────┼──────────────────────────────────────
    bool            │ BOOLEAN
    int / float     │ integer kinds (narrowed), float kinds
    str             │ STRING, DATETIME (RFC 3339 layout)
    datetime        │ DATETIME
    mapping/record  │ STRUCT
    list / tuple    │ SLICE (element by element)
    None            │ pointer-wrapped fields only

Anything else raises ``TypeMismatchError`` and leaves the slot untouched.
Numeric narrowing truncates and wraps silently, like a fixed-width
integer conversion.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from ormspine.errors import TypeMismatchError
from ormspine.model.tag import Tag
from ormspine.types import TypeKind, narrow_float, narrow_int

if TYPE_CHECKING:
    from ormspine.model.info import Info

DATETIME_LAYOUTS = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
)

ZERO_DATETIME = datetime(1, 1, 1)


class Ownership(str, Enum):
    """Lifecycle relationship between a record and a relation's dependents."""

    OWNED = "owned"
    REFERENCED = "referenced"


def parse_datetime(text: str) -> datetime:
    """Parse an RFC 3339 timestamp (offset optional)."""
    for layout in DATETIME_LAYOUTS:
        try:
            return datetime.strptime(text, layout)
        except ValueError:
            continue
    raise TypeMismatchError(f"illegal datetime value {text!r}", value=text, expected=TypeKind.DATETIME)


class _LocalSlot:
    __slots__ = ("value",)

    def __init__(self, value: Any = None):
        self.value = value

    def get(self) -> Any:
        return self.value

    def set(self, value: Any) -> None:
        self.value = value


class _AttrSlot:
    __slots__ = ("entity", "attr")

    def __init__(self, entity: Any, attr: str):
        self.entity = entity
        self.attr = attr

    def get(self) -> Any:
        return getattr(self.entity, self.attr)

    def set(self, value: Any) -> None:
        setattr(self.entity, self.attr, value)


class Item:
    """One mapped field.

    Attributes:
        name: Attribute name on the record class
        tag: Parsed ``orm`` tag
        type_kind: Declared kind of the field
        is_pointer: The field is ``Optional``
        depend_info: Dependent schema for record and list-of-record fields
        elem_kind: Element kind for list fields
        elem_pointer: List elements are ``Optional``
        ownership: OWNED or REFERENCED for relation fields
    """

    def __init__(
        self,
        name: str,
        tag: Tag,
        type_kind: TypeKind,
        is_pointer: bool = False,
        *,
        depend_info: Info | None = None,
        elem_kind: TypeKind | None = None,
        elem_pointer: bool = False,
        ownership: Ownership | None = None,
    ):
        self.name = name
        self.tag = tag
        self.type_kind = type_kind
        self.is_pointer = is_pointer
        self.depend_info = depend_info
        self.elem_kind = elem_kind
        self.elem_pointer = elem_pointer
        self.ownership = ownership
        self._slot: _LocalSlot | _AttrSlot = _LocalSlot()

    @property
    def storage_name(self) -> str:
        return self.tag.name

    @property
    def is_primary(self) -> bool:
        return self.tag.is_primary

    @property
    def is_auto(self) -> bool:
        return self.tag.is_auto

    @property
    def is_relation(self) -> bool:
        return self.depend_info is not None

    @property
    def is_owned(self) -> bool:
        return self.ownership is Ownership.OWNED

    @property
    def value(self) -> Any:
        return self._slot.get()

    def set_value(self, value: Any) -> None:
        """Type-checked assignment into the slot."""
        try:
            converted = self._convert(value)
        except TypeMismatchError as e:
            raise e.with_context(field=self.name)
        self._slot.set(converted)

    def update_value(self, value: Any) -> None:
        """Unchecked write, for values already decoded to the declared kind."""
        self._slot.set(value)

    def zero_value(self) -> Any:
        """Value a freshly constructed record holds for this field."""
        if self.is_pointer:
            return None
        return _zero(self.type_kind, self.depend_info)

    def bind(self, entity: Any) -> Item:
        """Copy of this item whose slot is ``entity``'s attribute."""
        bound = self.copy()
        bound._slot = _AttrSlot(entity, self.name)
        return bound

    def copy(self) -> Item:
        clone = Item(
            self.name,
            self.tag,
            self.type_kind,
            self.is_pointer,
            depend_info=self.depend_info,
            elem_kind=self.elem_kind,
            elem_pointer=self.elem_pointer,
            ownership=self.ownership,
        )
        clone._slot = _LocalSlot(self._slot.get())
        return clone

    def _convert(self, value: Any) -> Any:
        if value is None:
            if self.is_pointer:
                return None
            raise TypeMismatchError(
                f"field {self.name!r} is not optional", value=value, expected=self.type_kind
            )
        if self.type_kind is TypeKind.SLICE and isinstance(value, (list, tuple)):
            return [
                _coerce(self.elem_kind, self.elem_pointer, self.depend_info, v, self.name)
                for v in value
            ]
        return _coerce(self.type_kind, self.is_pointer, self.depend_info, value, self.name)

    def __repr__(self) -> str:
        return (
            f"Item(name={self.name!r}, storage={self.storage_name!r}, kind={self.type_kind.value}, "
            f"pointer={self.is_pointer}, primary={self.is_primary})"
        )


def _zero(kind: TypeKind | None, depend_info: Info | None) -> Any:
    if kind is TypeKind.BOOLEAN:
        return False
    if kind.is_integer:
        return 0
    if kind.is_float:
        return 0.0
    if kind is TypeKind.STRING:
        return ""
    if kind is TypeKind.DATETIME:
        return ZERO_DATETIME
    if kind is TypeKind.SLICE:
        return []
    return depend_info.new_entity()


def _coerce(
    kind: TypeKind | None,
    is_pointer: bool,
    depend_info: Info | None,
    value: Any,
    field_name: str,
) -> Any:
    if value is None:
        if is_pointer:
            return None
    elif isinstance(value, bool):
        if kind is TypeKind.BOOLEAN:
            return value
    elif isinstance(value, (int, float)):
        if kind.is_integer:
            return narrow_int(value, kind)
        if kind.is_float:
            return narrow_float(value, kind)
    elif isinstance(value, str):
        if kind is TypeKind.STRING:
            return value
        if kind is TypeKind.DATETIME:
            return parse_datetime(value)
    elif isinstance(value, datetime):
        if kind is TypeKind.DATETIME:
            return value
    elif isinstance(value, Mapping):
        if kind is TypeKind.STRUCT:
            return depend_info.from_mapping(value)
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        if kind is TypeKind.STRUCT and isinstance(value, depend_info.record_type):
            return value

    expected = kind.value if kind is not None else "unknown"
    raise TypeMismatchError(
        f"illegal value {value!r} for {expected} field {field_name!r}",
        value=value,
        expected=kind,
    )


__all__ = ["Item", "Ownership", "parse_datetime", "ZERO_DATETIME"]
