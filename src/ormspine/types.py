"""
Type classification for mapped fields.

A closed set of kinds (``TypeKind``) describes every storable field. The
classifier is a pure function from a type descriptor to a kind; the
schema model, the value marshaller and the query filter all dispatch on
the result.

Width-specific numeric kinds are declared with ``NewType`` markers so a
record stays an ordinary dataclass::

    @dataclass
    class Reading:
        id: int = orm_field("id key auto", default=0)
        level: UInt8 = orm_field("level", default=UInt8(0))
        ratio: Float32 = orm_field("ratio", default=Float32(0.0))

Tags:
    types, classification, introspection, ormspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import dataclasses
import math
import struct
import types as _pytypes
import typing
from datetime import datetime
from enum import Enum
from typing import Any, NewType, Union

from ormspine.errors import SchemaError, TypeMismatchError

Int8 = NewType("Int8", int)
Int16 = NewType("Int16", int)
Int32 = NewType("Int32", int)
Int64 = NewType("Int64", int)
UInt8 = NewType("UInt8", int)
UInt16 = NewType("UInt16", int)
UInt32 = NewType("UInt32", int)
UInt = NewType("UInt", int)
UInt64 = NewType("UInt64", int)
Float32 = NewType("Float32", float)
Float64 = NewType("Float64", float)


class TypeKind(str, Enum):
    """Closed set of storable field kinds."""

    BOOLEAN = "bool"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT = "int"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT = "uint"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STRING = "string"
    DATETIME = "datetime"
    STRUCT = "struct"
    SLICE = "slice"

    @property
    def is_integer(self) -> bool:
        return self in _INT_WIDTHS

    @property
    def is_float(self) -> bool:
        return self in (TypeKind.FLOAT32, TypeKind.FLOAT64)

    @property
    def is_numeric(self) -> bool:
        return self.is_integer or self.is_float

    @property
    def is_basic(self) -> bool:
        """Scalar kinds that map to a single column value."""
        return self not in (TypeKind.STRUCT, TypeKind.SLICE)

    @property
    def family(self) -> str:
        """Comparison family used when checking filter operands."""
        if self.is_integer:
            return "integer"
        if self.is_float:
            return "float"
        return self.value


# (bits, signed)
_INT_WIDTHS: dict[TypeKind, tuple[int, bool]] = {
    TypeKind.INT8: (8, True),
    TypeKind.INT16: (16, True),
    TypeKind.INT32: (32, True),
    TypeKind.INT: (64, True),
    TypeKind.INT64: (64, True),
    TypeKind.UINT8: (8, False),
    TypeKind.UINT16: (16, False),
    TypeKind.UINT32: (32, False),
    TypeKind.UINT: (64, False),
    TypeKind.UINT64: (64, False),
}

_NEWTYPE_KINDS: dict[Any, TypeKind] = {
    Int8: TypeKind.INT8,
    Int16: TypeKind.INT16,
    Int32: TypeKind.INT32,
    Int64: TypeKind.INT64,
    UInt8: TypeKind.UINT8,
    UInt16: TypeKind.UINT16,
    UInt32: TypeKind.UINT32,
    UInt: TypeKind.UINT,
    UInt64: TypeKind.UINT64,
    Float32: TypeKind.FLOAT32,
    Float64: TypeKind.FLOAT64,
}

_BUILTIN_KINDS: dict[Any, TypeKind] = {
    bool: TypeKind.BOOLEAN,
    int: TypeKind.INT,
    float: TypeKind.FLOAT64,
    str: TypeKind.STRING,
    datetime: TypeKind.DATETIME,
}


def unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Strip one ``Optional`` wrap.

    Returns ``(inner_type, is_pointer)``. Unions of more than one concrete
    type are not representable.
    """
    origin = typing.get_origin(tp)
    if origin is Union or origin is _pytypes.UnionType:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) != 1:
            raise SchemaError(f"union type {tp!r} is not representable")
        return args[0], True
    return tp, False


def classify(tp: Any) -> TypeKind:
    """Classify a (non-Optional) type descriptor.

    Raises:
        SchemaError: the type is not representable
    """
    if tp in _NEWTYPE_KINDS:
        return _NEWTYPE_KINDS[tp]
    if tp in _BUILTIN_KINDS:
        return _BUILTIN_KINDS[tp]
    if typing.get_origin(tp) is list or tp is list:
        return TypeKind.SLICE
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        return TypeKind.STRUCT
    raise SchemaError(f"type {tp!r} is not representable")


def list_element(tp: Any) -> Any:
    """Element type of a ``list[X]`` descriptor."""
    args = typing.get_args(tp)
    if len(args) != 1:
        raise SchemaError(f"list type {tp!r} must declare one element type")
    return args[0]


def classify_value(value: Any) -> TypeKind:
    """Classify a runtime operand.

    ``bool`` is checked before ``int`` since it is an ``int`` subclass.

    Raises:
        TypeMismatchError: the value has no storable kind
    """
    if isinstance(value, bool):
        return TypeKind.BOOLEAN
    if isinstance(value, int):
        return TypeKind.INT
    if isinstance(value, float):
        return TypeKind.FLOAT64
    if isinstance(value, str):
        return TypeKind.STRING
    if isinstance(value, datetime):
        return TypeKind.DATETIME
    if isinstance(value, (list, tuple)):
        return TypeKind.SLICE
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return TypeKind.STRUCT
    raise TypeMismatchError(f"value {value!r} has no storable kind", value=value)


def narrow_int(value: int | float, kind: TypeKind) -> int:
    """Convert to the exact width and signedness of an integer kind.

    Floats truncate toward zero and out-of-range values wrap around
    modulo the width, the way a fixed-width integer conversion does.
    """
    bits, signed = _INT_WIDTHS[kind]
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise TypeMismatchError(f"cannot narrow {value!r} to {kind.value}", value=value, expected=kind)
        value = int(value)
    mask = (1 << bits) - 1
    narrowed = value & mask
    if signed and narrowed >= 1 << (bits - 1):
        narrowed -= 1 << bits
    return narrowed


def narrow_float(value: int | float, kind: TypeKind) -> float:
    """Convert to a float kind; FLOAT32 rounds to single precision."""
    value = float(value)
    if kind is TypeKind.FLOAT32:
        try:
            return struct.unpack("f", struct.pack("f", value))[0]
        except OverflowError:
            return math.copysign(math.inf, value)
    return value


__all__ = [
    "TypeKind",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt",
    "UInt64",
    "Float32",
    "Float64",
    "unwrap_optional",
    "classify",
    "classify_value",
    "list_element",
    "narrow_int",
    "narrow_float",
]
