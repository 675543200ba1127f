"""Tests for ``ormspine.types``: kind classification and numeric narrowing."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Optional, Union

import pytest

from ormspine.errors import SchemaError, TypeMismatchError
from ormspine.types import (
    Float32,
    Int8,
    TypeKind,
    UInt16,
    classify,
    classify_value,
    list_element,
    narrow_float,
    narrow_int,
    unwrap_optional,
)
from tests._support.records import User


class TestClassify:
    @pytest.mark.parametrize(
        "tp, kind",
        [
            (bool, TypeKind.BOOLEAN),
            (int, TypeKind.INT),
            (float, TypeKind.FLOAT64),
            (str, TypeKind.STRING),
            (datetime, TypeKind.DATETIME),
            (Int8, TypeKind.INT8),
            (UInt16, TypeKind.UINT16),
            (Float32, TypeKind.FLOAT32),
            (list[int], TypeKind.SLICE),
            (User, TypeKind.STRUCT),
        ],
    )
    def test_supported_types(self, tp, kind):
        assert classify(tp) is kind

    @pytest.mark.parametrize("tp", [dict, dict[str, int], set[int], tuple[int, int], bytes, object])
    def test_unsupported_types_raise(self, tp):
        with pytest.raises(SchemaError):
            classify(tp)

    def test_classify_is_pure(self):
        assert classify(Int8) is classify(Int8)


class TestUnwrapOptional:
    def test_plain_type_is_not_pointer(self):
        assert unwrap_optional(int) == (int, False)

    def test_optional_is_pointer(self):
        assert unwrap_optional(Optional[User]) == (User, True)

    def test_pipe_union_with_none(self):
        assert unwrap_optional(str | None) == (str, True)

    def test_multi_type_union_rejected(self):
        with pytest.raises(SchemaError):
            unwrap_optional(Union[int, str])

    def test_list_element(self):
        assert list_element(list[Optional[User]]) == Optional[User]

    def test_bare_list_has_no_element(self):
        with pytest.raises(SchemaError):
            list_element(list)


class TestClassifyValue:
    def test_bool_before_int(self):
        assert classify_value(True) is TypeKind.BOOLEAN
        assert classify_value(1) is TypeKind.INT

    def test_basic_values(self):
        assert classify_value(1.5) is TypeKind.FLOAT64
        assert classify_value("x") is TypeKind.STRING
        assert classify_value(datetime(2024, 1, 1)) is TypeKind.DATETIME

    def test_composites(self):
        assert classify_value([1, 2]) is TypeKind.SLICE
        assert classify_value(User()) is TypeKind.STRUCT

    def test_record_class_is_not_a_value(self):
        with pytest.raises(TypeMismatchError):
            classify_value(User)

    def test_unknown_value_raises(self):
        with pytest.raises(TypeMismatchError):
            classify_value({"a": 1})


class TestTypeKindFamilies:
    def test_integer_family(self):
        assert TypeKind.UINT64.is_integer
        assert TypeKind.INT8.family == TypeKind.UINT.family == "integer"

    def test_float_family(self):
        assert TypeKind.FLOAT32.is_float
        assert TypeKind.FLOAT32.family == "float"

    def test_basic(self):
        assert TypeKind.DATETIME.is_basic
        assert not TypeKind.STRUCT.is_basic
        assert not TypeKind.SLICE.is_basic


class TestNarrowing:
    def test_in_range_values_unchanged(self):
        assert narrow_int(100, TypeKind.INT8) == 100
        assert narrow_int(-100, TypeKind.INT8) == -100

    def test_signed_overflow_wraps(self):
        assert narrow_int(300, TypeKind.INT8) == 44
        assert narrow_int(200, TypeKind.INT8) == -56
        assert narrow_int(2**31, TypeKind.INT32) == -(2**31)

    def test_unsigned_negative_wraps(self):
        assert narrow_int(-1, TypeKind.UINT8) == 255
        assert narrow_int(70000, TypeKind.UINT16) == 70000 - 65536

    def test_float_truncates_toward_zero(self):
        assert narrow_int(3.9, TypeKind.INT16) == 3
        assert narrow_int(-3.9, TypeKind.INT16) == -3

    def test_nan_cannot_narrow(self):
        with pytest.raises(TypeMismatchError):
            narrow_int(math.nan, TypeKind.INT)

    def test_float32_rounds_to_single_precision(self):
        narrowed = narrow_float(0.1, TypeKind.FLOAT32)
        assert narrowed != 0.1
        assert narrowed == pytest.approx(0.1, rel=1e-7)

    def test_float32_overflow_is_infinite(self):
        assert narrow_float(1e40, TypeKind.FLOAT32) == math.inf

    def test_float64_keeps_value(self):
        assert narrow_float(3, TypeKind.FLOAT64) == 3.0
