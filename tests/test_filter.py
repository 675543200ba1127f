"""Tests for ``ormspine.filter``: registration checks, rendering, pagination."""

from __future__ import annotations

from datetime import datetime

import pytest

from ormspine.errors import TypeMismatchError
from ormspine.filter import DEFAULT_PAGE_SIZE, Filter, FilterItem, Operator, PageWindow
from ormspine.model import derive_info
from tests._support.records import Group, Profile, User


@pytest.fixture
def user_info():
    return derive_info(User)


class TestPageWindow:
    def test_zero_size_and_number_normalize(self):
        window = PageWindow.normalize(0, 0)
        assert window.size == DEFAULT_PAGE_SIZE == 10
        assert window.limit == 10
        assert window.offset == 0

    def test_negative_number_never_negative_offset(self):
        window = PageWindow.normalize(20, -1)
        assert window.number == 1
        assert window.offset == 0

    def test_offset_from_number(self):
        window = PageWindow.normalize(25, 3)
        assert window.offset == 50

    def test_filter_page_stores_normalized_window(self):
        assert Filter().page(0, 0).pagination == PageWindow(10, 1)

    def test_no_window_by_default(self):
        assert Filter().pagination is None


class TestRegistration:
    def test_in_requires_list(self):
        flt = Filter()
        with pytest.raises(TypeMismatchError):
            flt.in_("id", 5)
        assert flt.items() == {}

    def test_not_in_requires_list(self):
        with pytest.raises(TypeMismatchError):
            Filter().not_in("id", "abc")

    def test_in_rejects_nested_lists(self):
        with pytest.raises(TypeMismatchError):
            Filter().in_("id", [[1]])

    def test_in_rejects_mixed_kinds(self):
        flt = Filter()
        with pytest.raises(TypeMismatchError, match="one kind"):
            flt.in_("age", [3, "zz"])
        assert flt.items() == {}

    def test_in_accepts_mixed_numbers(self):
        assert Filter().in_("score", [1, 2.5]).items()["score"].value == [1, 2.5]

    def test_below_rejects_record_operand(self):
        with pytest.raises(TypeMismatchError):
            Filter().below("profile", Profile(id=1))

    def test_above_rejects_list(self):
        with pytest.raises(TypeMismatchError):
            Filter().above("age", [1])

    def test_equal_rejects_list(self):
        with pytest.raises(TypeMismatchError):
            Filter().equal("age", [1, 2])

    def test_equal_accepts_record(self):
        flt = Filter().equal("profile", Profile(id=1))
        assert flt.items()["profile"].operator is Operator.EQUAL

    def test_like_requires_string(self):
        with pytest.raises(TypeMismatchError) as exc_info:
            Filter().like("name", 5)
        assert exc_info.value.context.field == "name"

    def test_none_rejected(self):
        with pytest.raises(TypeMismatchError):
            Filter().equal("nickname", None)

    def test_unsupported_operand_rejected(self):
        with pytest.raises(TypeMismatchError):
            Filter().equal("name", {"a": 1})

    def test_same_key_replaces(self):
        flt = Filter().equal("age", 1).above("age", 5)
        assert flt.items() == {"age": FilterItem(Operator.ABOVE, 5)}

    def test_chaining_returns_filter(self):
        flt = Filter().equal("name", "a").sort("age", ascending=False).page(5, 2)
        assert [k.key for k in flt.sort_keys] == ["age"]
        assert flt.pagination.offset == 5


class TestRender:
    @pytest.mark.parametrize(
        "operator, value, expected",
        [
            (Operator.EQUAL, 30, "`age` = 30"),
            (Operator.NOT_EQUAL, 30, "`age` != 30"),
            (Operator.BELOW, 30, "`age` < 30"),
            (Operator.ABOVE, 30, "`age` > 30"),
            (Operator.IN, [1, 2, 3], "`age` in (1,2,3)"),
            (Operator.NOT_IN, [4], "`age` not in (4)"),
        ],
    )
    def test_templates(self, user_info, operator, value, expected):
        item = user_info.item("age")
        assert FilterItem(operator, value).render("age", item) == expected

    def test_like_strips_quotes(self, user_info):
        rendered = FilterItem(Operator.LIKE, "ad").render("name", user_info.item("name"))
        assert rendered == "`name` LIKE '%ad%'"

    def test_like_escapes_wildcards(self, user_info):
        rendered = FilterItem(Operator.LIKE, "5%_off").render("name", user_info.item("name"))
        assert rendered == "`name` LIKE '%5\\%\\_off%' ESCAPE '\\'"

    def test_every_in_element_verified(self, user_info):
        with pytest.raises(TypeMismatchError):
            FilterItem(Operator.IN, [3, "zz"]).render("age", user_info.item("age"))

    def test_empty_in_renders_nothing(self, user_info):
        assert FilterItem(Operator.IN, []).render("age", user_info.item("age")) == ""
        assert FilterItem(Operator.NOT_IN, []).render("age", user_info.item("age")) == ""

    def test_datetime_operand(self, user_info):
        rendered = FilterItem(Operator.ABOVE, datetime(2024, 1, 1)).render("created", user_info.item("created"))
        assert rendered == "`created` > '2024-01-01 00:00:00'"

    def test_int_operand_on_float_field(self, user_info):
        assert FilterItem(Operator.ABOVE, 2).render("score", user_info.item("score")) == "`score` > 2"

    def test_kind_mismatch_fails_before_text(self, user_info):
        with pytest.raises(TypeMismatchError) as exc_info:
            FilterItem(Operator.EQUAL, "thirty").render("age", user_info.item("age"))
        assert exc_info.value.context.field == "age"

    def test_list_field_compares_elements(self, user_info):
        rendered = FilterItem(Operator.EQUAL, "x").render("tags", user_info.item("tags"))
        assert rendered == "`tags` = 'x'"

    def test_relation_operand_must_match_record_type(self):
        users = derive_info(Group).item("users")
        assert FilterItem(Operator.IN, [User(id=1), User(id=2)]).render("right", users) == "`right` in (1,2)"
        with pytest.raises(TypeMismatchError):
            FilterItem(Operator.EQUAL, Profile(id=1)).render("right", users)
