"""Tests for the ormspine error hierarchy."""

from __future__ import annotations

import sqlite3

import pytest

from ormspine.errors import (
    ConfigError,
    ConsistencyError,
    ErrorCategory,
    ErrorContext,
    ExecutorError,
    NotFoundError,
    OrmError,
    SchemaError,
    TypeMismatchError,
    categorize_error,
)


class TestCategories:
    @pytest.mark.parametrize(
        "error_class, category",
        [
            (ConfigError, ErrorCategory.CONFIG),
            (SchemaError, ErrorCategory.SCHEMA),
            (TypeMismatchError, ErrorCategory.TYPE_MISMATCH),
            (ConsistencyError, ErrorCategory.CONSISTENCY),
            (NotFoundError, ErrorCategory.NOT_FOUND),
            (ExecutorError, ErrorCategory.EXECUTOR),
        ],
    )
    def test_default_category(self, error_class, category):
        error = error_class("x")
        assert error.category == category
        assert isinstance(error, OrmError)

    def test_category_override(self):
        assert OrmError("x", category=ErrorCategory.CONFIG).category == ErrorCategory.CONFIG


class TestContext:
    def test_with_context_is_fluent(self):
        error = NotFoundError("gone")
        assert error.with_context(record="User") is error
        assert error.context.record == "User"

    def test_innermost_value_wins(self):
        error = ExecutorError("boom").with_context(field="users", sql="INSERT ...")
        error.with_context(field="profile", operation="insert")
        assert error.context.field == "users"
        assert error.context.operation == "insert"
        assert error.context.sql == "INSERT ..."

    def test_unknown_keys_go_to_metadata(self):
        error = SchemaError("bad").with_context(owner="billing")
        assert error.context.metadata == {"owner": "billing"}

    def test_context_to_dict_skips_unset(self):
        assert ErrorContext(record="User").to_dict() == {"record": "User"}


class TestSerialization:
    def test_to_dict(self):
        cause = sqlite3.OperationalError("no such table: User")
        error = ExecutorError("no such table", cause=cause).with_context(sql="SELECT 1")
        data = error.to_dict()
        assert data["error_type"] == "ExecutorError"
        assert data["category"] == "EXECUTOR"
        assert data["context"] == {"sql": "SELECT 1"}
        assert data["cause"] == "no such table: User"
        assert error.__cause__ is cause

    def test_repr(self):
        assert repr(ConfigError("no url")) == "ConfigError('no url', category=CONFIG)"

    def test_value_errors_carry_details(self):
        mismatch = TypeMismatchError("bad", value="x", expected="INT")
        assert (mismatch.value, mismatch.expected) == ("x", "INT")
        consistency = ConsistencyError("bad", actual=3)
        assert (consistency.expected, consistency.actual) == (1, 3)


class TestCategorizeError:
    def test_orm_error(self):
        assert categorize_error(NotFoundError("x")) == ErrorCategory.NOT_FOUND

    def test_builtin_errors(self):
        assert categorize_error(TypeError()) == ErrorCategory.TYPE_MISMATCH
        assert categorize_error(KeyError()) == ErrorCategory.CONFIG
        assert categorize_error(RuntimeError()) == ErrorCategory.UNKNOWN

    def test_driver_errors(self):
        assert categorize_error(sqlite3.OperationalError("locked")) == ErrorCategory.EXECUTOR
        assert categorize_error(ValueError()) == ErrorCategory.TYPE_MISMATCH
