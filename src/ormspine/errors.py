"""
Structured error types for ormspine.

Every failure raised by the mapper is an ``OrmError`` subclass carrying a
category, a structured context (operation, record, field, SQL) and an
optional chained cause. Errors propagate immediately: nothing in the
mapper retries, suppresses or rolls back.

Manifesto:
    - **Typed Error Hierarchy:** One subclass per failure domain
    - **Fail Fast:** The first failing sub-step aborts the operation
    - **Rich Context:** The error names the operation and the relation field
    - **Error Chaining:** Driver exceptions are preserved as ``cause``

Architecture:
    ::

        OrmError                      category, context, cause
         ├── ConfigError              CONFIG         no store, unknown backend
         ├── SchemaError              SCHEMA         bad tags, unknown record
         ├── TypeMismatchError        TYPE_MISMATCH  value vs declared kind
         ├── ConsistencyError         CONSISTENCY    row counts, key reads
         ├── NotFoundError            NOT_FOUND      missing row or join row
         └── ExecutorError            EXECUTOR       driver failure, sql kept

Examples:
    Tagging an error with the failing relation field:

    >>> error = ExecutorError("no such table: Group")
    >>> error.with_context(operation="create", field="users")
    ExecutorError('no such table: Group', category=EXECUTOR)
    >>> error.context.field
    'users'

    Chaining a driver error:

    >>> try:
    ...     raise sqlite3.OperationalError("locked")
    ... except sqlite3.Error as e:
    ...     raise ExecutorError("statement failed", cause=e) from e
    Traceback (most recent call last):
    ...
    ExecutorError: statement failed

Guardrails:
    ❌ DON'T: Raise bare ValueError/TypeError from mapper code
    ✅ DO: Raise the OrmError subclass for the failure domain

    ❌ DON'T: Swallow a driver exception
    ✅ DO: Pass it as cause= and re-raise with ``from``

Tags:
    error-handling, exception-hierarchy, error-context, ormspine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

import dataclasses
import sqlite3
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Error categories for classification and routing.

    Each category maps to one failure domain of the mapper:

    Attributes:
        CONFIG: No backing store configured, bad settings
        SCHEMA: A record type cannot be mapped to a schema
        TYPE_MISMATCH: A value or filter operand disagrees with a field kind
        CONSISTENCY: An operation saw an unexpected affected-row count
        NOT_FOUND: A row or mandatory relation dependent is missing
        EXECUTOR: The database executor or builder failed
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    CONFIG = "CONFIG"
    SCHEMA = "SCHEMA"
    TYPE_MISMATCH = "TYPE_MISMATCH"
    CONSISTENCY = "CONSISTENCY"
    NOT_FOUND = "NOT_FOUND"
    EXECUTOR = "EXECUTOR"

    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        operation: Mapper operation (create, insert, query, ...)
        record: Record type name being processed
        field: Relation or column field that failed
        sql: Statement text that failed, if any
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    record: str | None = None
    field: str | None = None
    sql: str | None = None

    metadata: dict[str, Any] = dataclasses.field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Set fields only, with metadata merged in last."""
        known = {
            "operation": self.operation,
            "record": self.record,
            "field": self.field,
            "sql": self.sql,
        }
        return {k: v for k, v in known.items() if v is not None} | self.metadata


class OrmError(Exception):
    """
    Base exception for all ormspine errors.

    Subclasses set ``default_category``. Context is filled in as the error
    travels up through the mapper: the executor records the SQL, the
    orchestrator records the operation, the record and the relation field.
    Keys that are already set are kept, so the innermost context wins.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> OrmError:
        """
        Add context to this error (fluent API).

        Usage:
            raise NotFoundError("no dependent").with_context(field="owner")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                if getattr(self.context, key) is None:
                    setattr(self.context, key, value)
            else:
                self.context.metadata.setdefault(key, value)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Flat form for structured log events."""
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if context := self.context.to_dict():
            data["context"] = context
        if self.cause is not None:
            data["cause"] = str(self.cause)
        return data

    def __repr__(self) -> str:
        name = type(self).__name__
        return f"{name}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION / SCHEMA
# =============================================================================


class ConfigError(OrmError):
    """
    Configuration error.

    Raised when no backing store is configured or a named component is
    unknown. Configuration must be fixed before retrying.
    """

    default_category = ErrorCategory.CONFIG


class SchemaError(OrmError):
    """A record type, or one of its fields, cannot be mapped."""

    default_category = ErrorCategory.SCHEMA


# =============================================================================
# VALUE ERRORS
# =============================================================================


class TypeMismatchError(OrmError):
    """A value disagrees with the declared kind of its target field."""

    default_category = ErrorCategory.TYPE_MISMATCH

    def __init__(
        self,
        message: str,
        *,
        value: Any = None,
        expected: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.value = value
        self.expected = expected


class ConsistencyError(OrmError):
    """An operation expecting exactly one affected row saw another count."""

    default_category = ErrorCategory.CONSISTENCY

    def __init__(self, message: str, *, expected: int = 1, actual: int | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.expected = expected
        self.actual = actual


class NotFoundError(OrmError):
    """A row, or a mandatory relation dependent, does not exist."""

    default_category = ErrorCategory.NOT_FOUND


# =============================================================================
# EXECUTOR
# =============================================================================


class ExecutorError(OrmError):
    """Error surfaced from the database executor or statement builder."""

    default_category = ErrorCategory.EXECUTOR


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def categorize_error(error: Exception) -> ErrorCategory:
    """Category of any exception; driver and builtin errors are mapped too."""
    if isinstance(error, OrmError):
        return error.category
    if isinstance(error, sqlite3.Error):
        return ErrorCategory.EXECUTOR
    if isinstance(error, (TypeError, ValueError)):
        return ErrorCategory.TYPE_MISMATCH
    if isinstance(error, (KeyError, AttributeError)):
        return ErrorCategory.CONFIG
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "OrmError",
    "ConfigError",
    "SchemaError",
    "TypeMismatchError",
    "ConsistencyError",
    "NotFoundError",
    "ExecutorError",
    "categorize_error",
]
