"""
ormspine logging - structured logging for the mapper.

Library modules only ever call ``get_logger(__name__)``; applications
call ``configure_logging`` (or ``configure_from_settings``) once at
startup. Every mapper operation runs inside ``log_context(owner=...)`` so
the statements it traces carry the provider owner.

Architecture:
    ::

        configure_logging(level="INFO", json_format=True)
              │
              ▼
        processor chain
          merge_contextvars   owner, plus anything bound by the caller
          add_log_level
          TimeStamper         optional, iso
          service             "ormspine" unless overridden
          clip_sql            long statements shortened above DEBUG
          JSONRenderer | ConsoleRenderer

        logger = get_logger(__name__)
        logger.debug("orm.sql", step="insert", sql="INSERT INTO `User` ...")

Examples:
    >>> from ormspine.logging import configure_logging, get_logger, log_context
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> with log_context(owner="billing"):
    ...     get_logger(__name__).info("orm.table_created", table="User")

Tags:
    logging, structlog, observability, ormspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from ormspine.settings import OrmSettings

SQL_PREVIEW_CHARS = 240


def _service(name: str) -> Processor:
    def add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", name)
        return event_dict

    return add_service


def _clip_sql(limit: int | None) -> Processor:
    def clip_sql(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        sql = event_dict.get("sql")
        if limit is not None and isinstance(sql, str) and len(sql) > limit:
            event_dict["sql"] = f"{sql[:limit]}... ({len(sql)} chars)"
        return event_dict

    return clip_sql


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "ormspine",
    add_timestamp: bool = True,
) -> None:
    """Configure structlog for the process.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR)
        json_format: JSON lines when True, console when False; when None,
            JSON unless stdout is a terminal
        service: Value of the ``service`` key on every event
        add_timestamp: Prefix events with an ISO timestamp
    """
    numeric_level = getattr(logging, level.upper())
    if json_format is None:
        json_format = not sys.stdout.isatty()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
    ]
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors += [
        _service(service),
        _clip_sql(None if numeric_level <= logging.DEBUG else SQL_PREVIEW_CHARS),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer(colors=False),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    # SQLAlchemy's echo output goes through stdlib logging
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)


def configure_from_settings(settings: OrmSettings) -> None:
    """Configure logging from ``log_level`` and ``log_format`` of ``settings``."""
    configure_logging(level=settings.log_level, json_format=settings.log_format == "json")


def get_logger(name: str | None = None) -> Any:
    """Lazy structured logger; ``name`` is bound as the ``logger_name`` key."""
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(logger_name=name)


@contextmanager
def log_context(**values: Any) -> Iterator[None]:
    """Bind ``values`` to every event logged inside the block.

    Keys bound by an enclosing block are restored on exit.
    """
    with structlog.contextvars.bound_contextvars(**values):
        yield


def clear_context() -> None:
    """Drop every context-bound value."""
    structlog.contextvars.clear_contextvars()


__all__ = [
    "SQL_PREVIEW_CHARS",
    "clear_context",
    "configure_from_settings",
    "configure_logging",
    "get_logger",
    "log_context",
]
