"""Environment-driven settings for ormspine.

``OrmSettings`` reads ``ORMSPINE_*`` environment variables (and a local
``.env`` file) through pydantic-settings. The factory uses it to locate the
backing store; the orchestrator uses it for SQL tracing and the relation
query depth.

Examples:
    >>> import os
    >>> os.environ["ORMSPINE_DATABASE_URL"] = "sqlite:///app.db"
    >>> clear_settings_cache()
    >>> get_settings().database_url
    'sqlite:///app.db'

Tags:
    settings, configuration, pydantic, environment, ormspine

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OrmSettings(BaseSettings):
    """Mapper settings.

    Fields
    ──────
    database_url    : SQLAlchemy URL of the backing store (None = not configured)
    database_echo   : Echo every statement through SQLAlchemy's engine logger
    log_level       : Structlog log level
    log_format      : "json" or "console"
    trace_sql       : Log every generated statement at debug level
    relation_depth  : How many relation levels Query resolves
    """

    model_config = SettingsConfigDict(
        env_prefix="ORMSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Storage ──────────────────────────────────────────────────
    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy database URL, e.g. sqlite:///app.db",
    )
    database_echo: bool = False

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: str = Field(default="console", description="json | console")
    trace_sql: bool = False

    # ── Mapping ──────────────────────────────────────────────────
    relation_depth: int = Field(default=3, ge=1, description="Relation levels resolved by query")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "console"):
            raise ValueError(f"log_format must be 'json' or 'console', got {v!r}")
        return v

    @property
    def is_configured(self) -> bool:
        """True when a backing store URL is set."""
        return bool(self.database_url)


@lru_cache(maxsize=1)
def get_settings() -> OrmSettings:
    """Return the cached settings instance."""
    return OrmSettings()


def clear_settings_cache() -> None:
    """Clear cached settings (for tests)."""
    get_settings.cache_clear()


__all__ = [
    "OrmSettings",
    "get_settings",
    "clear_settings_cache",
]
