"""Build configured ``Orm`` instances from settings.

``OrmFactory`` holds one SQLAlchemy engine (created lazily from
``settings.database_url``) and a ``ProviderRegistry``. Every ``new_orm``
call gets its own connection through a fresh ``EngineExecutor`` and the
shared provider of its owner.

Example:
    factory = OrmFactory.from_env()          # ORMSPINE_DATABASE_URL=sqlite:///app.db
    orm = factory.new_orm("billing")
    try:
        orm.create(Invoice)
    finally:
        orm.release()
"""

from __future__ import annotations

import threading

from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError

from ormspine.builder import BuilderRegistry, builder_registry
from ormspine.errors import ConfigError
from ormspine.executor.engine import EngineExecutor, create_orm_engine
from ormspine.filter import Filter
from ormspine.logging import configure_from_settings, get_logger
from ormspine.orm import Orm
from ormspine.provider import Provider, ProviderRegistry
from ormspine.settings import OrmSettings, get_settings

logger = get_logger(__name__)


class OrmFactory:
    """Creates mappers for owners over one configured backing store."""

    def __init__(
        self,
        settings: OrmSettings | None = None,
        registry: ProviderRegistry | None = None,
        builders: BuilderRegistry | None = None,
    ):
        self.settings = settings or get_settings()
        self.registry = registry if registry is not None else ProviderRegistry()
        self._builders = builders if builders is not None else builder_registry
        self._engine: Engine | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_env(cls) -> OrmFactory:
        """Factory over environment settings, with logging configured from them."""
        settings = get_settings()
        configure_from_settings(settings)
        return cls(settings)

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            with self._lock:
                if self._engine is None:
                    if not self.settings.is_configured:
                        raise ConfigError(
                            "no backing store configured; set ORMSPINE_DATABASE_URL"
                        )
                    self._engine = create_orm_engine(
                        self.settings.database_url, echo=self.settings.database_echo
                    )
                    logger.info("factory.engine_created", backend=self.backend)
        return self._engine

    @property
    def backend(self) -> str:
        """Backend name of the configured URL (``sqlite+pysqlite`` -> ``sqlite``)."""
        if not self.settings.is_configured:
            raise ConfigError("no backing store configured; set ORMSPINE_DATABASE_URL")
        try:
            return make_url(self.settings.database_url).get_backend_name()
        except ArgumentError as e:
            raise ConfigError(f"invalid database url: {e}", cause=e) from e

    def get_provider(self, owner: str) -> Provider:
        return self.registry.get_or_create(owner)

    def get_filter(self, owner: str) -> Filter:
        return self.get_provider(owner).new_filter()

    def new_orm(self, owner: str) -> Orm:
        """A mapper with its own connection, sharing ``owner``'s provider."""
        provider = self.get_provider(owner)
        builder = self._builders.create(self.backend, resolve=provider.get_info)
        return Orm(EngineExecutor(self.engine), provider, builder, settings=self.settings)

    def dispose(self) -> None:
        """Dispose of the engine's connection pool."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None


__all__ = ["OrmFactory"]
