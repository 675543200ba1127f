"""Tests for OrmFactory."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from ormspine import BuilderRegistry, ConfigError, OrmFactory, OrmSettings, ProviderRegistry
from ormspine.executor import EngineExecutor
from tests._support.records import Group, User


@pytest.fixture
def file_settings(tmp_path):
    return OrmSettings(_env_file=None, database_url=f"sqlite:///{tmp_path / 'orm.db'}")


@pytest.fixture
def factory(file_settings):
    factory = OrmFactory(file_settings)
    yield factory
    factory.dispose()


class TestConfiguration:
    def test_unconfigured_store(self):
        factory = OrmFactory(OrmSettings(_env_file=None))
        with pytest.raises(ConfigError, match="ORMSPINE_DATABASE_URL"):
            factory.new_orm("billing")
        with pytest.raises(ConfigError):
            _ = factory.engine

    def test_invalid_url(self):
        factory = OrmFactory(OrmSettings(_env_file=None, database_url="not a url"))
        with pytest.raises(ConfigError, match="invalid database url"):
            _ = factory.backend

    def test_backend_without_builder(self):
        factory = OrmFactory(OrmSettings(_env_file=None, database_url="postgresql://u@localhost/db"))
        assert factory.backend == "postgresql"
        with pytest.raises(ConfigError, match="Unknown statement builder"):
            factory.new_orm("billing")

    def test_backend_name(self, factory):
        assert factory.backend == "sqlite"

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ORMSPINE_DATABASE_URL", f"sqlite:///{tmp_path / 'env.db'}")
        monkeypatch.setenv("ORMSPINE_LOG_LEVEL", "debug")
        with patch("ormspine.factory.configure_from_settings") as configure:
            factory = OrmFactory.from_env()
        configure.assert_called_once_with(factory.settings)
        assert factory.settings.log_level == "DEBUG"
        assert factory.backend == "sqlite"


class TestNewOrm:
    def test_orm_uses_engine_executor(self, factory):
        orm = factory.new_orm("billing")
        try:
            assert isinstance(orm.executor, EngineExecutor)
            assert orm.executor.engine is factory.engine
        finally:
            orm.release()

    def test_same_owner_shares_provider(self, factory):
        first, second = factory.new_orm("billing"), factory.new_orm("billing")
        other = factory.new_orm("hr")
        try:
            assert first.provider is second.provider
            assert other.provider is not first.provider
            assert first.executor is not second.executor
        finally:
            for orm in (first, second, other):
                orm.release()

    def test_end_to_end(self, factory):
        writer, reader = factory.new_orm("billing"), factory.new_orm("billing")
        try:
            writer.create(Group)
            group = writer.insert(Group(name="admins", users=[User(name="ada")]))
            loaded = reader.query(Group(id=group.id))
            assert [u.name for u in loaded.users] == ["ada"]
            assert reader.count(User) == 1
        finally:
            writer.release()
            reader.release()

    def test_filter_for_owner(self, factory):
        assert factory.get_filter("billing").items() == {}
        assert "billing" in factory.registry

    def test_shared_registry(self, file_settings):
        registry = ProviderRegistry()
        factory = OrmFactory(file_settings, registry)
        assert factory.get_provider("a") is registry.get("a")

    def test_empty_registries_kept(self, file_settings):
        providers, builders = ProviderRegistry(), BuilderRegistry()
        first = OrmFactory(file_settings, providers, builders)
        second = OrmFactory(file_settings, providers)
        assert first.get_provider("a") is second.get_provider("a")
        with pytest.raises(ConfigError, match="Unknown statement builder"):
            first.new_orm("a")
        first.dispose()

    def test_dispose_allows_new_engine(self, factory):
        engine = factory.engine
        factory.dispose()
        assert factory.engine is not engine
