"""
Shared pytest fixtures for ormspine tests.

This module provides:
- A fresh in-memory SQLite executor per test
- A provider and a mapper wired to that executor
- Settings isolation from ORMSPINE_* variables in the environment
"""

import sys
from pathlib import Path
from typing import Generator

import pytest

# Ensure ormspine package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ormspine import Orm, OrmSettings, Provider, SQLiteExecutor
from ormspine.settings import clear_settings_cache


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)
        if "orm" in test_path.parts:
            item.add_marker(pytest.mark.integration)
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Strip ORMSPINE_* variables and reset the settings cache around each test."""
    import os

    for key in list(os.environ):
        if key.startswith("ORMSPINE_"):
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> OrmSettings:
    return OrmSettings(_env_file=None, trace_sql=True)


@pytest.fixture
def executor() -> Generator[SQLiteExecutor, None, None]:
    executor = SQLiteExecutor(":memory:")
    yield executor
    executor.release()


@pytest.fixture
def provider() -> Provider:
    return Provider("test")


@pytest.fixture
def orm(executor: SQLiteExecutor, provider: Provider, settings: OrmSettings) -> Orm:
    return Orm(executor, provider, settings=settings)
