"""Statement builders and their registry.

Consumers should never hard-code builder classes. ``BuilderRegistry`` maps
a backend name (the SQLAlchemy URL scheme without driver, e.g. ``sqlite``)
to a builder class.

Tags:
    ormspine, builder, registry, factory
"""

from __future__ import annotations

from typing import Any

from ormspine.builder.sqlite import SQLiteBuilder, quote_name
from ormspine.errors import ConfigError


class BuilderRegistry:
    """
    Registry for statement builder classes.

    Pre-registered builders:
    - ``sqlite``: :class:`SQLiteBuilder`
    """

    def __init__(self) -> None:
        self._factories: dict[str, type] = {}
        self._factories["sqlite"] = SQLiteBuilder

    def register(self, name: str, builder_class: type) -> None:
        """Register a builder class."""
        self._factories[name.lower()] = builder_class

    def create(self, name: str, **kwargs: Any) -> Any:
        """Create a builder by backend name."""
        name = name.lower()
        if name not in self._factories:
            raise ConfigError(f"Unknown statement builder: {name}")
        return self._factories[name](**kwargs)

    def list_builders(self) -> list[str]:
        """List registered builder names."""
        return sorted(self._factories.keys())


builder_registry = BuilderRegistry()


__all__ = [
    "BuilderRegistry",
    "SQLiteBuilder",
    "builder_registry",
    "quote_name",
]
