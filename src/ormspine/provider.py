"""
Per-owner schema providers and the registry that shares them.

A ``Provider`` memoizes the derived ``Info`` of every record type it has
seen. Providers are keyed by an owner string (a tenant, a service, a
database) in a ``ProviderRegistry``, which is passed explicitly to
whatever needs it; there is no process-wide provider state.

Both caches use the same double-checked discipline: a lock-free lookup,
then lookup again under the lock before constructing and storing on a
miss. Derived ``Info`` objects are never mutated after construction, so
they are shared freely across threads.

Examples:
    >>> registry = ProviderRegistry()
    >>> provider = registry.get_or_create("billing")
    >>> provider is registry.get_or_create("billing")
    True
    >>> provider.get_info(User).name
    'User'

Tags:
    provider, registry, cache, thread-safety, ormspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

from ormspine.filter import Filter
from ormspine.logging import get_logger
from ormspine.model import Info, derive_info

logger = get_logger(__name__)


class Provider:
    """Schema cache for one owner."""

    def __init__(self, owner: str):
        self.owner = owner
        self._infos: dict[Any, Info] = {}
        self._lock = threading.Lock()

    def get_info(self, record_type: Any) -> Info:
        """Derived schema of ``record_type``, derived on first use."""
        info = self._infos.get(record_type)
        if info is not None:
            return info
        with self._lock:
            info = self._infos.get(record_type)
            if info is None:
                info = derive_info(record_type)
                self._infos[record_type] = info
                logger.debug("provider.info_derived", owner=self.owner, record=info.name)
        return info

    def bind(self, entity: Any) -> Info:
        """Schema of ``entity``'s type bound to ``entity``."""
        return self.get_info(type(entity)).bind(entity)

    def new_filter(self) -> Filter:
        return Filter()

    def record_types(self) -> list[Any]:
        return list(self._infos)

    def __repr__(self) -> str:
        return f"Provider(owner={self.owner!r}, types={len(self._infos)})"


class ProviderRegistry:
    """Owner key to ``Provider`` map with get-or-create."""

    def __init__(self, factory: Callable[[str], Provider] = Provider):
        self._factory = factory
        self._providers: dict[str, Provider] = {}
        self._lock = threading.Lock()

    def get_or_create(self, owner: str) -> Provider:
        provider = self._providers.get(owner)
        if provider is not None:
            return provider
        with self._lock:
            provider = self._providers.get(owner)
            if provider is None:
                provider = self._factory(owner)
                self._providers[owner] = provider
                logger.debug("provider.created", owner=owner)
        return provider

    def get(self, owner: str) -> Provider | None:
        return self._providers.get(owner)

    def remove(self, owner: str) -> Provider | None:
        with self._lock:
            return self._providers.pop(owner, None)

    def owners(self) -> list[str]:
        return sorted(self._providers)

    def clear(self) -> None:
        with self._lock:
            self._providers.clear()

    def __len__(self) -> int:
        return len(self._providers)

    def __contains__(self, owner: object) -> bool:
        return owner in self._providers


__all__ = ["Provider", "ProviderRegistry"]
