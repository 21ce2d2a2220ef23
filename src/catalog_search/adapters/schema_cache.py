"""Cache collaborator for materialized index schemas.

Coherency belongs to the caller: entries are keyed on a configuration
version and never invalidated from inside the index manager.
"""

from abc import ABC, abstractmethod
import copy
from typing import Any


class SchemaCache(ABC):
    """Key/value cache for schema fragments (mappings, analysis settings)."""

    @abstractmethod
    def load(self, key: str) -> dict[str, Any] | None:
        raise NotImplementedError

    @abstractmethod
    def save(self, key: str, value: dict[str, Any]) -> None:
        raise NotImplementedError

    def invalidate(self, key: str | None = None) -> None:
        """Optional hook dropping one key, or everything when ``key`` is None."""

        return


class InMemorySchemaCache(SchemaCache):
    """Process-local cache. Values are deep-copied so callers cannot mutate entries."""

    def __init__(self) -> None:
        self._entries: dict[str, dict[str, Any]] = {}
        self.hits = 0
        self.misses = 0

    def load(self, key: str) -> dict[str, Any] | None:
        value = self._entries.get(key)
        if value is None:
            self.misses += 1
            return None
        self.hits += 1
        return copy.deepcopy(value)

    def save(self, key: str, value: dict[str, Any]) -> None:
        self._entries[key] = copy.deepcopy(value)

    def invalidate(self, key: str | None = None) -> None:
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)
