"""
In-process cache of resolved field tables.

The first tier of resolution: a plain mapping from cache key to
``FieldTypeTable``, owned by one ``Mapper`` and living as long as it does.
Entries never expire; they leave only through ``delete`` (driven by
``Mapper.clear_cache``) or ``clear``.

Manifesto:
    - **Owned, not global:** Each Mapper creates its own TableCache
    - **No expiry:** A resolved schema is valid until explicitly invalidated
    - **No locking:** Access is confined to one asyncio event loop

Architecture:
    ::

        TableCache
        ├── get(key)      → table | None
        ├── set(key, table)
        ├── delete(key)
        ├── exists(key)   → bool
        ├── clear()
        └── generation(key) → int   (bumped by delete/clear)

    The generation counter lets a resolution that started before an
    invalidation detect that its result must not be stored.

Examples:
    >>> cache = TableCache()
    >>> cache.get("fields-abc") is None
    True
    >>> gen = cache.generation("fields-abc")
    >>> cache.delete("fields-abc")
    >>> cache.generation("fields-abc") == gen + 1
    True

Guardrails:
    ❌ DON'T: Share a TableCache between event loops or threads
    ✅ DO: Create one Mapper per loop

Tags:
    cache, in-process, fieldspine
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fieldspine.mapping.models import FieldTypeTable


class TableCache:
    """Process-lifetime mapping of cache key to resolved field table."""

    def __init__(self) -> None:
        self._store: dict[str, FieldTypeTable] = {}
        self._generations: dict[str, int] = {}

    def get(self, key: str) -> FieldTypeTable | None:
        """Return the cached table, or ``None`` if absent."""
        return self._store.get(key)

    def set(self, key: str, table: FieldTypeTable) -> None:
        """Store a table, replacing any previous one for the key."""
        self._store[key] = table

    def delete(self, key: str) -> None:
        """Remove a key. No-op if absent, but always bumps its generation."""
        self._store.pop(key, None)
        self._generations[key] = self._generations.get(key, 0) + 1

    def exists(self, key: str) -> bool:
        return key in self._store

    def clear(self) -> None:
        """Remove all keys."""
        for key in list(self._store):
            self.delete(key)

    def generation(self, key: str) -> int:
        """Invalidation counter for a key."""
        return self._generations.get(key, 0)

    def size(self) -> int:
        """Return current number of cached keys."""
        return len(self._store)

    def keys(self) -> Iterator[str]:
        return iter(list(self._store))


__all__ = ["TableCache"]
