"""
Persistent field cache stored in the backing store.

One document per pattern, keyed by ``cache_key(pattern)``, holding the
serialized ``FieldTypeTable``. This is the tier that lets a restarted
process skip live discovery.

Architecture:
    ::

        PersistentCache(store, index=".fieldspine")
        ├── read(key)          → FieldTypeTable | CacheMissError | TransportError
        ├── write(key, table)  → None | CacheWriteError
        └── delete(key)        → None (idempotent) | TransportError

Guardrails:
    ❌ DON'T: Log a cache miss as a failure
    ✅ DO: Raise CacheMissError and let the resolver fall through

    ❌ DON'T: Report success when the write did not land
    ✅ DO: Raise CacheWriteError with the store error as cause

Tags:
    cache, persistence, elasticsearch, fieldspine
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fieldspine.core.errors import (
    CacheMissError,
    CacheWriteError,
    FieldSpineError,
    StoreNotFoundError,
    TransportError,
)
from fieldspine.core.logging import get_logger
from fieldspine.mapping.models import FieldTypeTable

if TYPE_CHECKING:
    from fieldspine.store.protocol import FieldStore

log = get_logger(__name__)


class PersistentCache:
    """Read/write/delete serialized field tables in the store.

    Args:
        store: Backing store
        index: Index (collection) that holds the cache documents
    """

    def __init__(self, store: FieldStore, *, index: str):
        self._store = store
        self._index = index

    @property
    def index(self) -> str:
        return self._index

    async def read(self, key: str) -> FieldTypeTable:
        """Fetch and deserialize the cache entry for ``key``.

        Raises:
            CacheMissError: No entry exists.
            TransportError: Any other store failure.
            MappingParseError: The entry exists but is malformed.
        """
        try:
            document = await self._store.get_document(self._index, key)
        except StoreNotFoundError as exc:
            log.debug("cache_miss", cache_key=key, index=self._index)
            raise CacheMissError(key, cause=exc) from exc
        except FieldSpineError:
            raise
        except Exception as exc:
            raise _transport_error("read", key, self._index, exc) from exc

        table = FieldTypeTable.from_document(document)
        log.debug("cache_hit", cache_key=key, index=self._index, field_count=len(table))
        return table

    async def write(self, key: str, table: FieldTypeTable) -> None:
        """Store ``table`` under ``key``.

        Raises:
            CacheWriteError: The store rejected or failed the write.
        """
        try:
            await self._store.put_document(self._index, key, table.to_document())
        except Exception as exc:
            error = CacheWriteError(key, f"Failed to cache fields for key {key}: {exc}", cause=exc)
            error.with_context(index=self._index)
            log.error("cache_write_failed", **error.to_dict())
            raise error from exc
        log.debug("cache_written", cache_key=key, index=self._index, field_count=len(table))

    async def delete(self, key: str) -> None:
        """Remove the entry for ``key``; absence is not an error."""
        try:
            await self._store.delete_document(self._index, key)
        except StoreNotFoundError:
            log.debug("cache_delete_missing", cache_key=key, index=self._index)
            return
        except FieldSpineError:
            raise
        except Exception as exc:
            raise _transport_error("delete", key, self._index, exc) from exc
        log.debug("cache_deleted", cache_key=key, index=self._index)


def _transport_error(operation: str, key: str, index: str, exc: Exception) -> TransportError:
    return TransportError(
        f"cache {operation} failed for key {key}: {exc}", cause=exc
    ).with_context(cache_key=key, index=index)


__all__ = ["PersistentCache"]
