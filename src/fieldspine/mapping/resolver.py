"""
Mapper: tiered field-schema resolution for pattern-addressed sources.

Manifesto:
    Discovering a source's fields live means introspecting every collection
    its pattern matches. That is slow, so resolved tables are cached twice:
    in-process for the life of the Mapper, and in the store itself so a
    restarted process does not pay for discovery again.

Architecture:
    ::

        get_fields(source)
          │
          ├─ 1. in-process TableCache ──────── hit → return (no I/O)
          │
          ├─ 2. PersistentCache.read ───────── hit → populate 1, return
          │        │ CacheMissError
          │        ▼
          └─ 3. LiveDiscovery.discover
                   + build_field_table ─────── SchemaConflictError / SourceNotFoundError
                   → PersistentCache.write ─── CacheWriteError
                   → populate 1, return

    Per (Mapper, cache key)::

        Unresolved ──get_fields──▶ Resolved ──ignore_fields──▶ Resolved(modified)
             ▲                        │
             └──────clear_cache───────┘

Concurrency:
    A Mapper belongs to one asyncio event loop. With ``dedupe_discovery``
    enabled (the default), concurrent ``get_fields`` calls for the same
    unresolved key await one shared task; cancelling one caller does not
    cancel the others. ``clear_cache`` bumps the key's generation so a
    resolution that started before it does not repopulate the in-process
    cache afterwards.

Examples:
    >>> store = InMemoryStore({"logs-1": {"bytes": "long"}})
    >>> mapper = Mapper(store)
    >>> table = await mapper.get_fields(Source("logs-*"))
    >>> table["bytes"].type
    <FieldType.LONG: 'long'>

Guardrails:
    ❌ DON'T: Return a freshly discovered table when the write-back failed
    ✅ DO: Surface CacheWriteError; a retry simply re-discovers

    ❌ DON'T: Guess a type for a conflicting field
    ✅ DO: Fail the whole resolution with SchemaConflictError

Tags:
    resolver, mapper, cache, schema, asyncio, fieldspine
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import TYPE_CHECKING

from fieldspine.core.cache import TableCache
from fieldspine.core.errors import CacheMissError, FieldNotFoundError
from fieldspine.core.hashing import cache_key
from fieldspine.core.logging import get_logger
from fieldspine.core.settings import FieldSpineSettings, get_settings
from fieldspine.mapping.conflicts import build_field_table
from fieldspine.mapping.discovery import LiveDiscovery
from fieldspine.mapping.models import FieldMapping, FieldTypeTable
from fieldspine.mapping.persistence import PersistentCache

if TYPE_CHECKING:
    from fieldspine.mapping.source import SourceLike
    from fieldspine.store.protocol import FieldStore

log = get_logger(__name__)


class Mapper:
    """Resolve and cache the field types of pattern-addressed sources.

    Args:
        store: Backing store used for discovery and the persistent cache
        cache_index: Index holding persisted tables (default from settings)
        dedupe_discovery: Share one resolution among concurrent callers
            for the same key (default from settings)
        settings: Settings instance (default: ``get_settings()``)
    """

    def __init__(
        self,
        store: FieldStore,
        *,
        cache_index: str | None = None,
        dedupe_discovery: bool | None = None,
        settings: FieldSpineSettings | None = None,
    ):
        settings = settings or get_settings()
        self._store = store
        self._discovery = LiveDiscovery(store)
        self._persistent = PersistentCache(store, index=cache_index or settings.cache_index)
        self._tables = TableCache()
        self._dedupe = settings.dedupe_discovery if dedupe_discovery is None else dedupe_discovery
        self._inflight: dict[str, asyncio.Task[FieldTypeTable]] = {}

    @property
    def cache_index(self) -> str:
        return self._persistent.index

    # ------------------------------------------------------------------ #
    # Single tiers
    # ------------------------------------------------------------------ #

    async def get_fields_from_mapping(self, source: SourceLike) -> FieldTypeTable:
        """Discover fields live and merge them, bypassing both caches.

        Nothing is written to either cache.

        Raises:
            SourceNotFoundError: The pattern matches no collection.
            SchemaConflictError: A field has different types across collections.
            TransportError: Any other store failure.
        """
        raw = await self._discovery.discover(source)
        table = build_field_table(raw)
        log.info(
            "fields_discovered",
            pattern=source.pattern,
            collections=len(raw),
            field_count=len(table),
        )
        return table

    async def get_fields_from_cache(self, source: SourceLike) -> FieldTypeTable:
        """Read the persisted table for the source; no discovery fallback.

        Raises:
            CacheMissError: Nothing is persisted for the source's pattern.
            TransportError: Any other store failure.
        """
        return await self._persistent.read(cache_key(source.pattern))

    def get_fields_from_object(self, source: SourceLike) -> FieldTypeTable | None:
        """Return the in-process table for the source, or ``None`` if absent."""
        return self._tables.get(cache_key(source.pattern))

    # ------------------------------------------------------------------ #
    # Orchestrated resolution
    # ------------------------------------------------------------------ #

    async def get_fields(self, source: SourceLike) -> FieldTypeTable:
        """Resolve the source's fields through the in-process, persistent and live tiers.

        Raises:
            SourceNotFoundError: Not cached and the pattern matches nothing.
            SchemaConflictError: Not cached and collections disagree on a type.
            CacheWriteError: Discovery succeeded but persisting the table failed.
            TransportError: Any other store failure.
        """
        table = self.get_fields_from_object(source)
        if table is not None:
            return table

        key = cache_key(source.pattern)
        generation = self._tables.generation(key)
        if not self._dedupe:
            return await self._resolve(source, key, generation)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._resolve(source, key, generation))
            self._inflight[key] = task
            task.add_done_callback(lambda done, k=key: self._forget(k, done))
        else:
            log.debug("resolution_joined", pattern=source.pattern, cache_key=key)
        return await asyncio.shield(task)

    async def _resolve(self, source: SourceLike, key: str, generation: int) -> FieldTypeTable:
        try:
            table = await self._persistent.read(key)
        except CacheMissError:
            table = await self.get_fields_from_mapping(source)
            await self._persistent.write(key, table)

        if self._tables.generation(key) == generation:
            self._tables.set(key, table)
        else:
            log.info("resolution_invalidated", pattern=source.pattern, cache_key=key)
        return table

    def _forget(self, key: str, task: asyncio.Task[FieldTypeTable]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled():
            # Mark the exception retrieved; every caller may have been cancelled.
            task.exception()

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #

    async def get_field_mapping(self, source: SourceLike, field_name: str) -> FieldMapping:
        """Resolve the source and return one field's mapping.

        Raises:
            FieldNotFoundError: The field is not in the resolved table.
        """
        table = await self.get_fields(source)
        try:
            return table[field_name]
        except KeyError:
            raise FieldNotFoundError(field_name).with_context(pattern=source.pattern) from None

    async def get_fields_mapping(
        self, source: SourceLike, field_names: Iterable[str]
    ) -> dict[str, FieldMapping]:
        """Resolve the source once and project the requested fields.

        Raises:
            FieldNotFoundError: For the first requested field not in the table.
        """
        table = await self.get_fields(source)
        projected: dict[str, FieldMapping] = {}
        for name in field_names:
            if name not in table:
                raise FieldNotFoundError(name).with_context(pattern=source.pattern)
            projected[name] = table[name]
        return projected

    # ------------------------------------------------------------------ #
    # Mutation and invalidation
    # ------------------------------------------------------------------ #

    async def ignore_fields(
        self, source: SourceLike, field_names: str | Iterable[str]
    ) -> FieldTypeTable:
        """Override the type of each named field to ``ignore`` and persist it.

        Accepts a single field name or an iterable of names. Unknown names
        are rejected before anything is changed.

        Raises:
            FieldNotFoundError: A named field is not in the resolved table.
            CacheWriteError: Persisting the modified table failed; the
                in-process cache keeps the previous table.
        """
        if isinstance(field_names, str):
            field_names = [field_names]
        names = list(dict.fromkeys(field_names))

        table = await self.get_fields(source)
        for name in names:
            if name not in table:
                raise FieldNotFoundError(name).with_context(pattern=source.pattern)

        key = cache_key(source.pattern)
        generation = self._tables.generation(key)
        updated = table.with_ignored(names)
        await self._persistent.write(key, updated)
        if self._tables.generation(key) == generation:
            self._tables.set(key, updated)
        else:
            log.info("ignore_invalidated", pattern=source.pattern, cache_key=key)
        log.info("fields_ignored", pattern=source.pattern, fields=names)
        return updated

    async def clear_cache(self, source: SourceLike) -> None:
        """Drop the source's table from both caches.

        The next ``get_fields`` reads the persistent cache again and, finding
        nothing, re-discovers.
        """
        key = cache_key(source.pattern)
        self._tables.delete(key)
        self._inflight.pop(key, None)
        await self._persistent.delete(key)
        log.info("cache_cleared", pattern=source.pattern, cache_key=key)


__all__ = ["Mapper"]
