"""Live discovery of per-collection field types.

Asks the store to introspect every collection matching a source's pattern.
The result is the raw input of ``build_field_table``; nothing here is
cached and nothing is retried.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from fieldspine.core.errors import (
    FieldSpineError,
    MappingParseError,
    SourceNotFoundError,
    StoreNotFoundError,
    TransportError,
)
from fieldspine.core.logging import get_logger

if TYPE_CHECKING:
    from fieldspine.mapping.source import SourceLike
    from fieldspine.store.protocol import FieldStore

log = get_logger(__name__)


class LiveDiscovery:
    """Field-mapping introspection against a store."""

    def __init__(self, store: FieldStore):
        self._store = store

    async def discover(self, source: SourceLike) -> dict[str, dict[str, str]]:
        """Return ``{collection: {field: type}}`` for the source's pattern.

        Raises:
            SourceNotFoundError: The pattern matches no collection.
            TransportError: Any other store failure.
            MappingParseError: The store returned something that is not
                ``{collection: {field: type}}``.
        """
        pattern = source.pattern
        log.debug("discovery_started", pattern=pattern)
        try:
            raw = await self._store.introspect_field_mappings(pattern)
        except StoreNotFoundError as exc:
            raise SourceNotFoundError(pattern, cause=exc) from exc
        except FieldSpineError:
            raise
        except Exception as exc:
            raise TransportError(
                f"field mapping introspection failed for {pattern}: {exc}", cause=exc
            ).with_context(pattern=pattern) from exc

        if not isinstance(raw, Mapping):
            raise MappingParseError(
                f"introspection for {pattern} returned {type(raw).__name__}"
            ).with_context(pattern=pattern)
        if not raw:
            raise SourceNotFoundError(pattern)

        collections: dict[str, dict[str, str]] = {}
        for collection, fields in raw.items():
            if not isinstance(fields, Mapping) or not all(
                isinstance(t, str) for t in fields.values()
            ):
                raise MappingParseError(
                    f"introspection for {pattern} returned malformed fields for {collection}"
                ).with_context(pattern=pattern, index=collection)
            collections[collection] = dict(fields)

        log.debug(
            "discovery_completed",
            pattern=pattern,
            collections=len(collections),
        )
        return collections


__all__ = ["LiveDiscovery"]
