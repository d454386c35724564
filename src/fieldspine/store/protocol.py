"""
Backing-store protocol used by the resolver.

The resolver needs four calls from the store: field-mapping introspection
for a pattern, and get/put/delete of a single JSON document. Everything
else about the store (connection, auth, pooling) belongs to the
implementation.

Architecture:
    ::

        FieldStore (Protocol, async)
        ├── InMemoryStore  tests and single-process development
        └── ElasticsearchStore  httpx against an Elasticsearch cluster

        introspect_field_mappings(pattern) → {collection: {field: type}}
        get_document(index, key)           → dict
        put_document(index, key, document) → None
        delete_document(index, key)        → None

Error contract:
    - ``StoreNotFoundError`` when the pattern matches no collection or the
      document does not exist
    - ``TransportError`` for every other failure
    - ``delete_document`` may raise ``StoreNotFoundError`` for a missing
      document; callers treat that as success

Tags:
    protocol, storage, async, fieldspine
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class FieldStore(Protocol):
    """Async backing store for discovery and the persistent field cache."""

    async def introspect_field_mappings(self, pattern: str) -> dict[str, dict[str, str]]:
        """Declared field types of every collection matching ``pattern``."""
        ...

    async def get_document(self, index: str, key: str) -> dict[str, Any]:
        """Fetch a JSON document by key."""
        ...

    async def put_document(self, index: str, key: str, document: dict[str, Any]) -> None:
        """Create or replace a JSON document."""
        ...

    async def delete_document(self, index: str, key: str) -> None:
        """Delete a JSON document."""
        ...


__all__ = ["FieldStore"]
