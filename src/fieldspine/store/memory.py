"""
In-memory backing store.

Collections are plain ``{field: type}`` dicts matched by glob patterns
(comma-separated, ``-name`` excludes), directly or through aliases.
Documents are kept as JSON text so that everything written must survive
serialization exactly as it would against a real store.

Every call yields to the event loop once, which lets tests interleave
concurrent resolutions the way real I/O would.

Examples:
    >>> store = InMemoryStore({"logs-1": {"bytes": "long"}})
    >>> await store.introspect_field_mappings("logs-*")
    {'logs-1': {'bytes': 'long'}}
    >>> store.fail("put_document", TransportError("disk full"))

Tags:
    storage, in-memory, testing, fieldspine
"""

from __future__ import annotations

import asyncio
import json
from collections import Counter
from collections.abc import Mapping
from fnmatch import fnmatchcase
from typing import Any

from fieldspine.core.errors import FieldSpineError, StoreNotFoundError, TransportError

OPERATIONS = ("introspect_field_mappings", "get_document", "put_document", "delete_document")


class InMemoryStore:
    """Single-process ``FieldStore`` implementation.

    Attributes:
        calls: Count of calls per operation name
    """

    def __init__(
        self,
        collections: Mapping[str, Mapping[str, str]] | None = None,
        documents: Mapping[tuple[str, str], dict[str, Any]] | None = None,
    ):
        self._collections: dict[str, dict[str, str]] = {}
        self._aliases: dict[str, list[str]] = {}
        self._documents: dict[tuple[str, str], str] = {}
        self._failures: dict[str, FieldSpineError] = {}
        self.calls: Counter[str] = Counter()

        for name, fields in (collections or {}).items():
            self.add_collection(name, fields)
        for (index, key), document in (documents or {}).items():
            self._documents[(index, key)] = json.dumps(document)

    # ------------------------------------------------------------------ #
    # Test/dev controls
    # ------------------------------------------------------------------ #

    def add_collection(self, name: str, fields: Mapping[str, str]) -> None:
        self._collections[name] = dict(fields)

    def remove_collection(self, name: str) -> None:
        self._collections.pop(name, None)

    def add_alias(self, alias: str, collections: list[str]) -> None:
        """Point ``alias`` at existing collections, as an index alias would."""
        self._aliases[alias] = list(collections)

    def fail(self, operation: str, error: FieldSpineError) -> None:
        """Make every subsequent call to ``operation`` raise ``error``."""
        if operation not in OPERATIONS:
            raise ValueError(f"unknown store operation: {operation}")
        self._failures[operation] = error

    def recover(self, operation: str | None = None) -> None:
        """Clear an injected failure (all of them if ``operation`` is None)."""
        if operation is None:
            self._failures.clear()
        else:
            self._failures.pop(operation, None)

    def seed_document(self, index: str, key: str, document: dict[str, Any]) -> None:
        """Store a document without counting it as a call."""
        self._documents[(index, key)] = json.dumps(document)

    def has_document(self, index: str, key: str) -> bool:
        return (index, key) in self._documents

    def document(self, index: str, key: str) -> dict[str, Any] | None:
        raw = self._documents.get((index, key))
        return json.loads(raw) if raw is not None else None

    # ------------------------------------------------------------------ #
    # FieldStore
    # ------------------------------------------------------------------ #

    async def introspect_field_mappings(self, pattern: str) -> dict[str, dict[str, str]]:
        await self._enter("introspect_field_mappings")
        matched = self._match(pattern)
        if not matched:
            raise StoreNotFoundError(f"no such index [{pattern}]").with_context(pattern=pattern)
        return {name: dict(self._collections[name]) for name in matched}

    async def get_document(self, index: str, key: str) -> dict[str, Any]:
        await self._enter("get_document")
        raw = self._documents.get((index, key))
        if raw is None:
            raise StoreNotFoundError(f"document not found: {index}/{key}").with_context(
                index=index, cache_key=key
            )
        return json.loads(raw)

    async def put_document(self, index: str, key: str, document: dict[str, Any]) -> None:
        await self._enter("put_document")
        try:
            self._documents[(index, key)] = json.dumps(document)
        except (TypeError, ValueError) as exc:
            raise TransportError(f"document is not serializable: {exc}", cause=exc) from exc

    async def delete_document(self, index: str, key: str) -> None:
        await self._enter("delete_document")
        self._documents.pop((index, key), None)

    # ------------------------------------------------------------------ #

    async def _enter(self, operation: str) -> None:
        self.calls[operation] += 1
        await asyncio.sleep(0)
        error = self._failures.get(operation)
        if error is not None:
            raise error

    def _match(self, pattern: str) -> list[str]:
        included: set[str] = set()
        for part in (p.strip() for p in pattern.split(",")):
            if not part:
                continue
            if part.startswith("-"):
                included -= {n for n in included if fnmatchcase(n, part[1:])}
            else:
                included |= {n for n in self._collections if fnmatchcase(n, part)}
                for alias, members in self._aliases.items():
                    if fnmatchcase(alias, part):
                        included |= {n for n in members if n in self._collections}
        return sorted(included)


__all__ = ["InMemoryStore"]
