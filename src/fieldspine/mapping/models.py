"""
Field type table models.

A ``FieldTypeTable`` is the resolved schema of a source: one
``FieldMapping`` per unique field name. Tables are immutable once built;
the only derivation, ``with_ignored``, returns a new table.

The persisted form (the cache entry) is a plain JSON object::

    {"baz": {"type": "long"}, "foo.bar": {"type": "string"}}

Manifesto:
    - **Immutable:** A table handed to a caller never changes underneath it
    - **One mapping per name:** Duplicate names are rejected at construction
    - **Closed type enum:** ``ignore`` is a FieldType like any other, so
      lookups never special-case overridden fields

Examples:
    >>> table = FieldTypeTable.from_document({"baz": {"type": "long"}})
    >>> table["baz"].type == "long"
    True
    >>> table.with_ignored(["baz"])["baz"].type is FieldType.IGNORE
    True

Tags:
    models, schema, field-mapping, fieldspine
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from fieldspine.core.errors import MappingParseError


class FieldType(str, Enum):
    """Declared field types.

    Values are the store's own type names. ``IGNORE`` marks a field the
    user chose to exclude; ``UNKNOWN`` stands in for any declared type this
    enum does not list. The declared string itself is kept on
    ``FieldMapping.declared``.
    """

    STRING = "string"
    TEXT = "text"
    KEYWORD = "keyword"
    LONG = "long"
    INTEGER = "integer"
    SHORT = "short"
    BYTE = "byte"
    DOUBLE = "double"
    FLOAT = "float"
    HALF_FLOAT = "half_float"
    SCALED_FLOAT = "scaled_float"
    BOOLEAN = "boolean"
    DATE = "date"
    IP = "ip"
    GEO_POINT = "geo_point"
    GEO_SHAPE = "geo_shape"
    BINARY = "binary"
    OBJECT = "object"
    NESTED = "nested"
    ATTACHMENT = "attachment"
    MURMUR3 = "murmur3"
    IGNORE = "ignore"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> FieldType | None:
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.value == lowered:
                    return member
            return cls.UNKNOWN
        return None


@dataclass(frozen=True)
class FieldMapping:
    """Type metadata for a single field.

    ``type`` is the parsed ``FieldType``; ``declared`` is the type string as
    the store reported it and is what gets persisted, so types this package
    does not list survive a cache round trip.
    """

    name: str
    type: FieldType
    declared: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, FieldType):
            if self.declared is None:
                object.__setattr__(self, "declared", str(self.type))
            object.__setattr__(self, "type", FieldType(self.type))
        if self.declared is None:
            object.__setattr__(self, "declared", self.type.value)

    @property
    def is_ignored(self) -> bool:
        return self.type is FieldType.IGNORE

    def to_dict(self) -> dict[str, str]:
        return {"type": self.declared}


class FieldTypeTable(Mapping[str, FieldMapping]):
    """Immutable mapping of field name to ``FieldMapping``.

    Compares equal to any mapping with the same items, including a plain
    ``dict`` of ``FieldMapping`` values.

    Args:
        mappings: Field mappings; names must be unique

    Raises:
        ValueError: If two mappings share a name
    """

    __slots__ = ("_fields",)

    def __init__(self, mappings: Iterable[FieldMapping] = ()):
        fields: dict[str, FieldMapping] = {}
        for mapping in mappings:
            if mapping.name in fields:
                raise ValueError(f"duplicate field in table: {mapping.name}")
            fields[mapping.name] = mapping
        self._fields = fields

    def __getitem__(self, name: str) -> FieldMapping:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        inner = ", ".join(f"{name}={m.declared}" for name, m in sorted(self._fields.items()))
        return f"FieldTypeTable({inner})"

    def __hash__(self) -> int:
        return hash(frozenset((name, m.type) for name, m in self._fields.items()))

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #

    @classmethod
    def from_types(cls, types: Mapping[str, str | FieldType]) -> FieldTypeTable:
        """Build a table from ``{field: type}``."""
        return cls(FieldMapping(name, t) for name, t in types.items())

    @classmethod
    def from_document(cls, document: Any) -> FieldTypeTable:
        """Deserialize a cache entry.

        Raises:
            MappingParseError: If the document is not ``{field: {"type": str}}``
        """
        if not isinstance(document, Mapping):
            raise MappingParseError(
                f"cached field table must be an object, got {type(document).__name__}"
            )
        mappings = []
        for name, entry in document.items():
            if not isinstance(entry, Mapping) or not isinstance(entry.get("type"), str):
                raise MappingParseError(f"cached field '{name}' has no type").with_context(
                    field=name
                )
            mappings.append(FieldMapping(name, entry["type"]))
        return cls(mappings)

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #

    def to_document(self) -> dict[str, dict[str, str]]:
        """Serialize to the cache entry form."""
        return {name: mapping.to_dict() for name, mapping in self._fields.items()}

    def types(self) -> dict[str, FieldType]:
        return {name: mapping.type for name, mapping in self._fields.items()}

    def ignored(self) -> list[str]:
        """Names of fields overridden to ``ignore``."""
        return [name for name, mapping in self._fields.items() if mapping.is_ignored]

    def with_ignored(self, names: Iterable[str]) -> FieldTypeTable:
        """Return a copy with each named field's type set to ``ignore``.

        Raises:
            KeyError: If a name is not in the table
        """
        targets = set(names)
        unknown = targets.difference(self._fields)
        if unknown:
            raise KeyError(sorted(unknown)[0])
        return FieldTypeTable(
            FieldMapping(name, FieldType.IGNORE) if name in targets else mapping
            for name, mapping in self._fields.items()
        )


__all__ = ["FieldType", "FieldMapping", "FieldTypeTable"]
