"""
Conflict detection: merge per-collection field types into one table.

A pattern usually spans many collections (indices). Each reports its own
declared type for every field. The merged table is only safe to use when
every field has exactly one type across all of them; a single disagreement
aborts the whole build.

Architecture:
    ::

        Elasticsearch _mapping/field/* response
            │  flatten_field_mapping_payload()
            ▼
        {collection: {field: type}}
            │  build_field_table()
            ▼
        FieldTypeTable  |  SchemaConflictError

Examples:
    >>> build_field_table({"a": {"baz": "long"}, "b": {"foo.bar": "string"}}).types()
    {'baz': <FieldType.LONG: 'long'>, 'foo.bar': <FieldType.STRING: 'string'>}

    >>> build_field_table({"a": {"foo.bar": "string"}, "b": {"foo.bar": "long"}})
    Traceback (most recent call last):
    ...
    fieldspine.core.errors.SchemaConflictError: Field 'foo.bar' is mapped with conflicting types: long, string

Tags:
    schema, conflict-detection, merge, fieldspine
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping
from typing import Any

from fieldspine.core.errors import MappingParseError, SchemaConflictError
from fieldspine.core.logging import get_logger
from fieldspine.mapping.models import FieldMapping, FieldTypeTable

log = get_logger(__name__)


def build_field_table(raw_by_collection: Mapping[str, Mapping[str, str]]) -> FieldTypeTable:
    """Merge per-collection field types, failing on any conflict.

    Collections are visited in name order so the reported conflict does not
    depend on payload ordering.

    Args:
        raw_by_collection: ``{collection: {field_name: declared_type}}``

    Returns:
        A complete table with one mapping per field seen in any collection.

    Raises:
        SchemaConflictError: A field has more than one distinct declared type.
    """
    declared: dict[str, dict[str, list[str]]] = defaultdict(lambda: defaultdict(list))

    for collection in sorted(raw_by_collection):
        fields = raw_by_collection[collection]
        for name, declared_type in fields.items():
            # Same folding as FieldType parsing; unlisted types stay distinct.
            declared[name][declared_type.lower()].append(collection)

    for name in sorted(declared):
        by_type = declared[name]
        if len(by_type) > 1:
            error = SchemaConflictError(
                name,
                by_type.keys(),
                collections={t: list(c) for t, c in by_type.items()},
            )
            log.warning("schema_conflict", **error.to_dict())
            raise error

    return FieldTypeTable(
        FieldMapping(name, next(iter(by_type)))
        for name, by_type in declared.items()
    )


def flatten_field_mapping_payload(payload: Any) -> dict[str, dict[str, str]]:
    """Reduce a ``GET {pattern}/_mapping/field/*`` response to ``{collection: {field: type}}``.

    Handles both typeless responses (``{index: {"mappings": {field: ...}}}``)
    and responses with document types (``{index: {"mappings": {doc_type:
    {field: ...}}}}``). With document types each ``index/doc_type`` pair is
    treated as its own collection, so two types in one index that disagree
    on a field are still a conflict.

    Skipped:
        - meta fields (name starts with ``_``)
        - fields with an empty ``mapping``
        - object containers (leaf mapping without ``type``)

    Raises:
        MappingParseError: The payload does not have the expected shape.
    """
    if not isinstance(payload, Mapping):
        raise MappingParseError(
            f"field mapping response must be an object, got {type(payload).__name__}"
        )

    flattened: dict[str, dict[str, str]] = {}
    for index, body in payload.items():
        if not isinstance(body, Mapping) or not isinstance(body.get("mappings", {}), Mapping):
            raise MappingParseError(f"malformed field mapping for index {index}").with_context(
                index=index
            )
        mappings = body.get("mappings", {})
        if _is_typeless(mappings):
            flattened[index] = _collect_fields(mappings)
        else:
            for doc_type, fields in mappings.items():
                if not isinstance(fields, Mapping):
                    raise MappingParseError(
                        f"malformed field mapping for {index}/{doc_type}"
                    ).with_context(index=index)
                flattened[f"{index}/{doc_type}"] = _collect_fields(fields)
    return flattened


def _is_typeless(mappings: Mapping[str, Any]) -> bool:
    # Typeless entries carry full_name/mapping directly under the field name.
    return any(
        isinstance(entry, Mapping) and ("full_name" in entry or "mapping" in entry)
        for entry in mappings.values()
    ) or not mappings


def _collect_fields(entries: Mapping[str, Any]) -> dict[str, str]:
    fields: dict[str, str] = {}
    for key, entry in entries.items():
        if not isinstance(entry, Mapping):
            continue
        name = entry.get("full_name", key)
        if name.startswith("_"):
            continue
        mapping = entry.get("mapping") or {}
        if not mapping:
            continue
        leaf = next(iter(mapping.values()))
        declared_type = leaf.get("type") if isinstance(leaf, Mapping) else None
        if declared_type is None:
            continue
        fields[name] = declared_type
    return fields


__all__ = ["build_field_table", "flatten_field_mapping_payload"]
