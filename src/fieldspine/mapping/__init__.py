"""
fieldspine.mapping - Field-schema resolution for pattern-addressed sources.

Modules
-------
models       FieldType, FieldMapping, FieldTypeTable
conflicts    build_field_table, flatten_field_mapping_payload
discovery    LiveDiscovery (store introspection)
persistence  PersistentCache (one document per pattern in the store)
source       Source, SourceLike
resolver     Mapper (tiered resolution, ignore overrides, invalidation)
"""

from fieldspine.mapping.conflicts import build_field_table, flatten_field_mapping_payload
from fieldspine.mapping.discovery import LiveDiscovery
from fieldspine.mapping.models import FieldMapping, FieldType, FieldTypeTable
from fieldspine.mapping.persistence import PersistentCache
from fieldspine.mapping.resolver import Mapper
from fieldspine.mapping.source import Source, SourceLike

__all__ = [
    "FieldType",
    "FieldMapping",
    "FieldTypeTable",
    "build_field_table",
    "flatten_field_mapping_payload",
    "LiveDiscovery",
    "PersistentCache",
    "Mapper",
    "Source",
    "SourceLike",
]
