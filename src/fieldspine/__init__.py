"""
fieldspine - Field-schema resolution and caching for pattern-addressed sources.

Usage:
    from fieldspine import ElasticsearchStore, Mapper, Source

    async with ElasticsearchStore("http://localhost:9200") as store:
        mapper = Mapper(store)
        table = await mapper.get_fields(Source("logs-*"))
        table["bytes"].type          # FieldType.LONG
        await mapper.ignore_fields(Source("logs-*"), ["tags"])
"""

__version__ = "0.1.0"

from fieldspine.core.errors import (  # noqa: E402
    CacheMissError,
    CacheWriteError,
    FieldNotFoundError,
    FieldSpineError,
    SchemaConflictError,
    SourceNotFoundError,
    TransportError,
)
from fieldspine.mapping import (  # noqa: E402
    FieldMapping,
    FieldType,
    FieldTypeTable,
    Mapper,
    Source,
    SourceLike,
)
from fieldspine.store import ElasticsearchStore, FieldStore, InMemoryStore  # noqa: E402

__all__ = [
    "__version__",
    # Resolver
    "Mapper",
    "Source",
    "SourceLike",
    "FieldType",
    "FieldMapping",
    "FieldTypeTable",
    # Stores
    "FieldStore",
    "InMemoryStore",
    "ElasticsearchStore",
    # Errors
    "FieldSpineError",
    "SchemaConflictError",
    "SourceNotFoundError",
    "CacheMissError",
    "CacheWriteError",
    "TransportError",
    "FieldNotFoundError",
]
