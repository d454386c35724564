"""
fieldspine.core - Shared primitives for field-schema resolution.

Modules:
    errors      Typed error hierarchy with category/retry/context
    logging     structlog configuration and helpers
    settings    pydantic-settings configuration
    hashing     Deterministic cache keys for patterns
    cache       In-process table cache owned by a Mapper
"""

from fieldspine.core.cache import TableCache
from fieldspine.core.errors import (
    CacheError,
    CacheMissError,
    CacheWriteError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    FieldNotFoundError,
    FieldSpineError,
    MappingParseError,
    SchemaConflictError,
    SourceError,
    SourceNotFoundError,
    StoreNotFoundError,
    TransportError,
    ValidationError,
    categorize_error,
    get_retry_after,
    is_retryable,
)
from fieldspine.core.hashing import cache_key, compute_hash

__all__ = [
    # Cache
    "TableCache",
    # Hashing
    "cache_key",
    "compute_hash",
    # Errors
    "ErrorCategory",
    "ErrorContext",
    "FieldSpineError",
    "TransportError",
    "StoreNotFoundError",
    "SourceError",
    "SourceNotFoundError",
    "ValidationError",
    "SchemaConflictError",
    "MappingParseError",
    "FieldNotFoundError",
    "CacheError",
    "CacheMissError",
    "CacheWriteError",
    "ConfigError",
    "is_retryable",
    "get_retry_after",
    "categorize_error",
]
