"""
Structured error types for field-schema resolution.

Every failure the resolver can surface is a typed ``FieldSpineError`` that
carries a category, an explicit retry flag, structured context and an
optional chained cause. Callers branch on the class; logging and alerting
read ``to_dict()``.

Manifesto:
    - **Typed Error Hierarchy:** One class per failure the resolver surfaces
    - **Explicit Retry Semantics:** Each error knows if a retry can help
    - **Rich Context:** Pattern, cache key and field travel with the error
    - **Error Chaining:** The store's original exception is kept as cause

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                      FieldSpineError                          │
        │  (category, retryable, retry_after, context, cause)          │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  TransportError      SourceError         ValidationError     │
        │  (NETWORK, retry)    (SOURCE)            (VALIDATION)        │
        │                          │                    │              │
        │  StoreNotFoundError  SourceNotFoundError SchemaConflictError │
        │  (STORAGE)                               MappingParseError   │
        │                                                               │
        │  CacheError          FieldNotFoundError  ConfigError         │
        │  (CACHE)             (VALIDATION)        (CONFIG)            │
        │      │                                                        │
        │  CacheMissError                                               │
        │  CacheWriteError                                              │
        └──────────────────────────────────────────────────────────────┘

Guardrails:
    ❌ DON'T: Treat CacheMissError as a failure worth logging at warning
    ✅ DO: Let get_fields fall through to live discovery on a miss

    ❌ DON'T: Swallow the store's exception
    ✅ DO: Pass it as cause= for error chaining

Usage:
    from fieldspine.core.errors import SchemaConflictError

    try:
        table = await mapper.get_fields(source)
    except SchemaConflictError as e:
        log.error("schema_conflict", **e.to_dict())
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        NETWORK: Store unreachable, timeouts, unexpected HTTP status
        STORAGE: Store reported a missing document or index
        CACHE: Persistent field cache read/write outcome
        SOURCE: Pattern does not resolve to any collection
        PARSE: Payload or cached document has an unexpected shape
        VALIDATION: Schema conflicts, unknown fields
        CONFIG: Missing or invalid settings
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    NETWORK = "NETWORK"
    STORAGE = "STORAGE"
    CACHE = "CACHE"
    SOURCE = "SOURCE"
    PARSE = "PARSE"
    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Only the fields that are set end up in ``to_dict()``, so the same
    context type serves store, cache and resolver failures.

    Examples:
        >>> ctx = ErrorContext(pattern="logs-*", cache_key="fields-abc")
        >>> ctx.to_dict()
        {'pattern': 'logs-*', 'cache_key': 'fields-abc'}

    Attributes:
        pattern: Source pattern being resolved
        cache_key: Derived cache key for the pattern
        field: Field name involved in the failure
        index: Store index/collection being accessed
        url: URL that was being accessed
        http_status: HTTP status code if applicable
        metadata: Additional key-value pairs
    """

    pattern: str | None = None
    cache_key: str | None = None
    field: str | None = None
    index: str | None = None
    url: str | None = None
    http_status: int | None = None

    metadata: dict[str, Any] = dataclasses.field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["pattern", "cache_key", "field", "index", "url", "http_status"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class FieldSpineError(Exception):
    """
    Base exception for all field-schema resolution errors.

    Subclasses set ``default_category`` and ``default_retryable`` so that
    raising sites only pass what is specific to the failure.

    Examples:
        >>> err = FieldSpineError("boom", category=ErrorCategory.INTERNAL)
        >>> err.retryable
        False
        >>> err.with_context(pattern="logs-*").context.pattern
        'logs-*'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        retry_after: int | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.retry_after = retry_after
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> FieldSpineError:
        """Attach context fields and return self for chaining.

        Known ``ErrorContext`` attributes are set directly, anything else
        goes into ``metadata``.
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.retry_after is not None:
            result["retry_after"] = self.retry_after
        ctx = self.context.to_dict()
        if ctx:
            result["context"] = ctx
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# STORE / TRANSPORT ERRORS
# =============================================================================


class TransportError(FieldSpineError):
    """Generic backing-store failure (connection, timeout, unexpected status).

    Marked retryable, but nothing in this package retries automatically:
    the flag is for the caller's own policy.
    """

    default_category = ErrorCategory.NETWORK
    default_retryable = True


class StoreNotFoundError(FieldSpineError):
    """The store reported that an index or document does not exist.

    Raised by store implementations only; the resolver translates it into
    ``SourceNotFoundError`` or ``CacheMissError`` depending on the call.
    """

    default_category = ErrorCategory.STORAGE
    default_retryable = False


# =============================================================================
# SOURCE ERRORS
# =============================================================================


class SourceError(FieldSpineError):
    """Errors about the source pattern itself."""

    default_category = ErrorCategory.SOURCE
    default_retryable = False


class SourceNotFoundError(SourceError):
    """The pattern matches no collection in the store."""

    def __init__(self, pattern: str, message: str | None = None, **kwargs: Any):
        msg = message or f"No collection matches pattern: {pattern}"
        super().__init__(msg, **kwargs)
        self.pattern = pattern
        self.context.pattern = pattern


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(FieldSpineError):
    """Resolved schema or cached document failed validation. Never retryable."""

    default_category = ErrorCategory.VALIDATION
    default_retryable = False


class SchemaConflictError(ValidationError):
    """A field is declared with different types across matched collections.

    Attributes:
        field_name: The conflicting field
        types: Sorted distinct declared types
        collections: Mapping of declared type to the collections declaring it
    """

    def __init__(
        self,
        field_name: str,
        types: Iterable[str],
        collections: dict[str, list[str]] | None = None,
        **kwargs: Any,
    ):
        self.field_name = field_name
        self.types = sorted(types)
        self.collections = collections or {}
        msg = f"Field '{field_name}' is mapped with conflicting types: {', '.join(self.types)}"
        super().__init__(msg, **kwargs)
        self.context.field = field_name
        self.context.metadata.setdefault("types", self.types)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.collections:
            result["collections"] = self.collections
        return result


class MappingParseError(ValidationError):
    """Introspection payload or cached document does not have the expected shape."""

    default_category = ErrorCategory.PARSE


class FieldNotFoundError(FieldSpineError):
    """A requested field is absent from a resolved table."""

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(self, field_name: str, message: str | None = None, **kwargs: Any):
        msg = message or f"Field not found: {field_name}"
        super().__init__(msg, **kwargs)
        self.field_name = field_name
        self.context.field = field_name


# =============================================================================
# CACHE ERRORS
# =============================================================================


class CacheError(FieldSpineError):
    """Persistent field cache outcomes."""

    default_category = ErrorCategory.CACHE
    default_retryable = False


class CacheMissError(CacheError):
    """No cache entry exists for the key. Expected; drives fallback."""

    def __init__(self, cache_key: str, message: str | None = None, **kwargs: Any):
        msg = message or f"No cached fields for key: {cache_key}"
        super().__init__(msg, **kwargs)
        self.cache_key = cache_key
        self.context.cache_key = cache_key


class CacheWriteError(CacheError):
    """Writing a resolved table to the persistent cache failed."""

    default_retryable = True

    def __init__(self, cache_key: str, message: str | None = None, **kwargs: Any):
        msg = message or f"Failed to cache fields for key: {cache_key}"
        super().__init__(msg, **kwargs)
        self.cache_key = cache_key
        self.context.cache_key = cache_key


# =============================================================================
# CONFIG ERRORS
# =============================================================================


class ConfigError(FieldSpineError):
    """Missing or invalid configuration. Never retryable."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


# =============================================================================
# HELPERS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check whether an error may succeed on retry.

    Non-FieldSpine exceptions are treated as not retryable.
    """
    if isinstance(error, FieldSpineError):
        return error.retryable
    return False


def get_retry_after(error: Exception) -> int | None:
    """Return the suggested retry delay in seconds, if any."""
    if isinstance(error, FieldSpineError):
        return error.retry_after
    return None


def categorize_error(error: Exception) -> ErrorCategory:
    """Best-effort category for any exception."""
    if isinstance(error, FieldSpineError):
        return error.category
    if isinstance(error, (ConnectionError, TimeoutError, OSError)):
        return ErrorCategory.NETWORK
    if isinstance(error, (ValueError, TypeError, KeyError)):
        return ErrorCategory.PARSE
    return ErrorCategory.UNKNOWN


__all__ = [
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
