"""Tests for fieldspine.core.errors module."""

import pytest

from fieldspine.core.errors import (
    CacheError,
    CacheMissError,
    CacheWriteError,
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


class TestErrorContext:
    """Test ErrorContext dataclass."""

    def test_create_empty_context(self):
        ctx = ErrorContext()
        assert ctx.pattern is None
        assert ctx.metadata == {}
        assert ctx.to_dict() == {}

    def test_to_dict_includes_set_fields(self):
        ctx = ErrorContext(pattern="logs-*", http_status=503, metadata={"attempt": 1})
        d = ctx.to_dict()
        assert d == {"pattern": "logs-*", "http_status": 503, "attempt": 1}
        assert "cache_key" not in d

    def test_field_and_metadata_are_independent(self):
        first = ErrorContext(field="foo.bar")
        second = ErrorContext(field="baz")
        first.metadata["types"] = ["long"]

        assert first.to_dict() == {"field": "foo.bar", "types": ["long"]}
        assert second.metadata == {}

    def test_package_exports_errors(self):
        import fieldspine

        assert fieldspine.FieldNotFoundError("baz").context.field == "baz"


class TestFieldSpineError:
    """Test base error behavior."""

    def test_defaults(self):
        err = FieldSpineError("boom")
        assert err.message == "boom"
        assert err.category == ErrorCategory.INTERNAL
        assert err.retryable is False
        assert err.cause is None

    def test_cause_is_chained(self):
        original = ConnectionError("refused")
        err = TransportError("store down", cause=original)
        assert err.__cause__ is original
        assert "ConnectionError" in err.to_dict()["cause"]

    def test_with_context_known_and_extra_fields(self):
        err = FieldSpineError("boom").with_context(pattern="logs-*", attempt=2)
        assert err.context.pattern == "logs-*"
        assert err.context.metadata == {"attempt": 2}

    def test_to_dict(self):
        err = TransportError("timeout", retry_after=5).with_context(url="/x")
        d = err.to_dict()
        assert d["error_type"] == "TransportError"
        assert d["category"] == "NETWORK"
        assert d["retryable"] is True
        assert d["retry_after"] == 5
        assert d["context"] == {"url": "/x"}

    def test_repr(self):
        assert repr(CacheMissError("k")) == "CacheMissError('No cached fields for key: k', category=CACHE)"


class TestHierarchy:
    """Test the taxonomy used by the resolver."""

    @pytest.mark.parametrize(
        "error, parent, category, retryable",
        [
            (TransportError("x"), FieldSpineError, ErrorCategory.NETWORK, True),
            (StoreNotFoundError("x"), FieldSpineError, ErrorCategory.STORAGE, False),
            (SourceNotFoundError("logs-*"), SourceError, ErrorCategory.SOURCE, False),
            (SchemaConflictError("f", ["long", "string"]), ValidationError, ErrorCategory.VALIDATION, False),
            (MappingParseError("x"), ValidationError, ErrorCategory.PARSE, False),
            (CacheMissError("k"), CacheError, ErrorCategory.CACHE, False),
            (CacheWriteError("k"), CacheError, ErrorCategory.CACHE, True),
            (FieldNotFoundError("f"), FieldSpineError, ErrorCategory.VALIDATION, False),
        ],
    )
    def test_taxonomy(self, error, parent, category, retryable):
        assert isinstance(error, parent)
        assert error.category == category
        assert error.retryable is retryable

    def test_schema_conflict_names_field_and_types(self):
        err = SchemaConflictError(
            "foo.bar",
            {"string", "long"},
            collections={"string": ["dupes-a"], "long": ["dupes-b"]},
        )
        assert err.field_name == "foo.bar"
        assert err.types == ["long", "string"]
        assert "foo.bar" in str(err)
        assert err.context.field == "foo.bar"
        assert err.to_dict()["collections"] == {"string": ["dupes-a"], "long": ["dupes-b"]}

    def test_source_not_found_carries_pattern(self):
        err = SourceNotFoundError("invalid")
        assert err.pattern == "invalid"
        assert err.context.pattern == "invalid"
        assert "invalid" in err.message

    def test_cache_errors_carry_key(self):
        assert CacheMissError("fields-1").context.cache_key == "fields-1"
        assert CacheWriteError("fields-2").cache_key == "fields-2"


class TestHelpers:
    def test_is_retryable(self):
        assert is_retryable(TransportError("x")) is True
        assert is_retryable(SchemaConflictError("f", ["a", "b"])) is False
        assert is_retryable(RuntimeError("x")) is False

    def test_get_retry_after(self):
        assert get_retry_after(TransportError("x", retry_after=30)) == 30
        assert get_retry_after(ValueError("x")) is None

    def test_categorize_error(self):
        assert categorize_error(CacheMissError("k")) == ErrorCategory.CACHE
        assert categorize_error(ConnectionError()) == ErrorCategory.NETWORK
        assert categorize_error(KeyError("x")) == ErrorCategory.PARSE
        assert categorize_error(RuntimeError()) == ErrorCategory.UNKNOWN
