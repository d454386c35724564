"""Tests for fieldspine.mapping.discovery."""

import pytest

from fieldspine.core.errors import (
    MappingParseError,
    SourceNotFoundError,
    StoreNotFoundError,
    TransportError,
)
from fieldspine.mapping.discovery import LiveDiscovery
from fieldspine.mapping.source import Source


class _RawStore:
    """Store double returning a fixed introspection payload."""

    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.patterns = []

    async def introspect_field_mappings(self, pattern):
        self.patterns.append(pattern)
        if self.error is not None:
            raise self.error
        return self.payload


class TestLiveDiscovery:
    @pytest.mark.asyncio
    async def test_returns_per_collection_payload(self, store, valid_source):
        raw = await LiveDiscovery(store).discover(valid_source)
        assert raw == {"valid-a": {"baz": "long"}, "valid-b": {"foo.bar": "string"}}
        assert store.calls["introspect_field_mappings"] == 1

    @pytest.mark.asyncio
    async def test_uses_pattern_only(self):
        raw_store = _RawStore(payload={"x": {"a": "long"}})
        await LiveDiscovery(raw_store).discover(Source("logs-*", size=5, query={"match_all": {}}))
        assert raw_store.patterns == ["logs-*"]

    @pytest.mark.asyncio
    async def test_no_match_is_source_not_found(self, store, invalid_source):
        with pytest.raises(SourceNotFoundError) as exc_info:
            await LiveDiscovery(store).discover(invalid_source)
        assert exc_info.value.pattern == "invalid"
        assert isinstance(exc_info.value.__cause__, StoreNotFoundError)

    @pytest.mark.asyncio
    async def test_empty_payload_is_source_not_found(self):
        with pytest.raises(SourceNotFoundError):
            await LiveDiscovery(_RawStore(payload={})).discover(Source("logs-*"))

    @pytest.mark.asyncio
    async def test_transport_error_propagates_unchanged(self):
        error = TransportError("cluster red")
        with pytest.raises(TransportError) as exc_info:
            await LiveDiscovery(_RawStore(error=error)).discover(Source("logs-*"))
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_foreign_exception_wrapped(self):
        with pytest.raises(TransportError) as exc_info:
            await LiveDiscovery(_RawStore(error=OSError("reset"))).discover(Source("logs-*"))
        assert exc_info.value.context.pattern == "logs-*"

    @pytest.mark.asyncio
    async def test_not_retried(self):
        raw_store = _RawStore(error=TransportError("flaky"))
        with pytest.raises(TransportError):
            await LiveDiscovery(raw_store).discover(Source("logs-*"))
        assert len(raw_store.patterns) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [["a"], {"x": ["a"]}, {"x": {"f": 3}}])
    async def test_malformed_payload(self, payload):
        with pytest.raises(MappingParseError):
            await LiveDiscovery(_RawStore(payload=payload)).discover(Source("logs-*"))
