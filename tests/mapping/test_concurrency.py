"""
Concurrency tests for Mapper.get_fields.

Covers:
- Concurrent callers for one key share a single discovery
- Failures reach every joined caller
- Cancelling one caller does not cancel the shared resolution
- clear_cache during an in-flight resolution
- Behaviour with deduplication turned off
"""

import asyncio

import pytest

from fieldspine.core.errors import SchemaConflictError
from fieldspine.mapping import Mapper


class TestDeduplication:
    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_discovery(self, mapper, store, valid_source):
        results = await asyncio.gather(*(mapper.get_fields(valid_source) for _ in range(5)))

        assert store.calls["introspect_field_mappings"] == 1
        assert store.calls["put_document"] == 1
        assert all(r is results[0] for r in results)
        assert mapper.get_fields_from_object(valid_source) is results[0]

    @pytest.mark.asyncio
    async def test_different_keys_resolve_independently(self, mapper, store, valid_source, dupes_source):
        results = await asyncio.gather(
            mapper.get_fields(valid_source),
            mapper.get_fields(dupes_source),
            return_exceptions=True,
        )
        assert "baz" in results[0]
        assert isinstance(results[1], SchemaConflictError)
        assert store.calls["introspect_field_mappings"] == 2

    @pytest.mark.asyncio
    async def test_failure_reaches_every_caller(self, mapper, store, dupes_source):
        results = await asyncio.gather(
            mapper.get_fields(dupes_source),
            mapper.get_fields(dupes_source),
            return_exceptions=True,
        )
        assert all(isinstance(r, SchemaConflictError) for r in results)
        assert store.calls["introspect_field_mappings"] == 1

    @pytest.mark.asyncio
    async def test_in_flight_entry_released(self, mapper, valid_source, dupes_source):
        await mapper.get_fields(valid_source)
        with pytest.raises(SchemaConflictError):
            await mapper.get_fields(dupes_source)
        assert mapper._inflight == {}

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_others(self, mapper, valid_source):
        first = asyncio.create_task(mapper.get_fields(valid_source))
        second = asyncio.create_task(mapper.get_fields(valid_source))
        await asyncio.sleep(0)

        first.cancel()
        table = await second

        with pytest.raises(asyncio.CancelledError):
            await first
        assert table["foo.bar"].type == "string"
        assert mapper.get_fields_from_object(valid_source) is table


class TestInvalidationInFlight:
    @pytest.mark.asyncio
    async def test_clear_cache_prevents_repopulation(self, mapper, valid_source):
        pending = asyncio.create_task(mapper.get_fields(valid_source))
        await asyncio.sleep(0)

        await mapper.clear_cache(valid_source)
        table = await pending

        assert table["baz"].type == "long"
        assert mapper.get_fields_from_object(valid_source) is None

    @pytest.mark.asyncio
    async def test_call_after_clear_starts_new_resolution(self, mapper, store, valid_source):
        pending = asyncio.create_task(mapper.get_fields(valid_source))
        await asyncio.sleep(0)
        await mapper.clear_cache(valid_source)

        fresh = await mapper.get_fields(valid_source)
        await pending

        assert mapper.get_fields_from_object(valid_source) is fresh
        assert store.calls["get_document"] == 2

    @pytest.mark.asyncio
    async def test_clear_cache_during_ignore_write(self, mapper, store, valid_source):
        await mapper.get_fields(valid_source)
        pending = asyncio.create_task(mapper.ignore_fields(valid_source, "foo.bar"))
        await asyncio.sleep(0)

        await mapper.clear_cache(valid_source)
        await pending

        assert mapper.get_fields_from_object(valid_source) is None
        table = await mapper.get_fields(valid_source)
        assert table["foo.bar"].type == "string"


class TestWithoutDeduplication:
    @pytest.mark.asyncio
    async def test_each_caller_discovers(self, store, settings, valid_source):
        mapper = Mapper(store, dedupe_discovery=False, settings=settings)

        first, second = await asyncio.gather(
            mapper.get_fields(valid_source), mapper.get_fields(valid_source)
        )

        assert store.calls["introspect_field_mappings"] == 2
        assert store.calls["put_document"] == 2
        assert first == second
        assert mapper.get_fields_from_object(valid_source) in (first, second)
