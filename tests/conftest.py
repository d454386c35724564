"""
Shared pytest fixtures for fieldspine tests.

This module provides:
- An in-memory store seeded with the ``valid`` and ``dupes`` patterns
- Source fixtures for the common patterns
- A Mapper wired to the seeded store

Patterns:
    valid    alias over valid-a {baz: long} and valid-b {foo.bar: string}
    dupes    alias over dupes-a {foo.bar: string} and dupes-b {foo.bar: long}
    invalid  matches nothing
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fieldspine.core.settings import FieldSpineSettings
from fieldspine.mapping import Mapper, Source
from fieldspine.store import InMemoryStore

CACHE_INDEX = ".fieldspine-test"


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if "integration" in markers:
            continue
        item.add_marker(pytest.mark.unit)


@pytest.fixture
def settings() -> FieldSpineSettings:
    return FieldSpineSettings(cache_index=CACHE_INDEX, dedupe_discovery=True)


@pytest.fixture
def store() -> InMemoryStore:
    store = InMemoryStore(
        {
            "valid-a": {"baz": "long"},
            "valid-b": {"foo.bar": "string"},
            "dupes-a": {"foo.bar": "string"},
            "dupes-b": {"foo.bar": "long"},
        }
    )
    store.add_alias("valid", ["valid-a", "valid-b"])
    store.add_alias("dupes", ["dupes-a", "dupes-b"])
    return store


@pytest.fixture
def mapper(store: InMemoryStore, settings: FieldSpineSettings) -> Mapper:
    return Mapper(store, settings=settings)


@pytest.fixture
def valid_source() -> Source:
    return Source("valid", size=5)


@pytest.fixture
def dupes_source() -> Source:
    return Source("dupes")


@pytest.fixture
def invalid_source() -> Source:
    return Source("invalid", size=5)
