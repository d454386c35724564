"""
fieldspine.store - Backing stores for discovery and the persistent cache.

Modules
-------
protocol    FieldStore protocol (async)
memory      InMemoryStore -- dicts and glob matching, single-process
http        ElasticsearchStore -- httpx against an Elasticsearch cluster
"""

from fieldspine.store.http import ElasticsearchStore
from fieldspine.store.memory import InMemoryStore
from fieldspine.store.protocol import FieldStore

__all__ = ["FieldStore", "InMemoryStore", "ElasticsearchStore"]
