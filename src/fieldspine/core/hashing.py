"""
Deterministic cache keys for source patterns.

Field schemas are a property of the pattern, not of the query shaping
parameters on a source, so the key is computed from the pattern alone.
Two sources sharing a pattern share a cache entry, in-process and in the
store.

Manifesto:
    - **Deterministic:** Same pattern → same key, across processes and restarts
    - **Store-safe:** Hex digest only, no ``*`` or ``,`` in document ids
    - **Collision-resistant:** SHA-256 based

Examples:
    >>> cache_key("logs-*") == cache_key("logs-*")
    True
    >>> cache_key("logs-*").startswith("fields-")
    True

Tags:
    hashing, cache-key, fieldspine
"""

import hashlib
from typing import Any

CACHE_KEY_PREFIX = "fields-"


def compute_hash(*values: Any, length: int = 32) -> str:
    """
    Compute deterministic hash from values.

    Values are stringified and joined with ``|`` before hashing, so the
    order of values matters.

    Args:
        *values: Values to hash (converted to strings)
        length: Hex digest length (default 32 = 128 bits)

    Returns:
        Hex string of specified length
    """
    content = "|".join(str(v) for v in values)
    return hashlib.sha256(content.encode()).hexdigest()[:length]


def cache_key(pattern: str) -> str:
    """Derive the cache key for a source pattern.

    Leading and trailing whitespace is not significant in a pattern.
    """
    return CACHE_KEY_PREFIX + compute_hash(pattern.strip())
