"""
Tests for fieldspine.core.hashing module.

Tests cover:
- Deterministic hash computation
- Cache key derivation from patterns
"""

from fieldspine.core.hashing import CACHE_KEY_PREFIX, cache_key, compute_hash


class TestComputeHash:
    """Tests for compute_hash function."""

    def test_hash_default_length(self):
        result = compute_hash("test_value")
        assert isinstance(result, str)
        assert len(result) == 32

    def test_hash_deterministic(self):
        assert compute_hash("a", "b") == compute_hash("a", "b")

    def test_hash_order_matters(self):
        assert compute_hash("a", "b") != compute_hash("b", "a")

    def test_custom_length(self):
        assert len(compute_hash("test", length=16)) == 16


class TestCacheKey:
    """Tests for cache_key function."""

    def test_same_pattern_same_key(self):
        assert cache_key("logs-*") == cache_key("logs-*")

    def test_different_patterns_different_keys(self):
        assert cache_key("logs-*") != cache_key("metrics-*")

    def test_key_is_store_safe(self):
        key = cache_key("logs-*,-logs-old")
        assert key.startswith(CACHE_KEY_PREFIX)
        assert "*" not in key
        assert "," not in key

    def test_surrounding_whitespace_ignored(self):
        assert cache_key(" valid ") == cache_key("valid")

    def test_stable_value(self):
        # Persisted entries are addressed by this value across restarts.
        assert cache_key("valid") == CACHE_KEY_PREFIX + compute_hash("valid")
