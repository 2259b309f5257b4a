# =============================================================================
# tests/test_cache.py - Ephemeral Cache Tests
# =============================================================================
# This module contains tests for:
# - TTL expiry with a controllable clock
# - Payload size limit and unserializable values
# - Sweeping of expired entries and the entry cap
# - RedisCache with a mocked client (faults are swallowed)
# - Cached reads through the Datastore
# =============================================================================

from datetime import date
from unittest.mock import MagicMock

import pytest

from core.models.module import Module
from core.services.cache_service import MemoryCache, RedisCache, cache_key


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return MemoryCache(default_ttl=600, max_payload_chars=100, clock=clock)


# =============================================================================
# Key Tests
# =============================================================================

class TestCacheKey:

    def test_key_carries_session(self):
        assert cache_key("2025-26", "STUDENTS", "Master") == "2025-26:STUDENTS:Master"

    def test_parts_are_stringified(self):
        assert cache_key("2025-26", Module.FEES.value, 10) == "2025-26:FEES:10"


# =============================================================================
# MemoryCache Tests
# =============================================================================

class TestMemoryCache:
    """Test the in-process TTL cache."""

    def test_put_then_get(self, cache):
        assert cache.put("k", [["1", "Asha"]]) is True
        assert cache.get("k") == [["1", "Asha"]]

    def test_miss(self, cache):
        assert cache.get("missing") is None

    def test_expires_after_ttl(self, cache, clock):
        cache.put("k", {"a": 1}, ttl_seconds=10)

        clock.advance(9.9)
        assert cache.get("k") == {"a": 1}

        clock.advance(0.1)
        assert cache.get("k") is None

    def test_default_ttl(self, cache, clock):
        cache.put("k", 1)

        clock.advance(599)
        assert cache.get("k") == 1
        clock.advance(1)
        assert cache.get("k") is None

    def test_non_positive_ttl_not_stored(self, cache):
        assert cache.put("k", 1, ttl_seconds=0) is False
        assert cache.get("k") is None

    def test_oversized_payload_not_stored(self, cache):
        """Payloads at or above the limit are skipped silently."""
        assert cache.put("big", "x" * 200) is False
        assert cache.get("big") is None

    def test_payload_at_limit_not_stored(self, clock):
        cache = MemoryCache(default_ttl=60, max_payload_chars=5, clock=clock)

        # '"abc"' is exactly 5 characters
        assert cache.put("k", "abc") is False
        assert cache.put("k", "ab") is True

    def test_unserializable_value_not_stored(self, cache):
        assert cache.put("k", object()) is False

    def test_dates_come_back_as_iso_strings(self, cache):
        cache.put("k", [date(2025, 4, 1)])

        assert cache.get("k") == ["2025-04-01"]

    def test_returns_copies(self, cache):
        cache.put("k", [1, 2])
        cache.get("k").append(3)

        assert cache.get("k") == [1, 2]

    def test_remove_and_clear(self, cache):
        cache.put("a", 1)
        cache.put("b", 2)

        cache.remove("a")
        cache.remove("never-there")
        assert cache.get("a") is None

        cache.clear()
        assert cache.get("b") is None

    def test_put_sweeps_expired_entries(self, cache, clock):
        """Keys that are never read again do not linger after expiry."""
        for i in range(5):
            cache.put(f"old-{i}", i, ttl_seconds=10)
        clock.advance(10)

        cache.put("fresh", 1)

        assert list(cache._entries) == ["fresh"]

    def test_full_cache_evicts_soonest_expiry(self, clock):
        cache = MemoryCache(default_ttl=60, max_payload_chars=100, clock=clock, max_entries=2)
        cache.put("short", 1, ttl_seconds=5)
        cache.put("long", 2, ttl_seconds=50)

        cache.put("new", 3)

        assert set(cache._entries) == {"long", "new"}
        assert cache.get("short") is None

    def test_overwrite_when_full_keeps_others(self, clock):
        cache = MemoryCache(default_ttl=60, max_payload_chars=100, clock=clock, max_entries=2)
        cache.put("a", 1)
        cache.put("b", 2)

        cache.put("a", 10)

        assert cache.get("a") == 10
        assert cache.get("b") == 2

    def test_explicit_zero_ttl_default_honored(self, clock):
        cache = MemoryCache(default_ttl=0, clock=clock)

        assert cache.default_ttl == 0
        assert cache.put("k", 1) is False

    def test_explicit_zero_payload_limit_honored(self, clock):
        cache = MemoryCache(max_payload_chars=0, clock=clock)

        assert cache.max_payload_chars == 0
        assert cache.put("k", 1) is False


# =============================================================================
# RedisCache Tests
# =============================================================================

class TestRedisCache:
    """Test the Redis-backed cache with a mocked client."""

    @pytest.fixture
    def client(self):
        return MagicMock()

    @pytest.fixture
    def redis_cache(self, client):
        return RedisCache(client, prefix="t:", default_ttl=60, max_payload_chars=100)

    def test_put_uses_setex(self, redis_cache, client):
        assert redis_cache.put("k", [1], ttl_seconds=30) is True

        client.setex.assert_called_once_with("t:k", 30, "[1]")

    def test_get_decodes_bytes(self, redis_cache, client):
        client.get.return_value = b'{"a":1}'

        assert redis_cache.get("k") == {"a": 1}
        client.get.assert_called_once_with("t:k")

    def test_get_miss(self, redis_cache, client):
        client.get.return_value = None

        assert redis_cache.get("k") is None

    def test_oversized_not_sent(self, redis_cache, client):
        assert redis_cache.put("k", "x" * 500) is False
        client.setex.assert_not_called()

    def test_faults_are_swallowed(self, redis_cache, client):
        """A broken Redis never fails the caller."""
        client.get.side_effect = ConnectionError("down")
        client.setex.side_effect = ConnectionError("down")
        client.delete.side_effect = ConnectionError("down")

        assert redis_cache.get("k") is None
        assert redis_cache.put("k", 1) is False
        redis_cache.remove("k")

    def test_remove(self, redis_cache, client):
        redis_cache.remove("k")

        client.delete.assert_called_once_with("t:k")


# =============================================================================
# Datastore Cached Reads
# =============================================================================

class TestCachedRows:
    """Test cache-aside reads through the Datastore."""

    def test_cached_rows_served_until_invalidated(self, datastore):
        ctx = datastore.context()
        master = datastore.table(Module.STUDENTS, "Master", ctx, ["ID", "Name"])
        datastore.rows.append(master, ["1", "Asha"])

        assert datastore.cached_rows(Module.STUDENTS, "Master", ctx) == [["1", "Asha"]]

        datastore.rows.append(master, ["2", "Ravi"])
        assert datastore.cached_rows(Module.STUDENTS, "Master", ctx) == [["1", "Asha"]]

        datastore.invalidate(Module.STUDENTS, "Master", ctx)
        assert len(datastore.cached_rows(Module.STUDENTS, "Master", ctx)) == 2

    def test_cache_is_session_scoped(self, datastore):
        ctx = datastore.context()
        master = datastore.table(Module.STUDENTS, "Master", ctx, ["ID"])
        datastore.rows.append(master, ["1"])
        datastore.cached_rows(Module.STUDENTS, "Master", ctx)

        datastore.directory.set_active_session("2025-26")
        new_ctx = datastore.context()

        assert datastore.cached_rows(Module.STUDENTS, "Master", new_ctx) == []
