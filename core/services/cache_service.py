# =============================================================================
# core/services/cache_service.py - Ephemeral Cache
# =============================================================================
# Best-effort TTL cache for hot read paths.
#
# The cache is advisory: a miss, an expired entry, an oversized payload or a
# backend fault all just mean "recompute from the row store". Nothing in the
# cache is ever required for correctness, so cache faults are logged and
# swallowed here instead of reaching the caller.
#
# Payloads are stored as JSON, the same as they travel to clients.
# =============================================================================

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from app.config import settings
from lib.utils import to_json

logger = logging.getLogger(__name__)


def cache_key(session: str, *parts: Any) -> str:
    """
    Session-scoped cache key.

    Keys always carry the session so a rollover can never serve the
    previous year's cached rows.

    Example:
        cache_key("2025-26", "STUDENTS", "Master")  # "2025-26:STUDENTS:Master"
    """
    return ":".join([session, *(str(part) for part in parts)])


class Cache(Protocol):
    def get(self, key: str) -> Any | None: ...

    def put(self, key: str, value: Any, ttl_seconds: int | None = None) -> bool: ...

    def remove(self, key: str) -> None: ...


def _serialize(value: Any, max_chars: int) -> str | None:
    try:
        payload = to_json(value)
    except (TypeError, ValueError) as e:
        logger.warning(f"Value not cacheable: {e}")
        return None
    if len(payload) >= max_chars:
        logger.debug(f"Payload of {len(payload)} chars exceeds cache limit; not cached")
        return None
    return payload


@dataclass(frozen=True)
class CacheEntry:
    payload: str
    expires_at: float


class MemoryCache:
    """
    In-process TTL cache.

    Example:
        cache = MemoryCache()
        cache.put("2025-26:STUDENTS:Master", rows, ttl_seconds=600)
        rows = cache.get("2025-26:STUDENTS:Master")
    """

    def __init__(
        self,
        default_ttl: int | None = None,
        max_payload_chars: int | None = None,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 10_000,
    ):
        self.default_ttl = settings.CACHE_DEFAULT_TTL if default_ttl is None else default_ttl
        self.max_payload_chars = (
            settings.CACHE_MAX_PAYLOAD_CHARS if max_payload_chars is None else max_payload_chars
        )
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        """Cached value, or None on miss or expiry."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug(f"Cache miss: {key}")
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                logger.debug(f"Cache expired: {key}")
                return None
        logger.debug(f"Cache hit: {key}")
        return json.loads(entry.payload)

    def put(self, key: str, value: Any, ttl_seconds: int | None = None) -> bool:
        """
        Store `value` until now + ttl.

        Expired entries are swept on every put, and once `max_entries` live
        entries are held the one closest to expiry is evicted.

        Returns:
            True if stored; False for oversized or unserializable values
        """
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            return False
        payload = _serialize(value, self.max_payload_chars)
        if payload is None:
            return False
        with self._lock:
            now = self._clock()
            self._sweep(now)
            if key not in self._entries and len(self._entries) >= self.max_entries:
                oldest = min(self._entries, key=lambda k: self._entries[k].expires_at)
                del self._entries[oldest]
                logger.debug(f"Cache full; evicted {oldest}")
            self._entries[key] = CacheEntry(payload=payload, expires_at=now + ttl)
        return True

    def _sweep(self, now: float) -> None:
        expired = [k for k, entry in self._entries.items() if now >= entry.expires_at]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug(f"Swept {len(expired)} expired cache entries")

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class RedisCache:
    """
    TTL cache in Redis (SETEX), shared by every worker process.

    Example:
        cache = RedisCache(get_redis_client())
    """

    def __init__(
        self,
        client: Any | None = None,
        prefix: str = "schoolvault:cache:",
        default_ttl: int | None = None,
        max_payload_chars: int | None = None,
    ):
        self._client = client
        self.prefix = prefix
        self.default_ttl = settings.CACHE_DEFAULT_TTL if default_ttl is None else default_ttl
        self.max_payload_chars = (
            settings.CACHE_MAX_PAYLOAD_CHARS if max_payload_chars is None else max_payload_chars
        )

    @property
    def client(self) -> Any:
        if self._client is None:
            from lib.redis_client import get_redis_client
            self._client = get_redis_client()
        return self._client

    def get(self, key: str) -> Any | None:
        try:
            raw = self.client.get(self.prefix + key)
            if raw is None:
                logger.debug(f"Cache miss: {key}")
                return None
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            return json.loads(raw)
        except Exception as e:
            logger.warning(f"Cache get failed for {key}: {e}")
            return None

    def put(self, key: str, value: Any, ttl_seconds: int | None = None) -> bool:
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            return False
        payload = _serialize(value, self.max_payload_chars)
        if payload is None:
            return False
        try:
            self.client.setex(self.prefix + key, ttl, payload)
            return True
        except Exception as e:
            logger.warning(f"Cache put failed for {key}: {e}")
            return False

    def remove(self, key: str) -> None:
        try:
            self.client.delete(self.prefix + key)
        except Exception as e:
            logger.warning(f"Cache remove failed for {key}: {e}")


def create_cache() -> Cache:
    """Cache selected by CACHE_BACKEND."""
    if settings.CACHE_BACKEND == "redis":
        return RedisCache()
    return MemoryCache()
