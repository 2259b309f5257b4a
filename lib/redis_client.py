# =============================================================================
# lib/redis_client.py - Shared Redis Connection
# =============================================================================
# One Redis client per process for the cache and lock backends.
# =============================================================================

import logging

import redis

from app.config import settings

logger = logging.getLogger(__name__)

_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Get (or lazily create) the Redis client for REDIS_URL."""
    global _client
    if _client is None:
        _client = redis.from_url(settings.REDIS_URL)
        logger.info("Redis client initialized")
    return _client
