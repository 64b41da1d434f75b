"""
Redis-backed counters for per-user rate limiting.
Every call degrades to "allowed" when Redis is unavailable.
"""
from typing import Optional
from . import core
import logging

logger = logging.getLogger(__name__)

class CacheManager:
    """Small wrapper over the shared Redis connection"""

    def _make_key(self, key: str, prefix: str = "") -> str:
        if prefix:
            return f"{prefix}:{key}"
        return key

    async def get_int(self, key: str, prefix: str = "") -> Optional[int]:
        if not core.REDIS:
            return None
        cache_key = self._make_key(key, prefix)
        try:
            value = await core.REDIS.get(cache_key)
            return int(value) if value is not None else None
        except Exception as e:
            logger.error(f"Cache get failed for key {cache_key}: {str(e)}")
            return None

    async def increment(self, key: str, ttl: int, prefix: str = "") -> Optional[int]:
        """Increment atomically; the TTL is set when the key is created"""
        if not core.REDIS:
            return None
        cache_key = self._make_key(key, prefix)
        try:
            value = await core.REDIS.incr(cache_key)
            if value == 1:
                await core.REDIS.expire(cache_key, ttl)
            return value
        except Exception as e:
            logger.error(f"Cache increment failed for key {cache_key}: {str(e)}")
            return None

cache = CacheManager()

async def check_rate_limit(user_id: int, action: str, limit: int = 100, window: int = 3600) -> bool:
    """Check if user is within rate limit"""
    key = f"{user_id}:{action}"
    current = await cache.get_int(key, "rate_limit")
    if current is not None and current >= limit:
        return False
    await cache.increment(key, window, "rate_limit")
    return True
