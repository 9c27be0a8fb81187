"""
Redis caching utilities for frequently accessed data
Every operation fails open: a missing Redis only means a cache miss
"""
import json
import logging
from typing import Any, Optional

from .rate_limiter import get_redis_client

logger = logging.getLogger(__name__)


class Cache:
    """Redis cache wrapper with automatic serialization"""

    def __init__(self):
        self.redis_client = None

    def _get_client(self):
        """Lazy load Redis client"""
        if self.redis_client is None:
            try:
                self.redis_client = get_redis_client()
            except Exception as e:
                logger.warning(f"⚠️ Redis cache unavailable: {e}")
                return None
        return self.redis_client

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        client = self._get_client()
        if not client:
            return None

        try:
            value = client.get(key)
            if value:
                logger.debug(f"✅ Cache HIT: {key}")
                return json.loads(value)
            logger.debug(f"❌ Cache MISS: {key}")
            return None
        except Exception as e:
            logger.error(f"❌ Cache get error for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int = 3600) -> bool:
        """Set value in cache with TTL (default 1 hour)"""
        client = self._get_client()
        if not client:
            return False

        try:
            client.setex(key, ttl, json.dumps(value))
            logger.debug(f"✅ Cache SET: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"❌ Cache set error for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        """Delete value from cache"""
        client = self._get_client()
        if not client:
            return False

        try:
            client.delete(key)
            logger.debug(f"✅ Cache DELETE: {key}")
            return True
        except Exception as e:
            logger.error(f"❌ Cache delete error for {key}: {e}")
            return False


# Global cache instance
cache = Cache()


def get_settings_cached(user_id: int) -> Optional[dict]:
    """Get user settings from cache"""
    return cache.get(f"settings:{user_id}")


def set_settings_cached(user_id: int, settings: dict, ttl: int = 3600) -> bool:
    """Set user settings in cache"""
    return cache.set(f"settings:{user_id}", settings, ttl)


def invalidate_settings_cache(user_id: int) -> bool:
    """Invalidate settings cache when settings or availability windows change"""
    return cache.delete(f"settings:{user_id}")


def get_cache_stats() -> dict:
    """Get cache statistics"""
    client = cache._get_client()
    if not client:
        return {"available": False}

    try:
        info = client.info()
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "available": True,
            "used_memory": info.get("used_memory_human"),
            "connected_clients": info.get("connected_clients"),
            "keyspace_hits": hits,
            "keyspace_misses": misses,
            "hit_rate": (hits / max(hits + misses, 1)) * 100,
        }
    except Exception as e:
        logger.error(f"❌ Failed to get cache stats: {e}")
        return {"available": False, "error": str(e)}
