from typing import Any, Dict, Optional
from datetime import datetime, timezone
import logging

from property_lister.core.cache import (
    CacheMiss, CacheStore, DeserializationError, MemoryCacheBackend, RedisCacheBackend, SerializationError,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)

class CacheService:
    """Read-through helpers used by the request handlers.

    Cache trouble never reaches the caller: a miss, an undecodable payload or
    an unreachable store all read as "not cached", and populating is
    best-effort.
    """

    def __init__(self, cache: CacheStore):
        self.cache = cache

    async def cached_read(self, key: str, shape: Any) -> Optional[Any]:
        try:
            value = await self.cache.get(key, shape)
        except CacheMiss:
            logger.debug(f"Cache MISS for key: {key}")
            return None
        except DeserializationError as e:
            logger.warning(f"Discarding undecodable cache entry {key}: {e}")
            return None
        except StoreUnavailable as e:
            logger.error(f"Cache unavailable reading {key}: {e}")
            return None
        logger.debug(f"Cache HIT for key: {key}")
        return value

    async def populate(self, key: str, value: Any) -> bool:
        try:
            await self.cache.set(key, value)
            return True
        except (SerializationError, StoreUnavailable) as e:
            logger.error(f"Failed to populate cache key {key}: {e}")
            return False

    async def get_cache_stats(self) -> Dict[str, Any]:
        backend = self.cache.backend
        stats = {
            "backend": "Redis" if isinstance(backend, RedisCacheBackend) else "Memory",
            "ttl": self.cache.ttl,
            "enabled": self.cache.enabled,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
        try:
            if isinstance(backend, RedisCacheBackend):
                info = await backend.redis.info()
                stats.update({
                    "redis_version": info.get("redis_version"),
                    "used_memory": info.get("used_memory_human"),
                    "connected_clients": info.get("connected_clients"),
                    "keyspace_hits": info.get("keyspace_hits", 0),
                    "keyspace_misses": info.get("keyspace_misses", 0),
                })
            elif isinstance(backend, MemoryCacheBackend):
                stats["cache_entries"] = len(await backend.keys("*"))
        except Exception as e:
            logger.error(f"Failed to get cache stats: {e}")
            stats["error"] = str(e)
        return stats

    async def health_check(self) -> bool:
        test_key = "health_check_test"
        test_value = {"timestamp": datetime.now(timezone.utc).isoformat()}
        try:
            await self.cache.backend.set(test_key, self.cache.encode(test_value), 10)
            retrieved = await self.cache.backend.get(test_key)
            await self.cache.backend.delete(test_key)
            return retrieved is not None and self.cache.decode(test_key, retrieved, None) == test_value
        except Exception as e:
            logger.error(f"Cache health check failed: {e}")
            return False
