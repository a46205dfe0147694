import json
import fnmatch
import threading
import time
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional
import logging

from fastapi.encoders import jsonable_encoder
from pydantic import TypeAdapter, ValidationError
from redis.exceptions import RedisError

from property_lister.core.cache_config import CACHE_TTL, user_invalidation_patterns

logger = logging.getLogger(__name__)


class CacheError(Exception):
    pass

class CacheMiss(CacheError):
    """Key is absent or expired."""

class SerializationError(CacheError):
    """Value could not be encoded for storage."""

class DeserializationError(CacheError):
    """Stored payload could not be decoded into the expected shape."""

class StoreUnavailable(CacheError):
    """Backing key-value store could not be reached."""


class CacheBackend(ABC):
    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set(self, key: str, value: str, ttl: int) -> None:
        pass

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        pass

    @abstractmethod
    async def keys(self, pattern: str) -> List[str]:
        pass

    @abstractmethod
    async def ping(self) -> bool:
        pass

    async def close(self) -> None:
        pass

class MemoryCacheBackend(CacheBackend):
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._cache: Dict[str, Dict] = {}
        self._lock = threading.Lock()
        self._clock = clock

    async def get(self, key: str) -> Optional[str]:
        with self._lock:
            self._cleanup_expired()
            item = self._cache.get(key)
            return item["value"] if item else None

    async def set(self, key: str, value: str, ttl: int) -> None:
        with self._lock:
            self._cache[key] = {
                "value": value,
                "expiry": self._clock() + ttl if ttl > 0 else 0
            }

    async def delete(self, *keys: str) -> int:
        with self._lock:
            return sum(1 for key in keys if self._cache.pop(key, None) is not None)

    async def keys(self, pattern: str) -> List[str]:
        with self._lock:
            self._cleanup_expired()
            return [key for key in self._cache if fnmatch.fnmatchcase(key, pattern)]

    async def ping(self) -> bool:
        return True

    def _cleanup_expired(self):
        now = self._clock()
        expired_keys = [
            key for key, item in self._cache.items()
            if item["expiry"] > 0 and now >= item["expiry"]
        ]
        for key in expired_keys:
            del self._cache[key]

class RedisCacheBackend(CacheBackend):
    def __init__(self, redis_url: str = "", *, client=None, username: Optional[str] = None, password: Optional[str] = None):
        if client is None:
            import redis.asyncio as redis
            client = redis.from_url(redis_url, decode_responses=True, username=username, password=password)
        self.redis = client

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.redis.get(key)
        except RedisError as e:
            raise StoreUnavailable(f"Redis GET failed for key {key}: {e}") from e

    async def set(self, key: str, value: str, ttl: int) -> None:
        try:
            if ttl > 0:
                await self.redis.setex(key, ttl, value)
            else:
                await self.redis.set(key, value)
        except RedisError as e:
            raise StoreUnavailable(f"Redis SET failed for key {key}: {e}") from e

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return await self.redis.delete(*keys)
        except RedisError as e:
            raise StoreUnavailable(f"Redis DELETE failed: {e}") from e

    async def keys(self, pattern: str) -> List[str]:
        try:
            return [key async for key in self.redis.scan_iter(match=pattern)]
        except RedisError as e:
            raise StoreUnavailable(f"Redis SCAN failed for pattern {pattern}: {e}") from e

    async def ping(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except RedisError as e:
            logger.error(f"Redis PING error: {e}")
            return False

    async def close(self) -> None:
        await self.redis.aclose()

def create_cache_backend(redis_url: str = "", username: Optional[str] = None, password: Optional[str] = None) -> CacheBackend:
    if redis_url:
        logger.info("Initializing Redis cache backend")
        return RedisCacheBackend(redis_url, username=username, password=password)

    logger.info("Using in-memory cache backend")
    return MemoryCacheBackend()


@lru_cache(maxsize=None)
def _adapter(shape: Any) -> TypeAdapter:
    return TypeAdapter(shape)

class CacheStore:
    """JSON value store with a fixed expiry on top of a CacheBackend."""

    def __init__(self, backend: CacheBackend, ttl: int = CACHE_TTL, enabled: bool = True):
        self.backend = backend
        self.ttl = ttl
        self.enabled = enabled

    def encode(self, value: Any) -> str:
        try:
            return json.dumps(jsonable_encoder(value), allow_nan=False)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Cannot encode value of type {type(value).__name__}: {e}") from e

    def decode(self, key: str, raw: str, shape: Any) -> Any:
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            raise DeserializationError(f"Malformed payload under {key}: {e}") from e
        if shape is None:
            return data
        try:
            return _adapter(shape).validate_python(data)
        except ValidationError as e:
            raise DeserializationError(f"Payload under {key} does not match {shape}: {e}") from e

    async def set(self, key: str, value: Any) -> None:
        if not self.enabled:
            return
        payload = self.encode(value)
        await self.backend.set(key, payload, self.ttl)

    async def get(self, key: str, shape: Any = None) -> Any:
        """Return the decoded value, validated against ``shape`` when given.

        Raises CacheMiss, DeserializationError or StoreUnavailable.
        """
        if not self.enabled:
            raise CacheMiss(key)
        raw = await self.backend.get(key)
        if raw is None:
            raise CacheMiss(key)
        return self.decode(key, raw, shape)

    async def delete(self, key: str) -> bool:
        return await self.backend.delete(key) > 0

    async def delete_pattern(self, pattern: str) -> int:
        keys = await self.backend.keys(pattern)
        if not keys:
            return 0
        return await self.backend.delete(*keys)

    async def invalidate_user(self, user_id: str) -> int:
        deleted = 0
        for pattern in user_invalidation_patterns(user_id):
            deleted += await self.delete_pattern(pattern)
        logger.info(f"Invalidated {deleted} cache entries for user {user_id}")
        return deleted
