import json
import fnmatch
from abc import ABC, abstractmethod
from typing import Any, Optional, Dict, Tuple
import time
import logging

import redis.asyncio as redis

from app.core.config import settings

logger = logging.getLogger(__name__)

KEY_NAMESPACE = "learnify"

class CacheBackend(ABC):
    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    async def delete_pattern(self, pattern: str) -> int:
        pass

    @abstractmethod
    async def clear(self) -> bool:
        pass

class MemoryCacheBackend(CacheBackend):
    """Per-process cache. Entries are (value, expires_at); expires_at of None never expires."""

    def __init__(self):
        self._entries: Dict[str, Tuple[Any, Optional[float]]] = {}

    async def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and time.monotonic() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        if ttl is None:
            ttl = settings.CACHE_TTL
        self._entries[key] = (value, time.monotonic() + ttl if ttl else None)
        return True

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def delete_pattern(self, pattern: str) -> int:
        doomed = [key for key in self._entries if fnmatch.fnmatchcase(key, pattern)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    async def clear(self) -> bool:
        self._entries.clear()
        return True

class RedisCacheBackend(CacheBackend):
    """Shared cache; every key lives under KEY_NAMESPACE so clear() leaves other tenants of the db alone."""

    def __init__(self, redis_url: str, namespace: str = KEY_NAMESPACE):
        self.redis = redis.from_url(redis_url, decode_responses=True)
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        try:
            value = await self.redis.get(self._key(key))
            return json.loads(value) if value is not None else None
        except (redis.RedisError, json.JSONDecodeError) as e:
            logger.error(f"Redis GET error for key {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        if ttl is None:
            ttl = settings.CACHE_TTL
        try:
            serialized = json.dumps(value, default=str)
            if ttl:
                await self.redis.setex(self._key(key), ttl, serialized)
            else:
                await self.redis.set(self._key(key), serialized)
            return True
        except redis.RedisError as e:
            logger.error(f"Redis SET error for key {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        try:
            return await self.redis.delete(self._key(key)) > 0
        except redis.RedisError as e:
            logger.error(f"Redis DELETE error for key {key}: {e}")
            return False

    async def delete_pattern(self, pattern: str) -> int:
        try:
            keys = [key async for key in self.redis.scan_iter(match=self._key(pattern))]
            return await self.redis.delete(*keys) if keys else 0
        except redis.RedisError as e:
            logger.error(f"Redis pattern delete error for {pattern}: {e}")
            return 0

    async def clear(self) -> bool:
        await self.delete_pattern("*")
        return True

def create_cache_backend() -> CacheBackend:
    if settings.REDIS_URL:
        logger.info("Initializing Redis cache backend")
        return RedisCacheBackend(settings.REDIS_URL)

    logger.info("Using in-memory cache backend")
    return MemoryCacheBackend()

class CacheManager:
    def __init__(self, backend: CacheBackend):
        self.backend = backend

    async def get(self, key: str) -> Optional[Any]:
        return await self.backend.get(key)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        return await self.backend.set(key, value, ttl)

    async def delete(self, key: str) -> bool:
        return await self.backend.delete(key)

    async def delete_pattern(self, pattern: str) -> int:
        return await self.backend.delete_pattern(pattern)

    async def invalidate_user_cache(self, user_id: int) -> int:
        """Drop every per-user read (progress, enrollments, certificates) after a write by or for that user."""
        count = await self.backend.delete_pattern(f"user:{user_id}:*")
        logger.debug(f"Invalidated {count} cache entries for user {user_id}")
        return count

    async def clear(self) -> bool:
        return await self.backend.clear()

cache = CacheManager(create_cache_backend())
