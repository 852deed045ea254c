"""Lookup cache for DNS-derived macro values, in memory or in Redis."""

# pylint: disable=missing-function-docstring

import logging
from typing import Optional, Protocol

import redis.asyncio as aioredis
from aiocache import SimpleMemoryCache

from spf_macro.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

KEY_SEPARATOR = ":"


class CacheBackend(Protocol):
    """Protocol for cache backends."""

    async def get(self, key: str) -> Optional[str]: ...
    async def set(self, key: str, value: str, ttl: int) -> None: ...
    async def delete(self, key: str) -> bool: ...


class RedisCache:
    """Shared cache in a Redis database; values are stored as text."""

    def __init__(self, url: str):
        self._client = aioredis.from_url(url, encoding="utf-8", decode_responses=True)

    async def get(self, key: str) -> Optional[str]:
        return await self._client.get(key)

    async def set(self, key: str, value: str, ttl: int) -> None:
        await self._client.set(key, value, ex=ttl)

    async def delete(self, key: str) -> bool:
        return await self._client.delete(key) > 0


class MemoryCache:
    """Per-process cache backed by aiocache."""

    def __init__(self):
        self._cache = SimpleMemoryCache()

    async def get(self, key: str) -> Optional[str]:
        return await self._cache.get(key)

    async def set(self, key: str, value: str, ttl: int) -> None:
        await self._cache.set(key, value, ttl=ttl)

    async def delete(self, key: str) -> bool:
        return bool(await self._cache.delete(key))


class CacheManager:
    """
    Namespaced access to a cache backend.

    Every key is stored under ``prefix`` so several services can share
    one Redis database. Without a backend, a MemoryCache is created on
    first use.
    """

    def __init__(self, backend: Optional[CacheBackend] = None, prefix: str = ""):
        self._backend = backend
        self.prefix = prefix

    @classmethod
    def from_settings(cls, settings: Settings) -> "CacheManager":
        """Build a manager using Redis when configured, memory otherwise."""
        backend = RedisCache(settings.redis_url) if settings.use_redis else None
        return cls(backend=backend, prefix=settings.cache_prefix)

    @staticmethod
    def key(*parts: object) -> str:
        """Join key parts, e.g. ``key("ptr", ip, domain)``."""
        return KEY_SEPARATOR.join(str(p) for p in parts)

    @property
    def backend(self) -> CacheBackend:
        if self._backend is None:
            self._backend = MemoryCache()

        return self._backend

    async def get(self, key: str) -> Optional[str]:
        return await self.backend.get(self.prefix + key)

    async def set(self, key: str, value: str, ttl: int, log: bool = False) -> None:
        await self.backend.set(self.prefix + key, value, ttl)

        if log:
            logger.debug("Cached %s = %s for %ss", key, value, ttl)

    async def delete(self, key: str) -> bool:
        deleted = await self.backend.delete(self.prefix + key)

        if deleted:
            logger.debug("Evicted %s", key)

        return deleted


# Default cache manager instance
_cache_manager: Optional[CacheManager] = None


def get_cache_manager() -> CacheManager:
    """Get or create the default cache manager from the current settings."""
    global _cache_manager

    if _cache_manager is None:
        _cache_manager = CacheManager.from_settings(get_settings())

    return _cache_manager


def init_cache(settings: Settings) -> CacheManager:
    """Replace the default cache manager. Call at startup."""
    global _cache_manager

    _cache_manager = CacheManager.from_settings(settings)
    return _cache_manager


def set_cache_manager(manager: CacheManager) -> None:
    """Set a custom cache manager (useful for testing)."""
    global _cache_manager

    _cache_manager = manager


def reset_cache_manager() -> None:
    """Reset the cache manager (useful for testing)."""
    global _cache_manager

    _cache_manager = None
