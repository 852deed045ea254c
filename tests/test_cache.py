"""Tests for core/cache.py."""

# pylint: disable=missing-function-docstring

from unittest.mock import patch

import pytest

from spf_macro.core.cache import (
    CacheManager,
    MemoryCache,
    RedisCache,
    get_cache_manager,
    init_cache,
    reset_cache_manager,
    set_cache_manager,
)
from spf_macro.core.config import Settings

PTR_KEY = "ptr:192.0.2.3:example.com"


class TestMemoryCache:
    """Tests for MemoryCache class."""

    @pytest.fixture
    def memory_cache(self):
        return MemoryCache()

    async def test_get_returns_none_for_missing_key(self, memory_cache):
        assert await memory_cache.get(PTR_KEY) is None

    async def test_set_and_get(self, memory_cache):
        await memory_cache.set(PTR_KEY, "mail.example.com", ttl=300)
        assert await memory_cache.get(PTR_KEY) == "mail.example.com"

    async def test_delete(self, memory_cache):
        await memory_cache.set(PTR_KEY, "unknown", ttl=300)

        assert await memory_cache.delete(PTR_KEY) is True
        assert await memory_cache.delete(PTR_KEY) is False
        assert await memory_cache.get(PTR_KEY) is None


class TestCacheManager:
    """Tests for CacheManager class."""

    def test_key_joins_parts(self):
        assert CacheManager.key("ptr", "192.0.2.3", "example.com") == PTR_KEY

    async def test_default_backend_is_memory(self):
        manager = CacheManager()

        assert await manager.get(PTR_KEY) is None
        assert isinstance(manager.backend, MemoryCache)

    async def test_prefix_applied_to_backend_keys(self):
        backend = MemoryCache()
        manager = CacheManager(backend=backend, prefix="spf-macro:")

        await manager.set(PTR_KEY, "mail.example.com", ttl=300)

        assert await backend.get(f"spf-macro:{PTR_KEY}") == "mail.example.com"
        assert await backend.get(PTR_KEY) is None
        assert await manager.get(PTR_KEY) == "mail.example.com"

        assert await manager.delete(PTR_KEY) is True
        assert await backend.get(f"spf-macro:{PTR_KEY}") is None

    def test_from_settings_without_redis(self):
        settings = Settings(redis_ip=None, cache_prefix="test:", _env_file=None)

        manager = CacheManager.from_settings(settings)

        assert manager.prefix == "test:"
        assert isinstance(manager.backend, MemoryCache)

    def test_from_settings_with_redis(self):
        settings = Settings(redis_ip="127.0.0.1", redis_db=2, _env_file=None)

        with patch("spf_macro.core.cache.aioredis.from_url") as mock_from_url:
            manager = CacheManager.from_settings(settings)

        assert isinstance(manager.backend, RedisCache)
        assert manager.prefix == "spf-macro:"
        assert mock_from_url.call_args.args == ("redis://127.0.0.1:6379/2",)

    async def test_log_output(self, caplog):
        manager = CacheManager()

        with caplog.at_level("DEBUG", logger="spf_macro.core.cache"):
            await manager.set(PTR_KEY, "unknown", ttl=300, log=True)
            await manager.delete(PTR_KEY)

        assert f"Cached {PTR_KEY} = unknown for 300s" in caplog.text
        assert f"Evicted {PTR_KEY}" in caplog.text


class TestModuleFunctions:
    """Tests for the default cache manager helpers."""

    @pytest.fixture(autouse=True)
    def reset_manager(self):
        """Reset cache manager before and after each test."""
        reset_cache_manager()
        yield
        reset_cache_manager()

    def test_default_manager_uses_settings_prefix(self):
        settings = Settings(redis_ip=None, cache_prefix="shared:", _env_file=None)

        with patch("spf_macro.core.cache.get_settings", return_value=settings):
            manager = get_cache_manager()

        assert manager.prefix == "shared:"
        assert get_cache_manager() is manager

    def test_inject_custom_manager(self):
        custom_manager = CacheManager()
        set_cache_manager(custom_manager)

        assert get_cache_manager() is custom_manager

    def test_init_cache_replaces_default_manager(self):
        set_cache_manager(CacheManager(prefix="old:"))
        settings = Settings(redis_ip=None, cache_prefix="new:", _env_file=None)

        manager = init_cache(settings)

        assert get_cache_manager() is manager
        assert manager.prefix == "new:"
