"""Tests for the resolved-permission cache adapters."""

import json
import time

import pytest
from unittest.mock import AsyncMock
from redis.exceptions import ConnectionError as RedisConnectionError

from neo_tenancy.core.exceptions import CacheError
from neo_tenancy.features.permissions import MemoryRolePermissionCache, RedisRolePermissionCache
from neo_tenancy.features.permissions.repositories.permission_cache import role_permissions_key


KEY = "tenancy:t1:role:CLERK:permissions"


class TestRedisRolePermissionCache:
    """Test the Redis adapter against a mocked client."""
    
    def test_key_pattern(self):
        assert role_permissions_key("t1", "CLERK") == KEY
    
    @pytest.mark.asyncio
    async def test_set_stores_sorted_json_with_ttl(self):
        redis_client = AsyncMock()
        cache = RedisRolePermissionCache(redis_client, default_ttl=60)
        
        await cache.set("t1", "CLERK", {"b.x", "a.y"})
        
        redis_client.set.assert_awaited_once_with(KEY, json.dumps(["a.y", "b.x"]), ex=60)
    
    @pytest.mark.asyncio
    async def test_get_decodes(self):
        redis_client = AsyncMock()
        redis_client.get.return_value = b'["a.y", "b.x"]'
        cache = RedisRolePermissionCache(redis_client)
        
        assert await cache.get("t1", "CLERK") == {"a.y", "b.x"}
    
    @pytest.mark.asyncio
    async def test_get_miss(self):
        redis_client = AsyncMock()
        redis_client.get.return_value = None
        
        assert await RedisRolePermissionCache(redis_client).get("t1", "CLERK") is None
    
    @pytest.mark.asyncio
    async def test_redis_errors_become_cache_errors(self):
        redis_client = AsyncMock()
        redis_client.get.side_effect = RedisConnectionError("refused")
        redis_client.delete.side_effect = RedisConnectionError("refused")
        cache = RedisRolePermissionCache(redis_client)
        
        with pytest.raises(CacheError):
            await cache.get("t1", "CLERK")
        with pytest.raises(CacheError):
            await cache.invalidate("t1", "CLERK")
    
    @pytest.mark.asyncio
    async def test_corrupt_entry(self):
        redis_client = AsyncMock()
        redis_client.get.return_value = b"not json"
        
        with pytest.raises(CacheError):
            await RedisRolePermissionCache(redis_client).get("t1", "CLERK")


class TestMemoryRolePermissionCache:
    """Test the in-process adapter."""
    
    @pytest.mark.asyncio
    async def test_roundtrip_and_invalidate(self):
        cache = MemoryRolePermissionCache()
        
        await cache.set("t1", "CLERK", {"a.b"})
        assert await cache.get("t1", "CLERK") == {"a.b"}
        
        await cache.invalidate("t1", "CLERK")
        assert await cache.get("t1", "CLERK") is None
    
    @pytest.mark.asyncio
    async def test_expired_entry_is_a_miss(self):
        cache = MemoryRolePermissionCache(default_ttl=10)
        await cache.set("t1", "CLERK", {"a.b"})
        
        permissions, _ = cache._entries[KEY]
        cache._entries[KEY] = (permissions, time.monotonic() - 1)
        
        assert await cache.get("t1", "CLERK") is None
