"""Resolved-permission cache adapters (Redis and in-process)."""

import json
import logging
import time
from typing import Dict, Optional, Set, Tuple

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ....config.constants import CacheKeys, CacheTTL
from ....core.exceptions import CacheError


logger = logging.getLogger(__name__)


def role_permissions_key(tenant_id: str, role_id: str) -> str:
    return CacheKeys.ROLE_PERMISSIONS.format(tenant_id=tenant_id, role_id=role_id)


class RedisRolePermissionCache:
    """Stores each role's resolved set as a JSON list with a TTL."""
    
    def __init__(self, redis_client: Redis, default_ttl: int = CacheTTL.ROLE_PERMISSIONS):
        self._redis = redis_client
        self._default_ttl = default_ttl
    
    async def get(self, tenant_id: str, role_id: str) -> Optional[Set[str]]:
        key = role_permissions_key(tenant_id, role_id)
        try:
            raw = await self._redis.get(key)
        except RedisError as e:
            raise CacheError(f"Failed to read {key}: {e}") from e
        if raw is None:
            return None
        try:
            return set(json.loads(raw))
        except (TypeError, ValueError) as e:
            raise CacheError(f"Corrupt cache entry {key}: {e}") from e
    
    async def set(self, tenant_id: str, role_id: str, permissions: Set[str], ttl: Optional[int] = None) -> None:
        key = role_permissions_key(tenant_id, role_id)
        try:
            await self._redis.set(key, json.dumps(sorted(permissions)), ex=ttl or self._default_ttl)
        except RedisError as e:
            raise CacheError(f"Failed to write {key}: {e}") from e
    
    async def invalidate(self, tenant_id: str, role_id: str) -> None:
        key = role_permissions_key(tenant_id, role_id)
        try:
            await self._redis.delete(key)
        except RedisError as e:
            raise CacheError(f"Failed to invalidate {key}: {e}") from e


class MemoryRolePermissionCache:
    """Process-local cache with per-entry expiry."""
    
    def __init__(self, default_ttl: int = CacheTTL.ROLE_PERMISSIONS):
        self._default_ttl = default_ttl
        self._entries: Dict[str, Tuple[Set[str], float]] = {}
    
    async def get(self, tenant_id: str, role_id: str) -> Optional[Set[str]]:
        key = role_permissions_key(tenant_id, role_id)
        entry = self._entries.get(key)
        if entry is None:
            return None
        permissions, expires_at = entry
        if time.monotonic() >= expires_at:
            del self._entries[key]
            return None
        return set(permissions)
    
    async def set(self, tenant_id: str, role_id: str, permissions: Set[str], ttl: Optional[int] = None) -> None:
        expires_at = time.monotonic() + (ttl or self._default_ttl)
        self._entries[role_permissions_key(tenant_id, role_id)] = (set(permissions), expires_at)
    
    async def invalidate(self, tenant_id: str, role_id: str) -> None:
        self._entries.pop(role_permissions_key(tenant_id, role_id), None)
