"""Permissions repositories."""

from .memory_role_repository import InMemoryRoleRepository
from .role_repository import AsyncPGRoleRepository
from .permission_cache import RedisRolePermissionCache, MemoryRolePermissionCache, role_permissions_key

__all__ = [
    "InMemoryRoleRepository",
    "AsyncPGRoleRepository",
    "RedisRolePermissionCache",
    "MemoryRolePermissionCache",
    "role_permissions_key",
]
