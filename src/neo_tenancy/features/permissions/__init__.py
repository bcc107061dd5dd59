"""Permissions feature: roles, permission resolution and authorization checks."""

from .entities import (
    Role,
    permission_matches,
    find_matching_permission,
    RoleRepository,
    RolePermissionCache,
)
from .repositories import (
    InMemoryRoleRepository,
    AsyncPGRoleRepository,
    RedisRolePermissionCache,
    MemoryRolePermissionCache,
)
from .services import (
    PermissionResolver,
    AccessDecision,
    AuthorizationChecker,
    RoleService,
)
from .dependencies import TenantAccessDependencies, TenantAccessContext, TenantAccessError

__all__ = [
    "Role",
    "permission_matches",
    "find_matching_permission",
    "RoleRepository",
    "RolePermissionCache",
    "InMemoryRoleRepository",
    "AsyncPGRoleRepository",
    "RedisRolePermissionCache",
    "MemoryRolePermissionCache",
    "PermissionResolver",
    "AccessDecision",
    "AuthorizationChecker",
    "RoleService",
    "TenantAccessDependencies",
    "TenantAccessContext",
    "TenantAccessError",
]
