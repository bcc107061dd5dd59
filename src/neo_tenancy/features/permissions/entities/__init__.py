"""Permissions entities."""

from .role import Role
from .matching import permission_matches, find_matching_permission
from .protocols import RoleRepository, RolePermissionCache

__all__ = [
    "Role",
    "permission_matches",
    "find_matching_permission",
    "RoleRepository",
    "RolePermissionCache",
]
