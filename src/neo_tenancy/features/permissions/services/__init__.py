"""Permissions services."""

from .permission_resolver import PermissionResolver
from .authorization_checker import AccessDecision, AuthorizationChecker
from .role_service import RoleService

__all__ = [
    "PermissionResolver",
    "AccessDecision",
    "AuthorizationChecker",
    "RoleService",
]
