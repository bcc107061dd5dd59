"""Authorization checks inside a tenant.

Decision order, first match wins:

1. global administrators are allowed everywhere
2. no membership in the tenant denies
3. the tenant owner is allowed, even with a disabled membership
4. a disabled membership denies
5. the membership's role grants the permission by wildcard, equality or
   dotted ancestry, otherwise deny
"""

import logging
from dataclasses import dataclass
from typing import Optional, Set

from ....config.constants import DecisionReason
from ....core.exceptions import CacheError, PermissionDeniedError, ValidationError
from ...memberships.entities import MembershipRepository
from ...users.entities import UserDirectory
from ..entities import RoleRepository, RolePermissionCache, find_matching_permission
from .permission_resolver import PermissionResolver


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of an authorization check; truthy when allowed."""
    
    allowed: bool
    reason: DecisionReason
    matched_permission: Optional[str] = None
    
    def __bool__(self) -> bool:
        return self.allowed


class AuthorizationChecker:
    """Decides whether an actor holds a permission inside a tenant."""
    
    def __init__(
        self,
        user_directory: UserDirectory,
        membership_repository: MembershipRepository,
        role_repository: RoleRepository,
        resolver: PermissionResolver,
        cache: Optional[RolePermissionCache] = None,
    ):
        self._users = user_directory
        self._memberships = membership_repository
        self._roles = role_repository
        self._resolver = resolver
        self._cache = cache
    
    async def authorize(self, actor_id: str, tenant_id: str, required_permission: str) -> AccessDecision:
        if not actor_id or not tenant_id:
            raise ValidationError("Actor id and tenant id are required")
        if not required_permission:
            raise ValidationError("Required permission cannot be empty")
        
        decision = await self._decide(actor_id, tenant_id, required_permission)
        logger.debug(
            f"Authorization {'allowed' if decision.allowed else 'denied'}: actor={actor_id} "
            f"tenant={tenant_id} permission={required_permission} reason={decision.reason.value}"
        )
        return decision
    
    async def must_authorize(self, actor_id: str, tenant_id: str, required_permission: str) -> AccessDecision:
        """Like ``authorize`` but raises PermissionDeniedError on denial."""
        decision = await self.authorize(actor_id, tenant_id, required_permission)
        if not decision.allowed:
            raise PermissionDeniedError(
                f"Permission '{required_permission}' denied",
                details={
                    "actor_id": actor_id,
                    "tenant_id": tenant_id,
                    "permission": required_permission,
                    "reason": decision.reason.value,
                },
            )
        return decision
    
    async def owner_or_permission(self, actor_id: str, tenant_id: str, permission: str) -> AccessDecision:
        """Route-level guard for administrative endpoints: the owner, or one named permission."""
        return await self.must_authorize(actor_id, tenant_id, permission)
    
    async def _decide(self, actor_id: str, tenant_id: str, required: str) -> AccessDecision:
        if await self._users.is_global_admin(actor_id):
            return AccessDecision(True, DecisionReason.GLOBAL_ADMIN)
        
        membership = await self._memberships.get(tenant_id, actor_id)
        if membership is None:
            return AccessDecision(False, DecisionReason.NO_MEMBERSHIP)
        
        if membership.is_owner:
            return AccessDecision(True, DecisionReason.OWNER)
        
        if membership.is_disabled:
            return AccessDecision(False, DecisionReason.MEMBERSHIP_DISABLED)
        
        permissions = await self.get_role_permissions(tenant_id, membership.role_id)
        if permissions is None:
            return AccessDecision(False, DecisionReason.ROLE_NOT_FOUND)
        if not permissions:
            return AccessDecision(False, DecisionReason.NO_PERMISSIONS)
        
        matched = find_matching_permission(sorted(permissions), required)
        if matched is None:
            return AccessDecision(False, DecisionReason.PERMISSION_MISSING)
        return AccessDecision(True, DecisionReason.PERMISSION_GRANTED, matched)
    
    async def get_role_permissions(self, tenant_id: str, role_id: str) -> Optional[Set[str]]:
        """Resolved set of a role, None when the role does not exist.
        
        Reads the cache first, then the role store. Nothing is written
        back: a role that was never resolved is computed on the fly, and
        the cache is only filled by the resolver after it stores a set.
        """
        cached = await self._cache_get(tenant_id, role_id)
        if cached is not None:
            return cached
        
        role = await self._roles.get(tenant_id, role_id)
        if role is None:
            return None
        
        if role.is_resolved:
            return set(role.resolved_permissions)
        return await self._resolver.compute(role)
    
    async def _cache_get(self, tenant_id: str, role_id: str) -> Optional[Set[str]]:
        if self._cache is None:
            return None
        try:
            return await self._cache.get(tenant_id, role_id)
        except CacheError as e:
            logger.warning(f"Permission cache read failed, falling back to role store: {e}")
            return None
