"""Permission resolution for tenant roles.

A role's effective permission set is its explicit grants plus every
enabled permission of every module bundle attached to it. The result is
stored on the role as a cache; every mutation of grants or bundles must be
followed by ``resolve_one`` before the caller proceeds.

The resolver is the only writer of the shared permission cache. Each
stored set is written through right after it is persisted, so readers
never put an older set back over a newer one.
"""

import logging
from typing import Dict, Iterable, Mapping, Optional, Set

from ....core.exceptions import CacheError
from ....utils import utc_now
from ...catalog.entities import ModulePermissionDefinition, PermissionCatalog
from ..entities import Role, RoleRepository, RolePermissionCache


logger = logging.getLogger(__name__)


class PermissionResolver:
    """Computes and stores resolved permission sets."""
    
    def __init__(
        self,
        role_repository: RoleRepository,
        catalog: PermissionCatalog,
        cache: Optional[RolePermissionCache] = None,
        cache_ttl: Optional[int] = None,
    ):
        self._role_repository = role_repository
        self._catalog = catalog
        self._cache = cache
        self._cache_ttl = cache_ttl
    
    @staticmethod
    def resolve(role: Role, definitions: Mapping[str, ModulePermissionDefinition]) -> Set[str]:
        """Pure resolution of a role against the permission catalog.
        
        Bundles with no catalog entry contribute nothing. A permission is
        left out only when its ``enabled`` flag is explicitly False.
        """
        permissions: Set[str] = set(role.explicit_permissions)
        for bundle_id in role.module_bundles:
            definition = definitions.get(bundle_id)
            if definition is None:
                logger.debug(f"No permission definition for bundle {bundle_id} on {role}")
                continue
            permissions.update(definition.enabled_permission_ids())
        return permissions
    
    async def load_definitions(self) -> Dict[str, ModulePermissionDefinition]:
        return await self._catalog.list_all()
    
    async def compute(self, role: Role) -> Set[str]:
        """Resolve a role without storing the result."""
        return self.resolve(role, await self.load_definitions())
    
    async def resolve_one(self, tenant_id: str, role_id: str) -> bool:
        """Recompute and store one role's resolved set.
        
        Returns:
            False when the role does not exist, True once the new set is stored
        """
        role = await self._role_repository.get(tenant_id, role_id)
        if role is None:
            logger.debug(f"Skipped resolution of missing role {role_id} in tenant {tenant_id}")
            return False
        
        return await self._store(role, self.resolve(role, await self.load_definitions()))
    
    async def resolve_all(self, tenant_id: str) -> int:
        """Recompute and store every role of a tenant; returns how many were stored."""
        roles = await self._role_repository.list_for_tenant(tenant_id)
        definitions = await self.load_definitions()
        
        stored = 0
        for role in roles:
            if await self._store(role, self.resolve(role, definitions)):
                stored += 1
        
        logger.info(f"Resolved {stored}/{len(roles)} roles in tenant {tenant_id}")
        return stored
    
    async def reseed_catalog(self, definitions: Iterable[ModulePermissionDefinition]) -> int:
        """Seed the permission catalog, then re-resolve every role of every tenant.
        
        Returns:
            Number of roles stored with a fresh set
        """
        await self._catalog.seed(definitions)
        
        stored = 0
        for tenant_id in await self._role_repository.list_tenant_ids():
            stored += await self.resolve_all(tenant_id)
        
        logger.info(f"Re-resolved {stored} roles after catalog seed")
        return stored
    
    async def _store(self, role: Role, permissions: Set[str]) -> bool:
        stored = await self._role_repository.set_resolved_permissions(
            role.tenant_id, role.id, sorted(permissions), utc_now()
        )
        if not stored:
            logger.debug(f"{role} disappeared before its resolved permissions were stored")
            return False
        
        await self._publish(role, permissions)
        logger.info(f"Resolved {len(permissions)} permissions for {role}")
        return True
    
    async def _publish(self, role: Role, permissions: Set[str]) -> None:
        """Write the stored set through to the cache, dropping the entry if that fails."""
        if self._cache is None:
            return
        try:
            await self._cache.set(role.tenant_id, role.id, permissions, self._cache_ttl)
        except CacheError as e:
            logger.warning(f"Failed to cache resolved permissions for {role}: {e}")
            await self.invalidate_cached(role.tenant_id, role.id)
    
    async def invalidate_cached(self, tenant_id: str, role_id: str) -> None:
        """Drop the cached set for a role, logging cache failures."""
        if self._cache is None:
            return
        try:
            await self._cache.invalidate(tenant_id, role_id)
        except CacheError as e:
            logger.warning(f"Failed to invalidate cached permissions for role {role_id} in {tenant_id}: {e}")
