"""Role management for tenant administrators.

Every change to a role's explicit grants or module bundles is followed by
a resolution pass before the call returns.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from ....config.constants import ROLE_ID_PREFIX, SystemRoleId, WILDCARD_PERMISSION
from ....core.exceptions import ProtectedOperationError, RoleNotFoundError, ValidationError
from ....utils import generate_prefixed_id
from ...memberships.entities import MembershipRepository
from ..entities import Role, RoleRepository
from .permission_resolver import PermissionResolver


logger = logging.getLogger(__name__)


def _dedupe(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(v for v in values if v))


class RoleService:
    """Create, update and delete tenant roles."""
    
    def __init__(
        self,
        role_repository: RoleRepository,
        membership_repository: MembershipRepository,
        resolver: PermissionResolver,
    ):
        self._roles = role_repository
        self._memberships = membership_repository
        self._resolver = resolver
    
    async def list_roles(self, tenant_id: str) -> List[Role]:
        return await self._roles.list_for_tenant(tenant_id)
    
    async def get_role(self, tenant_id: str, role_id: str) -> Role:
        role = await self._roles.get(tenant_id, role_id)
        if role is None:
            raise RoleNotFoundError(
                f"Role {role_id} not found in tenant {tenant_id}",
                details={"tenant_id": tenant_id, "role_id": role_id},
            )
        return role
    
    async def create_role(
        self,
        tenant_id: str,
        name: str,
        explicit_permissions: Optional[Iterable[str]] = None,
        module_bundles: Optional[Iterable[str]] = None,
        description: Optional[str] = None,
    ) -> Role:
        """Create a custom (non-system) role and resolve it."""
        if not name or not name.strip():
            raise ValidationError("Role name is required")
        
        role = await self._roles.create(Role(
            tenant_id=tenant_id,
            id=generate_prefixed_id(ROLE_ID_PREFIX),
            name=name.strip(),
            description=description,
            explicit_permissions=_dedupe(explicit_permissions or []),
            module_bundles=_dedupe(module_bundles or []),
            is_system=False,
        ))
        await self._resolver.resolve_one(tenant_id, role.id)
        logger.info(f"Created role {role.id} ({role.name}) in tenant {tenant_id}")
        return await self.get_role(tenant_id, role.id)
    
    async def update_role(
        self,
        tenant_id: str,
        role_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        explicit_permissions: Optional[Iterable[str]] = None,
        module_bundles: Optional[Iterable[str]] = None,
    ) -> Role:
        """Partially update a role.
        
        The owner role's explicit grants always keep the wildcard.
        """
        role = await self.get_role(tenant_id, role_id)
        
        changes: Dict[str, Any] = {}
        if name is not None:
            if not name.strip():
                raise ValidationError("Role name cannot be empty")
            changes["name"] = name.strip()
        if description is not None:
            changes["description"] = description
        if explicit_permissions is not None:
            permissions = _dedupe(explicit_permissions)
            if role.id == SystemRoleId.OWNER.value and WILDCARD_PERMISSION not in permissions:
                raise ProtectedOperationError(
                    "The owner role must keep the wildcard grant",
                    details={"tenant_id": tenant_id, "role_id": role_id},
                )
            changes["explicit_permissions"] = permissions
        if module_bundles is not None:
            changes["module_bundles"] = _dedupe(module_bundles)
        
        if not changes:
            return role
        
        await self._roles.update(tenant_id, role_id, changes)
        if "explicit_permissions" in changes or "module_bundles" in changes:
            await self._resolver.resolve_one(tenant_id, role_id)
        
        logger.info(f"Updated role {role_id} in tenant {tenant_id}: {', '.join(sorted(changes))}")
        return await self.get_role(tenant_id, role_id)
    
    async def attach_module_bundles(self, tenant_id: str, role_id: str, module_codes: Iterable[str]) -> bool:
        """Add module bundles to a role and re-resolve it.
        
        Returns:
            False when the role does not exist
        """
        role = await self._roles.get(tenant_id, role_id)
        if role is None:
            logger.debug(f"Cannot attach modules to missing role {role_id} in tenant {tenant_id}")
            return False
        
        bundles = _dedupe([*role.module_bundles, *module_codes])
        if bundles != role.module_bundles:
            await self._roles.update(tenant_id, role_id, {"module_bundles": bundles})
        return await self._resolver.resolve_one(tenant_id, role_id)
    
    async def delete_role(self, tenant_id: str, role_id: str) -> None:
        """Delete a custom role that nobody is assigned to."""
        role = await self.get_role(tenant_id, role_id)
        if role.is_system:
            raise ProtectedOperationError(
                f"System role {role_id} cannot be deleted",
                details={"tenant_id": tenant_id, "role_id": role_id},
            )
        
        assignees = await self._memberships.list_by_role(tenant_id, role_id)
        if assignees:
            raise ProtectedOperationError(
                f"Role {role_id} is still assigned to {len(assignees)} member(s)",
                details={"tenant_id": tenant_id, "role_id": role_id, "assignees": len(assignees)},
            )
        
        await self._roles.delete(tenant_id, role_id)
        await self._resolver.invalidate_cached(tenant_id, role_id)
        logger.info(f"Deleted role {role_id} from tenant {tenant_id}")
