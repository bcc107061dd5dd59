"""Membership management with owner protection."""

import logging
from typing import List

from ....config.constants import SystemRoleId
from ....core.exceptions import (
    MembershipNotFoundError,
    ProtectedOperationError,
    RoleNotFoundError,
)
from ...permissions.entities.protocols import RoleRepository
from ..entities import Membership, MembershipRepository


logger = logging.getLogger(__name__)


class MembershipService:
    """Assigns users to tenant roles.
    
    The owner membership is created only by tenant provisioning and can
    never be reassigned, disabled or removed through this service.
    """
    
    def __init__(self, membership_repository: MembershipRepository, role_repository: RoleRepository):
        self._memberships = membership_repository
        self._roles = role_repository
    
    async def list_members(self, tenant_id: str) -> List[Membership]:
        return await self._memberships.list_for_tenant(tenant_id)
    
    async def get_member(self, tenant_id: str, user_id: str) -> Membership:
        membership = await self._memberships.get(tenant_id, user_id)
        if membership is None:
            raise MembershipNotFoundError(
                f"User {user_id} is not a member of tenant {tenant_id}",
                details={"tenant_id": tenant_id, "user_id": user_id},
            )
        return membership
    
    async def assign_member(self, tenant_id: str, user_id: str, role_id: str) -> Membership:
        """Add a user to a tenant with a non-owner role."""
        await self._require_assignable_role(tenant_id, role_id)
        membership = await self._memberships.create(
            Membership(tenant_id=tenant_id, user_id=user_id, role_id=role_id)
        )
        logger.info(f"Assigned user {user_id} to role {role_id} in tenant {tenant_id}")
        return membership
    
    async def update_member_role(self, tenant_id: str, user_id: str, role_id: str) -> Membership:
        membership = await self.get_member(tenant_id, user_id)
        self._protect_owner(membership, "reassign the role of")
        await self._require_assignable_role(tenant_id, role_id)
        
        updated = await self._update(tenant_id, user_id, {"role_id": role_id})
        logger.info(f"Moved user {user_id} from role {membership.role_id} to {role_id} in tenant {tenant_id}")
        return updated
    
    async def disable_member(self, tenant_id: str, user_id: str) -> Membership:
        membership = await self.get_member(tenant_id, user_id)
        self._protect_owner(membership, "disable")
        updated = await self._update(tenant_id, user_id, {"is_disabled": True})
        logger.info(f"Disabled user {user_id} in tenant {tenant_id}")
        return updated
    
    async def enable_member(self, tenant_id: str, user_id: str) -> Membership:
        await self.get_member(tenant_id, user_id)
        updated = await self._update(tenant_id, user_id, {"is_disabled": False})
        logger.info(f"Enabled user {user_id} in tenant {tenant_id}")
        return updated
    
    async def remove_member(self, tenant_id: str, user_id: str) -> None:
        membership = await self.get_member(tenant_id, user_id)
        self._protect_owner(membership, "remove")
        await self._memberships.delete(tenant_id, user_id)
        logger.info(f"Removed user {user_id} from tenant {tenant_id}")
    
    async def _update(self, tenant_id: str, user_id: str, changes: dict) -> Membership:
        updated = await self._memberships.update(tenant_id, user_id, changes)
        if updated is None:
            raise MembershipNotFoundError(
                f"User {user_id} is not a member of tenant {tenant_id}",
                details={"tenant_id": tenant_id, "user_id": user_id},
            )
        return updated
    
    async def _require_assignable_role(self, tenant_id: str, role_id: str) -> None:
        if role_id == SystemRoleId.OWNER.value:
            raise ProtectedOperationError(
                "The owner role is reserved for the tenant owner",
                details={"tenant_id": tenant_id, "role_id": role_id},
            )
        if await self._roles.get(tenant_id, role_id) is None:
            raise RoleNotFoundError(
                f"Role {role_id} not found in tenant {tenant_id}",
                details={"tenant_id": tenant_id, "role_id": role_id},
            )
    
    @staticmethod
    def _protect_owner(membership: Membership, action: str) -> None:
        if membership.is_owner:
            raise ProtectedOperationError(
                f"Cannot {action} the tenant owner",
                details={"tenant_id": membership.tenant_id, "user_id": membership.user_id},
            )
