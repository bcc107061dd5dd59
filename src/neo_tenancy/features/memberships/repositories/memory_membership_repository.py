"""In-memory membership repository."""

import copy
from typing import Any, Dict, List, Optional, Tuple

from ....core.exceptions import MembershipAlreadyExistsError, ValidationError
from ....utils import utc_now
from ..entities.membership import Membership


UPDATABLE_FIELDS = ("role_id", "is_disabled")


class InMemoryMembershipRepository:
    """Process-local membership store keyed by (tenant, user)."""
    
    def __init__(self):
        self._memberships: Dict[Tuple[str, str], Membership] = {}
    
    async def create(self, membership: Membership) -> Membership:
        key = (membership.tenant_id, membership.user_id)
        if key in self._memberships:
            raise MembershipAlreadyExistsError(
                f"User {membership.user_id} is already a member of tenant {membership.tenant_id}",
                details={"tenant_id": membership.tenant_id, "user_id": membership.user_id},
            )
        now = utc_now()
        stored = copy.copy(membership)
        stored.created_at = stored.created_at or now
        stored.updated_at = stored.updated_at or now
        self._memberships[key] = stored
        return copy.copy(stored)
    
    async def get(self, tenant_id: str, user_id: str) -> Optional[Membership]:
        membership = self._memberships.get((tenant_id, user_id))
        return copy.copy(membership) if membership else None
    
    async def list_for_tenant(self, tenant_id: str) -> List[Membership]:
        return [copy.copy(m) for (tid, _), m in self._memberships.items() if tid == tenant_id]
    
    async def list_by_role(self, tenant_id: str, role_id: str) -> List[Membership]:
        return [
            copy.copy(m) for (tid, _), m in self._memberships.items()
            if tid == tenant_id and m.role_id == role_id
        ]
    
    async def update(self, tenant_id: str, user_id: str, changes: Dict[str, Any]) -> Optional[Membership]:
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Membership fields cannot be updated: {', '.join(sorted(unknown))}")
        membership = self._memberships.get((tenant_id, user_id))
        if membership is None:
            return None
        for name, value in changes.items():
            setattr(membership, name, value)
        membership.updated_at = utc_now()
        return copy.copy(membership)
    
    async def delete(self, tenant_id: str, user_id: str) -> bool:
        return self._memberships.pop((tenant_id, user_id), None) is not None
    
    async def delete_for_tenant(self, tenant_id: str) -> int:
        keys = [key for key in self._memberships if key[0] == tenant_id]
        for key in keys:
            del self._memberships[key]
        return len(keys)
