"""In-memory role repository."""

import copy
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ....core.exceptions import RoleAlreadyExistsError, ValidationError
from ....utils import utc_now
from ..entities.role import Role


logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "description", "explicit_permissions", "module_bundles")


class InMemoryRoleRepository:
    """Process-local role store.
    
    Returned roles are copies, so callers never mutate stored state.
    Methods do not await between reading and writing, which makes each
    of them atomic under asyncio.
    """
    
    def __init__(self):
        self._roles: Dict[Tuple[str, str], Role] = {}
    
    async def create(self, role: Role) -> Role:
        key = (role.tenant_id, role.id)
        if key in self._roles:
            raise RoleAlreadyExistsError(
                f"Role {role.id} already exists in tenant {role.tenant_id}",
                details={"tenant_id": role.tenant_id, "role_id": role.id},
            )
        now = utc_now()
        stored = copy.deepcopy(role)
        stored.created_at = stored.created_at or now
        stored.updated_at = stored.updated_at or now
        self._roles[key] = stored
        return copy.deepcopy(stored)
    
    async def get(self, tenant_id: str, role_id: str) -> Optional[Role]:
        role = self._roles.get((tenant_id, role_id))
        return copy.deepcopy(role) if role else None
    
    async def list_for_tenant(self, tenant_id: str) -> List[Role]:
        return [copy.deepcopy(r) for (tid, _), r in self._roles.items() if tid == tenant_id]
    
    async def list_tenant_ids(self) -> List[str]:
        return sorted({tid for tid, _ in self._roles})
    
    async def update(self, tenant_id: str, role_id: str, changes: Dict[str, Any]) -> Optional[Role]:
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Role fields cannot be updated: {', '.join(sorted(unknown))}")
        role = self._roles.get((tenant_id, role_id))
        if role is None:
            return None
        for name, value in changes.items():
            setattr(role, name, copy.deepcopy(value))
        role.updated_at = utc_now()
        return copy.deepcopy(role)
    
    async def set_resolved_permissions(
        self,
        tenant_id: str,
        role_id: str,
        permissions: List[str],
        resolved_at: datetime,
    ) -> bool:
        role = self._roles.get((tenant_id, role_id))
        if role is None:
            return False
        role.resolved_permissions = list(permissions)
        role.resolved_at = resolved_at
        return True
    
    async def delete(self, tenant_id: str, role_id: str) -> bool:
        return self._roles.pop((tenant_id, role_id), None) is not None
    
    async def delete_for_tenant(self, tenant_id: str) -> int:
        keys = [key for key in self._roles if key[0] == tenant_id]
        for key in keys:
            del self._roles[key]
        return len(keys)
