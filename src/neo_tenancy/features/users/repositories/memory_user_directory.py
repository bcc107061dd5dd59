"""In-memory platform user directory."""

from typing import Dict, Iterable, Optional, Set


class InMemoryUserDirectory:
    """Holds global administrators and active-tenant pointers in process."""
    
    def __init__(self, global_admins: Iterable[str] = ()):
        self._global_admins: Set[str] = set(global_admins)
        self._active_tenants: Dict[str, str] = {}
        self._deleted_tenants: Set[str] = set()
    
    def grant_global_admin(self, user_id: str) -> None:
        self._global_admins.add(user_id)
    
    async def is_global_admin(self, user_id: str) -> bool:
        return user_id in self._global_admins
    
    async def set_active_tenant(self, user_id: str, tenant_id: Optional[str]) -> None:
        if tenant_id is None:
            self._active_tenants.pop(user_id, None)
        else:
            self._active_tenants[user_id] = tenant_id
    
    async def get_active_tenant(self, user_id: str) -> Optional[str]:
        return self._active_tenants.get(user_id)
    
    async def restore_active_tenant(self, user_id: str, expected: str, tenant_id: Optional[str]) -> bool:
        if self._active_tenants.get(user_id) != expected:
            return False
        await self.set_active_tenant(user_id, None if tenant_id in self._deleted_tenants else tenant_id)
        return True
    
    async def delete_for_tenant(self, tenant_id: str) -> int:
        """Drop every pointer at a deleted tenant."""
        self._deleted_tenants.add(tenant_id)
        users = [user for user, tid in self._active_tenants.items() if tid == tenant_id]
        for user in users:
            del self._active_tenants[user]
        return len(users)
