"""Protocol interfaces for the permissions feature."""

from abc import abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Set, runtime_checkable

from .role import Role


@runtime_checkable
class RoleRepository(Protocol):
    """Protocol for tenant role storage."""
    
    @abstractmethod
    async def create(self, role: Role) -> Role:
        """Create a role. Raises RoleAlreadyExistsError when the id is taken."""
        ...
    
    @abstractmethod
    async def get(self, tenant_id: str, role_id: str) -> Optional[Role]:
        """Fetch a role by id."""
        ...
    
    @abstractmethod
    async def list_for_tenant(self, tenant_id: str) -> List[Role]:
        """List every role of a tenant."""
        ...
    
    @abstractmethod
    async def list_tenant_ids(self) -> List[str]:
        """Ids of every tenant that has at least one role."""
        ...
    
    @abstractmethod
    async def update(self, tenant_id: str, role_id: str, changes: Dict[str, Any]) -> Optional[Role]:
        """Apply a partial update; returns None when the role does not exist."""
        ...
    
    @abstractmethod
    async def set_resolved_permissions(
        self,
        tenant_id: str,
        role_id: str,
        permissions: List[str],
        resolved_at: datetime,
    ) -> bool:
        """Atomically replace the cached resolved set; False when the role is missing."""
        ...
    
    @abstractmethod
    async def delete(self, tenant_id: str, role_id: str) -> bool:
        """Delete a role if it exists; True when something was deleted."""
        ...
    
    @abstractmethod
    async def delete_for_tenant(self, tenant_id: str) -> int:
        """Delete every role of a tenant."""
        ...


@runtime_checkable
class RolePermissionCache(Protocol):
    """Optional shared cache of resolved role permissions."""
    
    @abstractmethod
    async def get(self, tenant_id: str, role_id: str) -> Optional[Set[str]]:
        ...
    
    @abstractmethod
    async def set(self, tenant_id: str, role_id: str, permissions: Set[str], ttl: Optional[int] = None) -> None:
        ...
    
    @abstractmethod
    async def invalidate(self, tenant_id: str, role_id: str) -> None:
        ...
