"""Protocol interfaces for the memberships feature."""

from abc import abstractmethod
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from .membership import Membership


@runtime_checkable
class MembershipRepository(Protocol):
    """Protocol for membership storage; one record per (tenant, user)."""
    
    @abstractmethod
    async def create(self, membership: Membership) -> Membership:
        """Create a membership. Raises MembershipAlreadyExistsError for a duplicate pair."""
        ...
    
    @abstractmethod
    async def get(self, tenant_id: str, user_id: str) -> Optional[Membership]:
        ...
    
    @abstractmethod
    async def list_for_tenant(self, tenant_id: str) -> List[Membership]:
        ...
    
    @abstractmethod
    async def list_by_role(self, tenant_id: str, role_id: str) -> List[Membership]:
        ...
    
    @abstractmethod
    async def update(self, tenant_id: str, user_id: str, changes: Dict[str, Any]) -> Optional[Membership]:
        """Partial update of ``role_id`` / ``is_disabled``; None when missing."""
        ...
    
    @abstractmethod
    async def delete(self, tenant_id: str, user_id: str) -> bool:
        ...
    
    @abstractmethod
    async def delete_for_tenant(self, tenant_id: str) -> int:
        ...
