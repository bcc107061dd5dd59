"""Protocol interfaces for the platform user directory."""

from abc import abstractmethod
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class UserDirectory(Protocol):
    """Platform-wide user facts that are independent of any tenant."""
    
    @abstractmethod
    async def is_global_admin(self, user_id: str) -> bool:
        """Check if a user holds the platform-wide administrator role."""
        ...
    
    @abstractmethod
    async def set_active_tenant(self, user_id: str, tenant_id: Optional[str]) -> None:
        """Point a user's active tenant at ``tenant_id`` (None clears it)."""
        ...
    
    @abstractmethod
    async def get_active_tenant(self, user_id: str) -> Optional[str]:
        ...
    
    @abstractmethod
    async def restore_active_tenant(self, user_id: str, expected: str, tenant_id: Optional[str]) -> bool:
        """Point the user back at ``tenant_id`` only while the pointer still equals ``expected``.
        
        A ``tenant_id`` that no longer exists clears the pointer. Returns
        False when the pointer had already moved.
        """
        ...
