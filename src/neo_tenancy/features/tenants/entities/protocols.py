"""Protocol interfaces for the tenants feature."""

from abc import abstractmethod
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from .tenant import DocumentTemplate, Tenant, TenantSettings


@runtime_checkable
class TenantRepository(Protocol):
    """Protocol for tenant storage.
    
    ``create`` must reject a second tenant with the same (owner, name)
    atomically, and ``delete`` must remove every dependent role,
    membership, module installation and settings record.
    """
    
    @abstractmethod
    async def create(self, tenant: Tenant) -> Tenant:
        """Create a tenant. Raises TenantAlreadyExistsError on an (owner, name) clash."""
        ...
    
    @abstractmethod
    async def get(self, tenant_id: str) -> Optional[Tenant]:
        ...
    
    @abstractmethod
    async def find_by_name_and_owner(self, name: str, owner_id: str) -> Optional[Tenant]:
        ...
    
    @abstractmethod
    async def list_for_owner(self, owner_id: str) -> List[Tenant]:
        ...
    
    @abstractmethod
    async def update(self, tenant_id: str, changes: Dict[str, Any]) -> Optional[Tenant]:
        """Partial update; None when the tenant does not exist."""
        ...
    
    @abstractmethod
    async def delete(self, tenant_id: str) -> bool:
        """Delete a tenant and its dependent records; True when the tenant existed."""
        ...


@runtime_checkable
class TenantSettingsRepository(Protocol):
    """Protocol for tenant-local settings storage."""
    
    @abstractmethod
    async def save(self, settings: TenantSettings) -> TenantSettings:
        """Create or replace a tenant's settings."""
        ...
    
    @abstractmethod
    async def get(self, tenant_id: str) -> Optional[TenantSettings]:
        ...
    
    @abstractmethod
    async def delete_for_tenant(self, tenant_id: str) -> int:
        ...


@runtime_checkable
class TemplateRepository(Protocol):
    """Protocol for document template storage."""
    
    @abstractmethod
    async def list_system_templates(self) -> List[DocumentTemplate]:
        ...
    
    @abstractmethod
    async def list_for_tenant(self, tenant_id: str) -> List[DocumentTemplate]:
        ...
    
    @abstractmethod
    async def create(self, template: DocumentTemplate) -> DocumentTemplate:
        ...
    
    @abstractmethod
    async def delete_for_tenant(self, tenant_id: str) -> int:
        ...
