"""Protocol interfaces for the modules feature."""

from abc import abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from .installation import ModuleInstallation


@runtime_checkable
class ModuleInstallationRepository(Protocol):
    """Protocol for module installation storage."""
    
    @abstractmethod
    async def get(self, tenant_id: str, module_code: str) -> Optional[ModuleInstallation]:
        ...
    
    @abstractmethod
    async def list_for_tenant(self, tenant_id: str) -> List[ModuleInstallation]:
        ...
    
    @abstractmethod
    async def create(self, installation: ModuleInstallation) -> ModuleInstallation:
        """Create a record. Raises ModuleAlreadyInstalledError when one exists."""
        ...
    
    @abstractmethod
    async def create_if_absent(self, installation: ModuleInstallation) -> bool:
        """Atomic insert-if-absent; True when this call created the record."""
        ...
    
    @abstractmethod
    async def batch_create(self, installations: Sequence[ModuleInstallation]) -> List[ModuleInstallation]:
        """Create several records, all or none."""
        ...
    
    @abstractmethod
    async def update(self, tenant_id: str, module_code: str, changes: Dict[str, Any]) -> Optional[ModuleInstallation]:
        """Partial update of ``initialized``, ``initialization_status`` or ``config``."""
        ...
    
    @abstractmethod
    async def promote_to_explicit(self, tenant_id: str, module_code: str, promoted_at: datetime) -> bool:
        """Flip an implicit record to explicit; True only when this call flipped it."""
        ...
    
    @abstractmethod
    async def delete(self, tenant_id: str, module_code: str) -> bool:
        ...
    
    @abstractmethod
    async def delete_for_tenant(self, tenant_id: str) -> int:
        ...
