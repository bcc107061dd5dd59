"""Protocol interfaces for the permission definition catalog."""

from abc import abstractmethod
from typing import Dict, Iterable, Protocol, runtime_checkable

from .definitions import ModulePermissionDefinition


@runtime_checkable
class PermissionCatalog(Protocol):
    """Source of module permission definitions, keyed by module id."""
    
    @abstractmethod
    async def list_all(self) -> Dict[str, ModulePermissionDefinition]:
        """Return every module's permission definition."""
        ...
    
    @abstractmethod
    async def seed(self, definitions: Iterable[ModulePermissionDefinition]) -> int:
        """Upsert definitions; stored role sets are stale until re-resolved."""
        ...
