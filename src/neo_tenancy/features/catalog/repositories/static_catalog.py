"""In-process permission catalog built from static definitions."""

from typing import Dict, Iterable

from ..entities.definitions import ModulePermissionDefinition


class StaticPermissionCatalog:
    """Permission catalog held in memory, loaded once at startup."""
    
    def __init__(self, definitions: Iterable[ModulePermissionDefinition]):
        self._definitions: Dict[str, ModulePermissionDefinition] = {
            d.module_id: d for d in definitions
        }
    
    async def list_all(self) -> Dict[str, ModulePermissionDefinition]:
        return dict(self._definitions)
    
    async def seed(self, definitions: Iterable[ModulePermissionDefinition]) -> int:
        """Replace the given modules' definitions; returns the number of permissions written."""
        written = 0
        for definition in definitions:
            self._definitions[definition.module_id] = definition
            written += len(definition.permissions)
        return written
