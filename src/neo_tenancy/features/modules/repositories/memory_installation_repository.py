"""In-memory module installation repository."""

import copy
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ....config.constants import InitializationStatus
from ....core.exceptions import ModuleAlreadyInstalledError, ValidationError
from ....utils import utc_now
from ..entities.installation import IMPLICIT_FLAG, ModuleInstallation


UPDATABLE_FIELDS = ("initialized", "initialization_status", "config")


class InMemoryModuleInstallationRepository:
    """Process-local installation store.
    
    ``create_if_absent`` and ``promote_to_explicit`` check and write
    without awaiting in between, so they are atomic under asyncio.
    """
    
    def __init__(self):
        self._installations: Dict[Tuple[str, str], ModuleInstallation] = {}
    
    async def get(self, tenant_id: str, module_code: str) -> Optional[ModuleInstallation]:
        installation = self._installations.get((tenant_id, module_code))
        return copy.deepcopy(installation) if installation else None
    
    async def list_for_tenant(self, tenant_id: str) -> List[ModuleInstallation]:
        return [copy.deepcopy(i) for (tid, _), i in self._installations.items() if tid == tenant_id]
    
    async def create(self, installation: ModuleInstallation) -> ModuleInstallation:
        if not await self.create_if_absent(installation):
            raise self._already_installed(installation)
        return await self.get(installation.tenant_id, installation.module_code)
    
    async def create_if_absent(self, installation: ModuleInstallation) -> bool:
        key = (installation.tenant_id, installation.module_code)
        if key in self._installations:
            return False
        self._installations[key] = self._stamped(installation)
        return True
    
    async def batch_create(self, installations: Sequence[ModuleInstallation]) -> List[ModuleInstallation]:
        keys = set()
        for installation in installations:
            key = (installation.tenant_id, installation.module_code)
            if key in self._installations or key in keys:
                raise self._already_installed(installation)
            keys.add(key)
        
        created = []
        for installation in installations:
            stored = self._stamped(installation)
            self._installations[(stored.tenant_id, stored.module_code)] = stored
            created.append(copy.deepcopy(stored))
        return created
    
    async def update(self, tenant_id: str, module_code: str, changes: Dict[str, Any]) -> Optional[ModuleInstallation]:
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Installation fields cannot be updated: {', '.join(sorted(unknown))}")
        installation = self._installations.get((tenant_id, module_code))
        if installation is None:
            return None
        for name, value in changes.items():
            if name == "initialization_status":
                value = InitializationStatus(value)
            setattr(installation, name, copy.deepcopy(value))
        installation.updated_at = utc_now()
        return copy.deepcopy(installation)
    
    async def promote_to_explicit(self, tenant_id: str, module_code: str, promoted_at: datetime) -> bool:
        installation = self._installations.get((tenant_id, module_code))
        if installation is None or not installation.is_implicit:
            return False
        installation.config[IMPLICIT_FLAG] = False
        installation.updated_at = promoted_at
        return True
    
    async def delete(self, tenant_id: str, module_code: str) -> bool:
        return self._installations.pop((tenant_id, module_code), None) is not None
    
    async def delete_for_tenant(self, tenant_id: str) -> int:
        keys = [key for key in self._installations if key[0] == tenant_id]
        for key in keys:
            del self._installations[key]
        return len(keys)
    
    @staticmethod
    def _stamped(installation: ModuleInstallation) -> ModuleInstallation:
        now = utc_now()
        stored = copy.deepcopy(installation)
        stored.created_at = stored.created_at or now
        stored.updated_at = stored.updated_at or now
        return stored
    
    @staticmethod
    def _already_installed(installation: ModuleInstallation) -> ModuleAlreadyInstalledError:
        return ModuleAlreadyInstalledError(
            f"Module {installation.module_code} is already installed in tenant {installation.tenant_id}",
            details={"tenant_id": installation.tenant_id, "module_code": installation.module_code},
        )
