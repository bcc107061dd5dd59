"""Module activation with dependency handling.

Activating a module first ensures every module it depends on is installed
(as an implicit, dependency-only install), then installs the module itself
explicitly. An implicit install that is later requested directly is
promoted in place; no second record is ever created.
"""

import logging
from typing import Any, Dict, List, Optional

from ....config.constants import EnsureOutcome, InitializationStatus
from ....core.exceptions import ModuleInstallationNotFoundError
from ....utils import utc_now
from ...catalog.entities import ModuleRegistry
from ..entities import IMPLICIT_FLAG, ModuleInstallation, ModuleInstallationRepository


logger = logging.getLogger(__name__)


class ModuleActivationService:
    """Installs modules into tenants."""
    
    def __init__(self, installation_repository: ModuleInstallationRepository, registry: ModuleRegistry):
        self._installations = installation_repository
        self._registry = registry
    
    async def activate(self, tenant_id: str, module_code: str) -> Dict[str, EnsureOutcome]:
        """Install ``module_code`` and, transitively, everything it depends on.
        
        Returns:
            Outcome per module code, dependencies first and the target last
        """
        self._registry.require_module(module_code)
        
        outcomes: Dict[str, EnsureOutcome] = {}
        for dependency in self._registry.dependency_closure(module_code):
            outcomes[dependency] = await self.ensure_installed(tenant_id, dependency, implicit=True)
        outcomes[module_code] = await self.ensure_installed(tenant_id, module_code, implicit=False)
        
        logger.info(
            f"Activated module {module_code} for tenant {tenant_id}: "
            + ", ".join(f"{code}={outcome.value}" for code, outcome in outcomes.items())
        )
        return outcomes
    
    async def ensure_installed(self, tenant_id: str, module_code: str, implicit: bool) -> EnsureOutcome:
        """Make sure an installation record exists.
        
        An existing implicit record is promoted when explicit activation is
        requested; any other existing record is left alone. New records are
        created usable (``initialized=True``, ``complete``).
        """
        existing = await self._installations.get(tenant_id, module_code)
        if existing is None:
            created = await self._installations.create_if_absent(ModuleInstallation(
                tenant_id=tenant_id,
                module_code=module_code,
                initialized=True,
                initialization_status=InitializationStatus.COMPLETE,
                config={IMPLICIT_FLAG: implicit, "activatedAt": utc_now().isoformat()},
            ))
            if created:
                logger.info(
                    f"Installed module {module_code} for tenant {tenant_id} "
                    f"({'implicit' if implicit else 'explicit'})"
                )
                return EnsureOutcome.CREATED
            # A concurrent activation created it first
            logger.debug(f"Module {module_code} was installed concurrently for tenant {tenant_id}")
        elif implicit or not existing.is_implicit:
            return EnsureOutcome.UNCHANGED
        
        if not implicit and await self._installations.promote_to_explicit(tenant_id, module_code, utc_now()):
            logger.info(f"Promoted module {module_code} to explicit for tenant {tenant_id}")
            return EnsureOutcome.PROMOTED
        
        return EnsureOutcome.UNCHANGED
    
    async def list_active(self, tenant_id: str, include_implicit: bool = False) -> List[ModuleInstallation]:
        """Installed modules; dependency-only installs are hidden by default."""
        installations = await self._installations.list_for_tenant(tenant_id)
        if include_implicit:
            return installations
        return [i for i in installations if not i.is_implicit]
    
    async def get_installation(self, tenant_id: str, module_code: str) -> ModuleInstallation:
        installation = await self._installations.get(tenant_id, module_code)
        if installation is None:
            raise ModuleInstallationNotFoundError(
                f"Module {module_code} is not installed in tenant {tenant_id}",
                details={"tenant_id": tenant_id, "module_code": module_code},
            )
        return installation
    
    async def begin_initialization(self, tenant_id: str, module_code: str) -> ModuleInstallation:
        """Mark a module's initialization flow as started."""
        await self.get_installation(tenant_id, module_code)
        updated = await self._update(tenant_id, module_code, {
            "initialization_status": InitializationStatus.IN_PROGRESS,
        })
        logger.info(f"Started initialization of module {module_code} for tenant {tenant_id}")
        return updated
    
    async def complete_initialization(
        self,
        tenant_id: str,
        module_code: str,
        config: Optional[Dict[str, Any]] = None,
    ) -> ModuleInstallation:
        """Mark a module initialized, merging ``config`` into the stored config.
        
        The implicit flag is not something initialization can change.
        """
        installation = await self.get_installation(tenant_id, module_code)
        merged = {**installation.config, **(config or {})}
        merged[IMPLICIT_FLAG] = installation.is_implicit
        
        updated = await self._update(tenant_id, module_code, {
            "initialized": True,
            "initialization_status": InitializationStatus.COMPLETE,
            "config": merged,
        })
        logger.info(f"Completed initialization of module {module_code} for tenant {tenant_id}")
        return updated
    
    async def _update(self, tenant_id: str, module_code: str, changes: Dict[str, Any]) -> ModuleInstallation:
        updated = await self._installations.update(tenant_id, module_code, changes)
        if updated is None:
            raise ModuleInstallationNotFoundError(
                f"Module {module_code} is not installed in tenant {tenant_id}",
                details={"tenant_id": tenant_id, "module_code": module_code},
            )
        return updated
