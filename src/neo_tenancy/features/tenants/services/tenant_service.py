"""Tenant administration after provisioning."""

import logging
from typing import Any, Dict, List, Optional

from ....config.constants import EnsureOutcome, SystemRoleId
from ....core.exceptions import TenantAlreadyExistsError, TenantNotFoundError, ValidationError
from ...modules.services import ModuleActivationService
from ...permissions.services import PermissionResolver, RoleService
from ..entities import Tenant, TenantRepository, TenantSettings, TenantSettingsRepository


logger = logging.getLogger(__name__)


class TenantService:
    """Fetch, update, extend and delete tenants."""
    
    def __init__(
        self,
        tenant_repository: TenantRepository,
        settings_repository: TenantSettingsRepository,
        activation_service: ModuleActivationService,
        role_service: RoleService,
        resolver: PermissionResolver,
    ):
        self._tenants = tenant_repository
        self._tenant_settings = settings_repository
        self._activation = activation_service
        self._role_service = role_service
        self._resolver = resolver
    
    async def get_tenant(self, tenant_id: str) -> Tenant:
        tenant = await self._tenants.get(tenant_id)
        if tenant is None:
            raise TenantNotFoundError(f"Tenant {tenant_id} not found", details={"tenant_id": tenant_id})
        return tenant
    
    async def list_tenants_for_owner(self, owner_id: str) -> List[Tenant]:
        return await self._tenants.list_for_owner(owner_id)
    
    async def get_settings(self, tenant_id: str) -> TenantSettings:
        settings = await self._tenant_settings.get(tenant_id)
        if settings is None:
            raise TenantNotFoundError(
                f"Settings for tenant {tenant_id} not found",
                details={"tenant_id": tenant_id},
            )
        return settings
    
    async def update_profile(
        self,
        tenant_id: str,
        name: Optional[str] = None,
        base_currency: Optional[str] = None,
        country: Optional[str] = None,
        description: Optional[str] = None,
        contact_email: Optional[str] = None,
        logo_url: Optional[str] = None,
    ) -> Tenant:
        """Partially update a tenant's profile fields.
        
        Renaming is rejected when the owner already has another tenant with
        the new name.
        """
        tenant = await self.get_tenant(tenant_id)
        
        changes: Dict[str, Any] = {}
        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Tenant name cannot be empty")
            if name != tenant.name:
                clash = await self._tenants.find_by_name_and_owner(name, tenant.owner_id)
                if clash is not None and clash.id != tenant_id:
                    raise TenantAlreadyExistsError(
                        f"You already own a company named '{name}'",
                        details={"owner_id": tenant.owner_id, "name": name},
                    )
                changes["name"] = name
        for field_name, value in (
            ("base_currency", base_currency),
            ("country", country),
            ("description", description),
            ("contact_email", contact_email),
            ("logo_url", logo_url),
        ):
            if value is not None:
                changes[field_name] = value
        
        if not changes:
            return tenant
        
        updated = await self._tenants.update(tenant_id, changes)
        if updated is None:
            raise TenantNotFoundError(f"Tenant {tenant_id} not found", details={"tenant_id": tenant_id})
        logger.info(f"Updated tenant {tenant_id}: {', '.join(sorted(changes))}")
        return updated
    
    async def enable_module(self, tenant_id: str, module_code: str) -> Dict[str, EnsureOutcome]:
        """Activate a module and grant it to the owner and administrator roles.
        
        Dependencies activated along the way are added to the tenant's module
        list and to both roles' bundles as well.
        """
        tenant = await self.get_tenant(tenant_id)
        outcomes = await self._activation.activate(tenant_id, module_code)
        
        modules = list(dict.fromkeys([*tenant.modules, *outcomes]))
        if modules != tenant.modules:
            await self._tenants.update(tenant_id, {"modules": modules})
        
        for role_id in (SystemRoleId.OWNER.value, SystemRoleId.ADMIN.value):
            if not await self._role_service.attach_module_bundles(tenant_id, role_id, list(outcomes)):
                logger.warning(f"Role {role_id} missing in tenant {tenant_id}; module {module_code} not attached")
        
        logger.info(f"Enabled module {module_code} for tenant {tenant_id}")
        return outcomes
    
    async def delete_tenant(self, tenant_id: str) -> None:
        """Delete a tenant with every dependent record and cached permission set."""
        await self.get_tenant(tenant_id)
        roles = await self._role_service.list_roles(tenant_id)
        
        if not await self._tenants.delete(tenant_id):
            raise TenantNotFoundError(f"Tenant {tenant_id} not found", details={"tenant_id": tenant_id})
        
        for role in roles:
            await self._resolver.invalidate_cached(tenant_id, role.id)
        logger.info(f"Deleted tenant {tenant_id} and {len(roles)} role(s)")
