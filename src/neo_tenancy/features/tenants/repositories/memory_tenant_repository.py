"""In-memory tenant, settings and template repositories."""

import copy
import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol

from ....core.exceptions import TenantAlreadyExistsError, ValidationError
from ....utils import utc_now
from ..entities.tenant import DocumentTemplate, Tenant, TenantSettings


logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "name", "base_currency", "country", "description", "contact_email", "logo_url",
    "modules", "fiscal_year_start", "fiscal_year_end",
)


class TenantScopedStore(Protocol):
    async def delete_for_tenant(self, tenant_id: str) -> int:
        ...


class InMemoryTenantRepository:
    """Process-local tenant store.
    
    Deleting a tenant also clears it from every store passed as
    ``dependents``, mirroring ``ON DELETE CASCADE`` in PostgreSQL.
    """
    
    def __init__(self, dependents: Iterable[TenantScopedStore] = ()):
        self._tenants: Dict[str, Tenant] = {}
        self._dependents: List[TenantScopedStore] = list(dependents)
    
    async def create(self, tenant: Tenant) -> Tenant:
        for existing in self._tenants.values():
            if existing.owner_id == tenant.owner_id and existing.name == tenant.name:
                raise TenantAlreadyExistsError(
                    f"Tenant '{tenant.name}' already exists for owner {tenant.owner_id}",
                    details={"owner_id": tenant.owner_id, "name": tenant.name},
                )
        if tenant.id in self._tenants:
            raise TenantAlreadyExistsError(f"Tenant {tenant.id} already exists", details={"tenant_id": tenant.id})
        
        now = utc_now()
        stored = copy.deepcopy(tenant)
        stored.created_at = stored.created_at or now
        stored.updated_at = stored.updated_at or now
        self._tenants[stored.id] = stored
        return copy.deepcopy(stored)
    
    async def get(self, tenant_id: str) -> Optional[Tenant]:
        tenant = self._tenants.get(tenant_id)
        return copy.deepcopy(tenant) if tenant else None
    
    async def find_by_name_and_owner(self, name: str, owner_id: str) -> Optional[Tenant]:
        for tenant in self._tenants.values():
            if tenant.owner_id == owner_id and tenant.name == name:
                return copy.deepcopy(tenant)
        return None
    
    async def list_for_owner(self, owner_id: str) -> List[Tenant]:
        return [copy.deepcopy(t) for t in self._tenants.values() if t.owner_id == owner_id]
    
    async def update(self, tenant_id: str, changes: Dict[str, Any]) -> Optional[Tenant]:
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Tenant fields cannot be updated: {', '.join(sorted(unknown))}")
        tenant = self._tenants.get(tenant_id)
        if tenant is None:
            return None
        if "name" in changes:
            for other in self._tenants.values():
                if other.id != tenant_id and other.owner_id == tenant.owner_id and other.name == changes["name"]:
                    raise TenantAlreadyExistsError(
                        f"Tenant '{changes['name']}' already exists for owner {tenant.owner_id}",
                        details={"owner_id": tenant.owner_id, "name": changes["name"]},
                    )
        for name, value in changes.items():
            setattr(tenant, name, copy.deepcopy(value))
        tenant.updated_at = utc_now()
        return copy.deepcopy(tenant)
    
    async def delete(self, tenant_id: str) -> bool:
        existed = self._tenants.pop(tenant_id, None) is not None
        for store in self._dependents:
            await store.delete_for_tenant(tenant_id)
        if existed:
            logger.info(f"Deleted tenant {tenant_id}")
        return existed


class InMemoryTenantSettingsRepository:
    """Process-local tenant settings store."""
    
    def __init__(self):
        self._settings: Dict[str, TenantSettings] = {}
    
    async def save(self, settings: TenantSettings) -> TenantSettings:
        now = utc_now()
        stored = copy.deepcopy(settings)
        stored.created_at = stored.created_at or now
        stored.updated_at = now
        self._settings[stored.tenant_id] = stored
        return copy.deepcopy(stored)
    
    async def get(self, tenant_id: str) -> Optional[TenantSettings]:
        settings = self._settings.get(tenant_id)
        return copy.deepcopy(settings) if settings else None
    
    async def delete_for_tenant(self, tenant_id: str) -> int:
        return 1 if self._settings.pop(tenant_id, None) is not None else 0


class InMemoryTemplateRepository:
    """Process-local document template store."""
    
    def __init__(self, system_templates: Iterable[DocumentTemplate] = ()):
        self._templates: Dict[str, DocumentTemplate] = {}
        for template in system_templates:
            self._templates[template.id] = copy.deepcopy(template)
    
    async def list_system_templates(self) -> List[DocumentTemplate]:
        return [copy.deepcopy(t) for t in self._templates.values() if t.is_system]
    
    async def list_for_tenant(self, tenant_id: str) -> List[DocumentTemplate]:
        return [copy.deepcopy(t) for t in self._templates.values() if t.tenant_id == tenant_id]
    
    async def create(self, template: DocumentTemplate) -> DocumentTemplate:
        stored = copy.deepcopy(template)
        stored.created_at = stored.created_at or utc_now()
        self._templates[stored.id] = stored
        return copy.deepcopy(stored)
    
    async def delete_for_tenant(self, tenant_id: str) -> int:
        ids = [tid for tid, t in self._templates.items() if t.tenant_id == tenant_id]
        for template_id in ids:
            del self._templates[template_id]
        return len(ids)
