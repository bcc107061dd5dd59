"""Tenants feature: tenant records, provisioning saga and administration."""

from .entities import (
    Tenant,
    TenantProfile,
    TenantSettings,
    DocumentTemplate,
    SagaStep,
    ProvisioningProgress,
    ProvisioningResult,
    TenantRepository,
    TenantSettingsRepository,
    TemplateRepository,
)
from .repositories import (
    InMemoryTenantRepository,
    InMemoryTenantSettingsRepository,
    InMemoryTemplateRepository,
    AsyncPGTenantRepository,
    AsyncPGTenantSettingsRepository,
    AsyncPGTemplateRepository,
)
from .services import TenantProvisioningSaga, TenantService, default_roles

__all__ = [
    "Tenant",
    "TenantProfile",
    "TenantSettings",
    "DocumentTemplate",
    "SagaStep",
    "ProvisioningProgress",
    "ProvisioningResult",
    "TenantRepository",
    "TenantSettingsRepository",
    "TemplateRepository",
    "InMemoryTenantRepository",
    "InMemoryTenantSettingsRepository",
    "InMemoryTemplateRepository",
    "AsyncPGTenantRepository",
    "AsyncPGTenantSettingsRepository",
    "AsyncPGTemplateRepository",
    "TenantProvisioningSaga",
    "TenantService",
    "default_roles",
]
