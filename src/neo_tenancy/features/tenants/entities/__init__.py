"""Tenants entities."""

from .tenant import Tenant, TenantProfile, TenantSettings, DocumentTemplate
from .saga import SagaStep, ProvisioningProgress, ProvisioningResult, ALLOWED_TRANSITIONS
from .protocols import TenantRepository, TenantSettingsRepository, TemplateRepository

__all__ = [
    "Tenant",
    "TenantProfile",
    "TenantSettings",
    "DocumentTemplate",
    "SagaStep",
    "ProvisioningProgress",
    "ProvisioningResult",
    "ALLOWED_TRANSITIONS",
    "TenantRepository",
    "TenantSettingsRepository",
    "TemplateRepository",
]
