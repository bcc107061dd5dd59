"""Tenants repositories."""

from .memory_tenant_repository import (
    InMemoryTenantRepository,
    InMemoryTenantSettingsRepository,
    InMemoryTemplateRepository,
)
from .tenant_repository import (
    AsyncPGTenantRepository,
    AsyncPGTenantSettingsRepository,
    AsyncPGTemplateRepository,
)

__all__ = [
    "InMemoryTenantRepository",
    "InMemoryTenantSettingsRepository",
    "InMemoryTemplateRepository",
    "AsyncPGTenantRepository",
    "AsyncPGTenantSettingsRepository",
    "AsyncPGTemplateRepository",
]
