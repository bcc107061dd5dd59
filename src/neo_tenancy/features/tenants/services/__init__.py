"""Tenants services."""

from .tenant_provisioning_saga import TenantProvisioningSaga, default_roles
from .tenant_service import TenantService

__all__ = [
    "TenantProvisioningSaga",
    "TenantService",
    "default_roles",
]
