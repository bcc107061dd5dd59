"""
neo-tenancy: tenant provisioning, module activation and permission
resolution for NeoMultiTenant services.

Features:
- catalog: module registry, bundles, dependency table and permission definitions
- permissions: roles, permission resolution, authorization checks and route guards
- memberships: user-to-role assignments with owner protection
- modules: per-tenant module installations with implicit dependency activation
- tenants: the provisioning saga and tenant administration
- users: platform user directory (global admins, active tenant)
"""

from .__version__ import __version__
from .container import TenancyContainer, build_in_memory_container, build_postgres_container

__all__ = [
    "__version__",
    "TenancyContainer",
    "build_in_memory_container",
    "build_postgres_container",
]
