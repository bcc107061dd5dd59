"""Pytest configuration and fixtures for neo-tenancy tests."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from neo_tenancy.config.manager import TenancySettings
from neo_tenancy.container import build_in_memory_container
from neo_tenancy.features.catalog import build_default_catalog, build_default_registry
from neo_tenancy.features.database import DatabaseConnection
from neo_tenancy.features.memberships import InMemoryMembershipRepository
from neo_tenancy.features.modules import InMemoryModuleInstallationRepository
from neo_tenancy.features.permissions import InMemoryRoleRepository, PermissionResolver, Role
from neo_tenancy.features.tenants import DocumentTemplate
from neo_tenancy.features.users import InMemoryUserDirectory


@pytest.fixture
def settings():
    """Settings with a short provisioning step timeout."""
    return TenancySettings(saga_step_timeout_seconds=0.5)


@pytest.fixture
def registry():
    """Default module registry."""
    return build_default_registry()


@pytest.fixture
def catalog():
    """Default static permission catalog."""
    return build_default_catalog()


@pytest.fixture
def role_repository():
    return InMemoryRoleRepository()


@pytest.fixture
def membership_repository():
    return InMemoryMembershipRepository()


@pytest.fixture
def installation_repository():
    return InMemoryModuleInstallationRepository()


@pytest.fixture
def user_directory():
    return InMemoryUserDirectory(global_admins=["platform-admin"])


@pytest.fixture
def resolver(role_repository, catalog):
    return PermissionResolver(role_repository, catalog)


@pytest.fixture
def system_templates():
    """System document templates copied into every new tenant."""
    return [
        DocumentTemplate(id="tpl-invoice", code="invoice", name="Invoice", payload={"layout": "a4"}),
        DocumentTemplate(id="tpl-receipt", code="receipt", name="Receipt"),
    ]


@pytest.fixture
def container(settings, system_templates):
    """In-memory container with the default catalog."""
    return build_in_memory_container(settings=settings, system_templates=system_templates)


@pytest.fixture
def make_role():
    """Factory for roles in tenant ``t1``."""
    def _make(role_id="ACCOUNTANT", explicit=None, bundles=None, **kwargs):
        return Role(
            tenant_id=kwargs.pop("tenant_id", "t1"),
            id=role_id,
            name=kwargs.pop("name", role_id.title()),
            explicit_permissions=list(explicit or []),
            module_bundles=list(bundles or []),
            **kwargs,
        )
    return _make


@pytest.fixture
def mock_db():
    """Mock DatabaseConnection for the asyncpg repositories."""
    db = MagicMock(spec=DatabaseConnection)
    db.fetch_one = AsyncMock(return_value=None)
    db.fetch_all = AsyncMock(return_value=[])
    db.fetch_value = AsyncMock(return_value=None)
    db.execute = AsyncMock(return_value="DELETE 0")
    db.execute_many = AsyncMock(return_value=None)
    return db
