"""Tests for the permission resolver."""

import pytest
from unittest.mock import AsyncMock

from neo_tenancy.core.exceptions import CacheError
from neo_tenancy.features.catalog import (
    ModulePermissionDefinition,
    PermissionDefinition,
    StaticPermissionCatalog,
)
from neo_tenancy.features.permissions import MemoryRolePermissionCache, PermissionResolver


@pytest.fixture
def small_catalog():
    return StaticPermissionCatalog([
        ModulePermissionDefinition("accounting", (
            PermissionDefinition("accounting.vouchers.view", "View"),
            PermissionDefinition("accounting.vouchers.approve", "Approve"),
            PermissionDefinition("accounting.legacy", "Legacy", enabled=False),
        )),
        ModulePermissionDefinition("inventory", (
            PermissionDefinition("inventory.items.view", "View items"),
        )),
    ])


class TestResolve:
    """Test the pure resolution function."""
    
    @pytest.mark.asyncio
    async def test_explicit_plus_bundles(self, small_catalog, make_role):
        """Test that a role gets its explicit grants and its bundles' enabled permissions."""
        role = make_role(explicit=["crm.leads.view"], bundles=["accounting"])
        
        permissions = PermissionResolver.resolve(role, await small_catalog.list_all())
        
        assert permissions == {"crm.leads.view", "accounting.vouchers.view", "accounting.vouchers.approve"}
    
    @pytest.mark.asyncio
    async def test_disabled_permissions_are_left_out(self, small_catalog, make_role):
        role = make_role(bundles=["accounting"])
        
        permissions = PermissionResolver.resolve(role, await small_catalog.list_all())
        
        assert "accounting.legacy" not in permissions
    
    @pytest.mark.asyncio
    async def test_modules_outside_bundles_contribute_nothing(self, small_catalog, make_role):
        role = make_role(bundles=["accounting"])
        
        permissions = PermissionResolver.resolve(role, await small_catalog.list_all())
        
        assert not any(p.startswith("inventory.") for p in permissions)
    
    @pytest.mark.asyncio
    async def test_unknown_bundle_contributes_nothing(self, small_catalog, make_role):
        role = make_role(explicit=["a.b"], bundles=["ghost"])
        
        assert PermissionResolver.resolve(role, await small_catalog.list_all()) == {"a.b"}
    
    @pytest.mark.asyncio
    async def test_resolution_is_idempotent(self, small_catalog, make_role):
        role = make_role(explicit=["accounting.vouchers.view"], bundles=["accounting", "inventory"])
        definitions = await small_catalog.list_all()
        
        assert PermissionResolver.resolve(role, definitions) == PermissionResolver.resolve(role, definitions)


class TestResolveOne:
    """Test recompute-and-store."""
    
    @pytest.mark.asyncio
    async def test_stores_resolved_set(self, role_repository, small_catalog, make_role):
        resolver = PermissionResolver(role_repository, small_catalog)
        await role_repository.create(make_role(bundles=["inventory"]))
        
        assert await resolver.resolve_one("t1", "ACCOUNTANT") is True
        
        role = await role_repository.get("t1", "ACCOUNTANT")
        assert role.is_resolved
        assert role.resolved_permissions == ["inventory.items.view"]
    
    @pytest.mark.asyncio
    async def test_missing_role_reports_not_found(self, role_repository, small_catalog):
        resolver = PermissionResolver(role_repository, small_catalog)
        
        assert await resolver.resolve_one("t1", "GHOST") is False
    
    @pytest.mark.asyncio
    async def test_mutation_then_resolve_refreshes(self, role_repository, small_catalog, make_role):
        """Test that resolving after a bundle change replaces the stored set."""
        resolver = PermissionResolver(role_repository, small_catalog)
        await role_repository.create(make_role(bundles=["inventory"]))
        await resolver.resolve_one("t1", "ACCOUNTANT")
        
        await role_repository.update("t1", "ACCOUNTANT", {"module_bundles": ["accounting"]})
        await resolver.resolve_one("t1", "ACCOUNTANT")
        
        role = await role_repository.get("t1", "ACCOUNTANT")
        assert set(role.resolved_permissions) == {"accounting.vouchers.view", "accounting.vouchers.approve"}
    
    @pytest.mark.asyncio
    async def test_resolve_writes_stored_set_through_to_cache(self, role_repository, small_catalog, make_role):
        cache = MemoryRolePermissionCache()
        resolver = PermissionResolver(role_repository, small_catalog, cache=cache)
        await role_repository.create(make_role(bundles=["inventory"]))
        await cache.set("t1", "ACCOUNTANT", {"stale.permission"})
        
        await resolver.resolve_one("t1", "ACCOUNTANT")
        
        role = await role_repository.get("t1", "ACCOUNTANT")
        assert await cache.get("t1", "ACCOUNTANT") == set(role.resolved_permissions)
    
    @pytest.mark.asyncio
    async def test_cache_failure_does_not_fail_resolution(self, role_repository, small_catalog, make_role):
        cache = AsyncMock()
        cache.set.side_effect = CacheError("redis down")
        cache.invalidate.side_effect = CacheError("redis down")
        resolver = PermissionResolver(role_repository, small_catalog, cache=cache)
        await role_repository.create(make_role(bundles=["inventory"]))
        
        assert await resolver.resolve_one("t1", "ACCOUNTANT") is True
        cache.invalidate.assert_awaited_once_with("t1", "ACCOUNTANT")
    
    @pytest.mark.asyncio
    async def test_resolve_all(self, role_repository, small_catalog, make_role):
        resolver = PermissionResolver(role_repository, small_catalog)
        await role_repository.create(make_role("A", bundles=["inventory"]))
        await role_repository.create(make_role("B", explicit=["x.y"]))
        await role_repository.create(make_role("C", tenant_id="t2"))
        
        assert await resolver.resolve_all("t1") == 2
        assert (await role_repository.get("t2", "C")).resolved_at is None


class TestReseedCatalog:
    """Test re-resolution after the permission catalog changes."""
    
    @pytest.mark.asyncio
    async def test_disabled_permission_leaves_every_tenant(self, role_repository, small_catalog, make_role):
        cache = MemoryRolePermissionCache()
        resolver = PermissionResolver(role_repository, small_catalog, cache=cache)
        await role_repository.create(make_role("A", bundles=["accounting"]))
        await role_repository.create(make_role("B", bundles=["accounting"], tenant_id="t2"))
        await resolver.resolve_all("t1")
        await resolver.resolve_all("t2")
        
        stored = await resolver.reseed_catalog([
            ModulePermissionDefinition("accounting", (
                PermissionDefinition("accounting.vouchers.view", "View"),
                PermissionDefinition("accounting.vouchers.approve", "Approve", enabled=False),
            )),
        ])
        
        assert stored == 2
        for tenant_id, role_id in (("t1", "A"), ("t2", "B")):
            role = await role_repository.get(tenant_id, role_id)
            assert role.resolved_permissions == ["accounting.vouchers.view"]
            assert await cache.get(tenant_id, role_id) == {"accounting.vouchers.view"}
    
    @pytest.mark.asyncio
    async def test_seed_keeps_other_modules(self, small_catalog):
        written = await small_catalog.seed([
            ModulePermissionDefinition("crm", (PermissionDefinition("crm.leads.view", "View leads"),)),
        ])
        
        definitions = await small_catalog.list_all()
        assert written == 1
        assert set(definitions) == {"accounting", "inventory", "crm"}
