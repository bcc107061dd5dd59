"""Tests for role management."""

import pytest

from neo_tenancy.core.exceptions import ProtectedOperationError, RoleNotFoundError, ValidationError
from neo_tenancy.features.memberships import Membership
from neo_tenancy.features.permissions import MemoryRolePermissionCache, PermissionResolver, RoleService


@pytest.fixture
def service(role_repository, membership_repository, resolver):
    return RoleService(role_repository, membership_repository, resolver)


class TestRoleService:
    """Test role CRUD and the protected operations."""
    
    @pytest.mark.asyncio
    async def test_create_role_resolves_immediately(self, service):
        role = await service.create_role("t1", "  Stock Keeper ", module_bundles=["inventory"])
        
        assert role.id.startswith("role_")
        assert role.name == "Stock Keeper"
        assert not role.is_system
        assert role.is_resolved
        assert "inventory.items.view" in role.resolved_permissions
    
    @pytest.mark.asyncio
    async def test_create_role_requires_name(self, service):
        with pytest.raises(ValidationError):
            await service.create_role("t1", "   ")
    
    @pytest.mark.asyncio
    async def test_get_missing_role(self, service):
        with pytest.raises(RoleNotFoundError):
            await service.get_role("t1", "GHOST")
    
    @pytest.mark.asyncio
    async def test_update_permissions_re_resolves(self, service):
        """Test that the stored resolved set follows an update of explicit grants."""
        role = await service.create_role("t1", "Clerk", explicit_permissions=["accounting.vouchers.view"])
        
        updated = await service.update_role("t1", role.id, explicit_permissions=["hr.employees.view"])
        
        assert updated.explicit_permissions == ["hr.employees.view"]
        assert updated.resolved_permissions == ["hr.employees.view"]
    
    @pytest.mark.asyncio
    async def test_update_name_only_keeps_resolution(self, service):
        role = await service.create_role("t1", "Clerk", explicit_permissions=["a.b"])
        
        updated = await service.update_role("t1", role.id, name="Senior Clerk")
        
        assert updated.name == "Senior Clerk"
        assert updated.resolved_at == role.resolved_at
    
    @pytest.mark.asyncio
    async def test_owner_role_keeps_wildcard(self, service, role_repository, make_role):
        await role_repository.create(make_role("OWNER", explicit=["*"], is_system=True))
        
        with pytest.raises(ProtectedOperationError):
            await service.update_role("t1", "OWNER", explicit_permissions=["accounting.settings"])
    
    @pytest.mark.asyncio
    async def test_attach_module_bundles(self, service, role_repository, make_role):
        await role_repository.create(make_role("ADMIN", bundles=["accounting"]))
        
        assert await service.attach_module_bundles("t1", "ADMIN", ["hr", "accounting"]) is True
        
        role = await role_repository.get("t1", "ADMIN")
        assert role.module_bundles == ["accounting", "hr"]
        assert "hr.payroll.view" in role.resolved_permissions
    
    @pytest.mark.asyncio
    async def test_attach_to_missing_role(self, service):
        assert await service.attach_module_bundles("t1", "GHOST", ["hr"]) is False
    
    @pytest.mark.asyncio
    async def test_system_role_cannot_be_deleted(self, service, role_repository, make_role):
        await role_repository.create(make_role("ADMIN", is_system=True))
        
        with pytest.raises(ProtectedOperationError):
            await service.delete_role("t1", "ADMIN")
    
    @pytest.mark.asyncio
    async def test_assigned_role_cannot_be_deleted(self, service, membership_repository):
        role = await service.create_role("t1", "Clerk")
        await membership_repository.create(Membership(tenant_id="t1", user_id="u2", role_id=role.id))
        
        with pytest.raises(ProtectedOperationError) as exc_info:
            await service.delete_role("t1", role.id)
        
        assert exc_info.value.details["assignees"] == 1
    
    @pytest.mark.asyncio
    async def test_delete_role_invalidates_cache(self, role_repository, membership_repository, catalog):
        cache = MemoryRolePermissionCache()
        service = RoleService(role_repository, membership_repository, PermissionResolver(role_repository, catalog, cache))
        role = await service.create_role("t1", "Clerk", explicit_permissions=["a.b"])
        await cache.set("t1", role.id, {"a.b"})
        
        await service.delete_role("t1", role.id)
        
        assert await role_repository.get("t1", role.id) is None
        assert await cache.get("t1", role.id) is None
