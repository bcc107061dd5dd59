"""Tests for the authorization checker decision order."""

import asyncio

import pytest
from unittest.mock import AsyncMock

from neo_tenancy.config.constants import DecisionReason
from neo_tenancy.core.exceptions import CacheError, PermissionDeniedError, ValidationError
from neo_tenancy.features.memberships import Membership
from neo_tenancy.features.permissions import (
    AuthorizationChecker,
    MemoryRolePermissionCache,
    PermissionResolver,
    RoleService,
)


@pytest.fixture
def checker(user_directory, membership_repository, role_repository, resolver):
    return AuthorizationChecker(user_directory, membership_repository, role_repository, resolver)


async def _member(memberships, user_id, role_id, **kwargs):
    await memberships.create(Membership(tenant_id="t1", user_id=user_id, role_id=role_id, **kwargs))


class TestAuthorize:
    """Test each step of the decision order."""
    
    @pytest.mark.asyncio
    async def test_global_admin_allowed_without_membership(self, checker):
        decision = await checker.authorize("platform-admin", "t1", "accounting.settings")
        
        assert decision.allowed
        assert decision.reason == DecisionReason.GLOBAL_ADMIN
    
    @pytest.mark.asyncio
    async def test_no_membership_denied(self, checker):
        decision = await checker.authorize("stranger", "t1", "accounting.settings")
        
        assert not decision
        assert decision.reason == DecisionReason.NO_MEMBERSHIP
    
    @pytest.mark.asyncio
    async def test_owner_bypasses_role(self, checker, membership_repository):
        """Test that an owner is allowed even with a role that does not exist."""
        await _member(membership_repository, "u1", "NOPE", is_owner=True)
        
        decision = await checker.authorize("u1", "t1", "hr.payroll.view")
        
        assert decision.allowed
        assert decision.reason == DecisionReason.OWNER
    
    @pytest.mark.asyncio
    async def test_disabled_owner_still_allowed(self, checker, membership_repository):
        await _member(membership_repository, "u1", "OWNER", is_owner=True, is_disabled=True)
        
        assert (await checker.authorize("u1", "t1", "accounting.settings")).allowed
    
    @pytest.mark.asyncio
    async def test_disabled_member_denied(self, checker, membership_repository, role_repository, make_role):
        await role_repository.create(make_role("ALL", explicit=["*"]))
        await _member(membership_repository, "u2", "ALL", is_disabled=True)
        
        decision = await checker.authorize("u2", "t1", "accounting.settings")
        
        assert not decision.allowed
        assert decision.reason == DecisionReason.MEMBERSHIP_DISABLED
    
    @pytest.mark.asyncio
    async def test_missing_role_denied(self, checker, membership_repository):
        await _member(membership_repository, "u2", "DELETED")
        
        decision = await checker.authorize("u2", "t1", "accounting.settings")
        
        assert decision.reason == DecisionReason.ROLE_NOT_FOUND
    
    @pytest.mark.asyncio
    async def test_empty_role_denied(self, checker, membership_repository, role_repository, make_role):
        await role_repository.create(make_role("MEMBER"))
        await _member(membership_repository, "u2", "MEMBER")
        
        decision = await checker.authorize("u2", "t1", "accounting.settings")
        
        assert decision.reason == DecisionReason.NO_PERMISSIONS
    
    @pytest.mark.asyncio
    async def test_hierarchical_grant(self, checker, membership_repository, role_repository, resolver, make_role):
        """Test that a coarser grant covers its children but not look-alike siblings."""
        await role_repository.create(make_role("CLERK", explicit=["accounting.vouchers"]))
        await resolver.resolve_one("t1", "CLERK")
        await _member(membership_repository, "u2", "CLERK")
        
        allowed = await checker.authorize("u2", "t1", "accounting.vouchers.approve")
        denied = await checker.authorize("u2", "t1", "accounting.voucherstypes.list")
        
        assert allowed.allowed
        assert allowed.matched_permission == "accounting.vouchers"
        assert not denied.allowed
        assert denied.reason == DecisionReason.PERMISSION_MISSING
    
    @pytest.mark.asyncio
    async def test_wildcard_role_allows_everything(self, checker, membership_repository, role_repository, resolver, make_role):
        await role_repository.create(make_role("SUPER", explicit=["*"]))
        await resolver.resolve_one("t1", "SUPER")
        await _member(membership_repository, "u2", "SUPER")
        
        for permission in ("accounting.settings", "hr.payroll.view", "x"):
            assert (await checker.authorize("u2", "t1", permission)).allowed
    
    @pytest.mark.asyncio
    async def test_bundle_permissions_from_unresolved_role(self, checker, membership_repository, role_repository, make_role):
        """Test that a never-resolved role is computed on the fly."""
        await role_repository.create(make_role("STOCK", bundles=["inventory"]))
        await _member(membership_repository, "u2", "STOCK")
        
        assert (await checker.authorize("u2", "t1", "inventory.items.view")).allowed
        assert not (await checker.authorize("u2", "t1", "accounting.settings")).allowed
    
    @pytest.mark.asyncio
    async def test_empty_inputs_rejected(self, checker):
        with pytest.raises(ValidationError):
            await checker.authorize("", "t1", "a.b")
        with pytest.raises(ValidationError):
            await checker.authorize("u1", "t1", "")


class TestMustAuthorize:
    """Test the raising variants."""
    
    @pytest.mark.asyncio
    async def test_raises_permission_denied(self, checker):
        with pytest.raises(PermissionDeniedError) as exc_info:
            await checker.must_authorize("stranger", "t1", "accounting.settings")
        
        assert exc_info.value.details["reason"] == DecisionReason.NO_MEMBERSHIP.value
        assert exc_info.value.details["permission"] == "accounting.settings"
    
    @pytest.mark.asyncio
    async def test_owner_or_permission(self, checker, membership_repository, role_repository, resolver, make_role):
        await _member(membership_repository, "owner", "OWNER", is_owner=True)
        await role_repository.create(make_role("ROLES_ADMIN", explicit=["companyAdmin.roles.manage"]))
        await resolver.resolve_one("t1", "ROLES_ADMIN")
        await _member(membership_repository, "u2", "ROLES_ADMIN")
        await _member(membership_repository, "u3", "ROLES_ADMIN", is_disabled=True)
        
        assert (await checker.owner_or_permission("owner", "t1", "companyAdmin.roles.manage")).allowed
        assert (await checker.owner_or_permission("u2", "t1", "companyAdmin.roles.manage")).allowed
        with pytest.raises(PermissionDeniedError):
            await checker.owner_or_permission("u3", "t1", "companyAdmin.roles.manage")


class TestPermissionCacheUse:
    """Test the optional resolved-permission cache."""
    
    @pytest.mark.asyncio
    async def test_cache_read_on_hit_but_never_filled_by_checks(
        self, user_directory, membership_repository, role_repository, resolver, make_role
    ):
        cache = MemoryRolePermissionCache()
        checker = AuthorizationChecker(user_directory, membership_repository, role_repository, resolver, cache=cache)
        await role_repository.create(make_role("CLERK", explicit=["accounting.vouchers"]))
        await _member(membership_repository, "u2", "CLERK")
        
        assert (await checker.authorize("u2", "t1", "accounting.vouchers.view")).allowed
        assert await cache.get("t1", "CLERK") is None
        
        await cache.set("t1", "CLERK", {"hr"})
        assert (await checker.authorize("u2", "t1", "hr.payroll.view")).allowed
    
    @pytest.mark.asyncio
    async def test_cache_failure_falls_back_to_store(
        self, user_directory, membership_repository, role_repository, resolver, make_role
    ):
        cache = AsyncMock()
        cache.get.side_effect = CacheError("redis down")
        checker = AuthorizationChecker(user_directory, membership_repository, role_repository, resolver, cache=cache)
        await role_repository.create(make_role("CLERK", explicit=["accounting.vouchers"]))
        await _member(membership_repository, "u2", "CLERK")
        
        assert (await checker.authorize("u2", "t1", "accounting.vouchers.view")).allowed
        cache.set.assert_not_awaited()
    
    @pytest.mark.asyncio
    async def test_slow_check_cannot_restore_revoked_grant(
        self, user_directory, membership_repository, role_repository, catalog, make_role
    ):
        """Test a check that read the role before a revocation and finishes after it."""
        cache = MemoryRolePermissionCache()
        resolver = PermissionResolver(role_repository, catalog, cache=cache)
        service = RoleService(role_repository, membership_repository, resolver)
        checker = AuthorizationChecker(user_directory, membership_repository, role_repository, resolver, cache=cache)
        await role_repository.create(make_role("CLERK", explicit=["accounting.vouchers"]))
        await resolver.resolve_one("t1", "CLERK")
        await _member(membership_repository, "u2", "CLERK")
        # entry expired
        await cache.invalidate("t1", "CLERK")
        
        read_done = asyncio.Event()
        resume = asyncio.Event()
        original_get = role_repository.get
        
        async def slow_get(tenant_id, role_id):
            role = await original_get(tenant_id, role_id)
            if not read_done.is_set():
                read_done.set()
                await resume.wait()
            return role
        
        role_repository.get = slow_get
        check = asyncio.ensure_future(checker.authorize("u2", "t1", "accounting.vouchers.approve"))
        await read_done.wait()
        
        await service.update_role("t1", "CLERK", explicit_permissions=[])
        resume.set()
        
        assert (await check).allowed
        decision = await checker.authorize("u2", "t1", "accounting.vouchers.approve")
        assert not decision.allowed
        assert decision.reason == DecisionReason.NO_PERMISSIONS
        assert await cache.get("t1", "CLERK") == set()
