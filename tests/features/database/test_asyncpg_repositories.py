"""Tests for the asyncpg repositories against a mocked connection."""

from datetime import date

import asyncpg
import pytest
from unittest.mock import AsyncMock

from neo_tenancy.config.constants import InitializationStatus
from neo_tenancy.core.exceptions import (
    DatabaseError,
    ModuleAlreadyInstalledError,
    RoleAlreadyExistsError,
    TenantAlreadyExistsError,
    TenantNotFoundError,
    ValidationError,
)
from neo_tenancy.features.database import SCHEMA_SQL, affected_rows, apply_schema, database_error_handler
from neo_tenancy.features.modules import AsyncPGModuleInstallationRepository, ModuleInstallation
from neo_tenancy.features.permissions import AsyncPGRoleRepository
from neo_tenancy.features.tenants import AsyncPGTenantRepository, Tenant
from neo_tenancy.features.users import AsyncPGUserDirectory


def _tenant(**overrides):
    values = dict(
        id="cmp_1",
        owner_id="u1",
        name="Acme",
        base_currency="USD",
        fiscal_year_start=date(2025, 1, 1),
        fiscal_year_end=date(2025, 12, 31),
        modules=["accounting"],
    )
    values.update(overrides)
    return Tenant(**values)


def _tenant_row(**overrides):
    row = {
        "id": "cmp_1",
        "owner_id": "u1",
        "name": "Acme",
        "base_currency": "USD",
        "fiscal_year_start": date(2025, 1, 1),
        "fiscal_year_end": date(2025, 12, 31),
        "modules": ["accounting"],
        "bundle_id": "starter",
        "subscription_plan": "Starter",
    }
    row.update(overrides)
    return row


class TestHelpers:
    """Test status parsing, error wrapping and schema application."""
    
    @pytest.mark.parametrize("status,expected", [
        ("DELETE 3", 3),
        ("INSERT 0 1", 1),
        ("UPDATE 0", 0),
        ("CREATE TABLE", 0),
        (None, 0),
    ])
    def test_affected_rows(self, status, expected):
        assert affected_rows(status) == expected
    
    @pytest.mark.asyncio
    async def test_error_handler_wraps_driver_errors(self):
        @database_error_handler("load things")
        async def failing():
            raise OSError("connection refused")
        
        with pytest.raises(DatabaseError) as exc_info:
            await failing()
        
        assert "Failed to load things" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, OSError)
    
    @pytest.mark.asyncio
    async def test_error_handler_passes_domain_errors(self):
        @database_error_handler("load things")
        async def failing():
            raise TenantNotFoundError("gone")
        
        with pytest.raises(TenantNotFoundError):
            await failing()
    
    @pytest.mark.asyncio
    async def test_apply_schema(self, mock_db):
        await apply_schema(mock_db)
        
        mock_db.execute.assert_awaited_once_with(SCHEMA_SQL)
        assert "CREATE TABLE IF NOT EXISTS tenants" in SCHEMA_SQL


class TestTenantRepository:
    """Test AsyncPGTenantRepository."""
    
    @pytest.mark.asyncio
    async def test_create_maps_returned_row(self, mock_db):
        mock_db.fetch_one.return_value = _tenant_row()
        repo = AsyncPGTenantRepository(mock_db)
        
        tenant = await repo.create(_tenant())
        
        assert tenant.id == "cmp_1"
        assert tenant.subscription_plan == "Starter"
        query, *params = mock_db.fetch_one.await_args.args
        assert "INSERT INTO tenants" in query
        assert params[:3] == ["cmp_1", "u1", "Acme"]
    
    @pytest.mark.asyncio
    async def test_create_unique_violation_is_a_conflict(self, mock_db):
        mock_db.fetch_one.side_effect = asyncpg.UniqueViolationError("duplicate key value")
        repo = AsyncPGTenantRepository(mock_db)
        
        with pytest.raises(TenantAlreadyExistsError):
            await repo.create(_tenant())
    
    @pytest.mark.asyncio
    async def test_driver_error_is_a_database_error(self, mock_db):
        mock_db.fetch_one.side_effect = OSError("connection reset")
        repo = AsyncPGTenantRepository(mock_db)
        
        with pytest.raises(DatabaseError):
            await repo.get("cmp_1")
    
    @pytest.mark.asyncio
    async def test_get_missing(self, mock_db):
        repo = AsyncPGTenantRepository(mock_db)
        
        assert await repo.get("cmp_1") is None
    
    @pytest.mark.asyncio
    async def test_update_builds_assignments(self, mock_db):
        mock_db.fetch_one.return_value = _tenant_row(name="Acme Ltd", country="DE")
        repo = AsyncPGTenantRepository(mock_db)
        
        tenant = await repo.update("cmp_1", {"name": "Acme Ltd", "country": "DE"})
        
        assert tenant.name == "Acme Ltd"
        query, *params = mock_db.fetch_one.await_args.args
        assert "name = $2" in query and "country = $3" in query and "updated_at = $4" in query
        assert params[:3] == ["cmp_1", "Acme Ltd", "DE"]
    
    @pytest.mark.asyncio
    async def test_update_rejects_unknown_fields(self, mock_db):
        repo = AsyncPGTenantRepository(mock_db)
        
        with pytest.raises(ValidationError):
            await repo.update("cmp_1", {"owner_id": "u2"})
        mock_db.fetch_one.assert_not_awaited()
    
    @pytest.mark.asyncio
    async def test_delete_reads_status(self, mock_db):
        repo = AsyncPGTenantRepository(mock_db)
        
        mock_db.execute.return_value = "DELETE 1"
        assert await repo.delete("cmp_1") is True
        
        mock_db.execute.return_value = "DELETE 0"
        assert await repo.delete("cmp_1") is False


class TestRoleRepository:
    """Test AsyncPGRoleRepository conflict mapping."""
    
    @pytest.mark.asyncio
    async def test_duplicate_role(self, mock_db, make_role):
        mock_db.fetch_one.side_effect = asyncpg.UniqueViolationError("duplicate key value")
        repo = AsyncPGRoleRepository(mock_db)
        
        with pytest.raises(RoleAlreadyExistsError):
            await repo.create(make_role())
    
    @pytest.mark.asyncio
    async def test_list_tenant_ids(self, mock_db):
        mock_db.fetch_all.return_value = [{"tenant_id": "t1"}, {"tenant_id": "t2"}]
        repo = AsyncPGRoleRepository(mock_db)
        
        assert await repo.list_tenant_ids() == ["t1", "t2"]
        assert "DISTINCT tenant_id" in mock_db.fetch_all.await_args.args[0]


class TestInstallationRepository:
    """Test AsyncPGModuleInstallationRepository."""
    
    @pytest.mark.asyncio
    async def test_create_if_absent(self, mock_db):
        repo = AsyncPGModuleInstallationRepository(mock_db)
        installation = ModuleInstallation(tenant_id="t1", module_code="hr")
        
        mock_db.execute.return_value = "INSERT 0 1"
        assert await repo.create_if_absent(installation) is True
        
        mock_db.execute.return_value = "INSERT 0 0"
        assert await repo.create_if_absent(installation) is False
        assert "ON CONFLICT (tenant_id, module_code) DO NOTHING" in mock_db.execute.await_args.args[0]
    
    @pytest.mark.asyncio
    async def test_batch_create_runs_in_one_transaction(self, mock_db):
        tx = AsyncMock()
        tx.fetch_one.side_effect = [
            {"tenant_id": "t1", "module_code": "hr", "initialization_status": "pending", "config": {}},
            asyncpg.UniqueViolationError("duplicate key value"),
        ]
        mock_db.transaction.return_value.__aenter__.return_value = tx
        repo = AsyncPGModuleInstallationRepository(mock_db)
        
        with pytest.raises(ModuleAlreadyInstalledError):
            await repo.batch_create([
                ModuleInstallation(tenant_id="t1", module_code="hr"),
                ModuleInstallation(tenant_id="t1", module_code="crm"),
            ])
        
        mock_db.transaction.assert_called_once()
        assert tx.fetch_one.await_count == 2
    
    @pytest.mark.asyncio
    async def test_update_serializes_status(self, mock_db):
        mock_db.fetch_one.return_value = {
            "tenant_id": "t1", "module_code": "hr", "initialized": True,
            "initialization_status": "complete", "config": {"isImplicit": False},
        }
        repo = AsyncPGModuleInstallationRepository(mock_db)
        
        updated = await repo.update("t1", "hr", {"initialization_status": InitializationStatus.COMPLETE})
        
        assert updated.initialization_status == InitializationStatus.COMPLETE
        params = mock_db.fetch_one.await_args.args[1:]
        assert params[2] == "complete"


class TestUserDirectory:
    """Test AsyncPGUserDirectory."""
    
    @pytest.mark.asyncio
    async def test_unknown_user_is_not_global_admin(self, mock_db):
        directory = AsyncPGUserDirectory(mock_db)
        
        assert await directory.is_global_admin("u1") is False
    
    @pytest.mark.asyncio
    async def test_active_tenant(self, mock_db):
        mock_db.fetch_value.return_value = "cmp_1"
        directory = AsyncPGUserDirectory(mock_db)
        
        await directory.set_active_tenant("u1", "cmp_1")
        
        assert await directory.get_active_tenant("u1") == "cmp_1"
        assert mock_db.execute.await_args.args[1:3] == ("u1", "cmp_1")
    
    @pytest.mark.asyncio
    async def test_restore_active_tenant_is_conditional(self, mock_db):
        directory = AsyncPGUserDirectory(mock_db)
        
        mock_db.execute.return_value = "UPDATE 0"
        assert not await directory.restore_active_tenant("u1", "cmp_new", "cmp_old")
        
        mock_db.execute.return_value = "UPDATE 1"
        assert await directory.restore_active_tenant("u1", "cmp_new", "cmp_old")
        query, *args = mock_db.execute.await_args.args
        assert "active_tenant_id = $2" in query
        assert "FROM tenants WHERE id = $3" in query
        assert args[:3] == ["u1", "cmp_new", "cmp_old"]
