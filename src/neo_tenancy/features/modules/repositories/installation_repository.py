"""AsyncPG module installation repository."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import asyncpg

from ....config.constants import InitializationStatus
from ....core.exceptions import ModuleAlreadyInstalledError, ValidationError
from ....utils import utc_now
from ...database.connection import DatabaseConnection, affected_rows
from ...database.error_handling import database_error_handler
from ..entities.installation import ModuleInstallation


logger = logging.getLogger(__name__)

UPDATABLE_COLUMNS = ("initialized", "initialization_status", "config")

INSERT_COLUMNS = "tenant_id, module_code, initialized, initialization_status, config, created_at, updated_at"


class AsyncPGModuleInstallationRepository:
    """Installation storage in the ``module_installations`` table."""
    
    def __init__(self, db: DatabaseConnection, table: str = "module_installations"):
        self._db = db
        self._table = table
    
    @database_error_handler("get module installation")
    async def get(self, tenant_id: str, module_code: str) -> Optional[ModuleInstallation]:
        row = await self._db.fetch_one(
            f"SELECT * FROM {self._table} WHERE tenant_id = $1 AND module_code = $2",
            tenant_id, module_code,
        )
        return self._map_row_to_installation(row) if row else None
    
    @database_error_handler("list module installations")
    async def list_for_tenant(self, tenant_id: str) -> List[ModuleInstallation]:
        rows = await self._db.fetch_all(
            f"SELECT * FROM {self._table} WHERE tenant_id = $1 ORDER BY created_at, module_code",
            tenant_id,
        )
        return [self._map_row_to_installation(row) for row in rows]
    
    @database_error_handler("create module installation")
    async def create(self, installation: ModuleInstallation) -> ModuleInstallation:
        try:
            row = await self._db.fetch_one(
                f"INSERT INTO {self._table} ({INSERT_COLUMNS}) VALUES ($1, $2, $3, $4, $5, $6, $6) RETURNING *",
                *self._insert_params(installation),
            )
        except asyncpg.UniqueViolationError:
            raise self._already_installed(installation)
        return self._map_row_to_installation(row)
    
    @database_error_handler("create module installation if absent")
    async def create_if_absent(self, installation: ModuleInstallation) -> bool:
        status = await self._db.execute(
            f"""
            INSERT INTO {self._table} ({INSERT_COLUMNS})
            VALUES ($1, $2, $3, $4, $5, $6, $6)
            ON CONFLICT (tenant_id, module_code) DO NOTHING
            """,
            *self._insert_params(installation),
        )
        return affected_rows(status) > 0
    
    @database_error_handler("batch create module installations")
    async def batch_create(self, installations: Sequence[ModuleInstallation]) -> List[ModuleInstallation]:
        created = []
        try:
            async with self._db.transaction() as tx:
                for installation in installations:
                    row = await tx.fetch_one(
                        f"INSERT INTO {self._table} ({INSERT_COLUMNS}) VALUES ($1, $2, $3, $4, $5, $6, $6) RETURNING *",
                        *self._insert_params(installation),
                    )
                    created.append(self._map_row_to_installation(row))
        except asyncpg.UniqueViolationError as e:
            raise ModuleAlreadyInstalledError(f"Module already installed: {e}")
        logger.info(f"Created {len(created)} module installations")
        return created
    
    @database_error_handler("update module installation")
    async def update(self, tenant_id: str, module_code: str, changes: Dict[str, Any]) -> Optional[ModuleInstallation]:
        unknown = set(changes) - set(UPDATABLE_COLUMNS)
        if unknown:
            raise ValidationError(f"Installation fields cannot be updated: {', '.join(sorted(unknown))}")
        if not changes:
            return await self.get(tenant_id, module_code)
        
        columns = list(changes)
        params = [
            changes[c].value if isinstance(changes[c], InitializationStatus) else changes[c]
            for c in columns
        ]
        assignments = ", ".join(f"{column} = ${index + 3}" for index, column in enumerate(columns))
        row = await self._db.fetch_one(
            f"""
            UPDATE {self._table}
            SET {assignments}, updated_at = ${len(columns) + 3}
            WHERE tenant_id = $1 AND module_code = $2
            RETURNING *
            """,
            tenant_id, module_code, *params, utc_now(),
        )
        return self._map_row_to_installation(row) if row else None
    
    @database_error_handler("promote module installation")
    async def promote_to_explicit(self, tenant_id: str, module_code: str, promoted_at: datetime) -> bool:
        status = await self._db.execute(
            f"""
            UPDATE {self._table}
            SET config = config || jsonb_build_object('isImplicit', false), updated_at = $3
            WHERE tenant_id = $1 AND module_code = $2
              AND COALESCE((config->>'isImplicit')::boolean, false)
            """,
            tenant_id, module_code, promoted_at,
        )
        return affected_rows(status) > 0
    
    @database_error_handler("delete module installation")
    async def delete(self, tenant_id: str, module_code: str) -> bool:
        status = await self._db.execute(
            f"DELETE FROM {self._table} WHERE tenant_id = $1 AND module_code = $2",
            tenant_id, module_code,
        )
        return affected_rows(status) > 0
    
    @database_error_handler("delete tenant module installations")
    async def delete_for_tenant(self, tenant_id: str) -> int:
        status = await self._db.execute(f"DELETE FROM {self._table} WHERE tenant_id = $1", tenant_id)
        return affected_rows(status)
    
    @staticmethod
    def _insert_params(installation: ModuleInstallation) -> tuple:
        return (
            installation.tenant_id,
            installation.module_code,
            installation.initialized,
            installation.initialization_status.value,
            dict(installation.config),
            installation.created_at or utc_now(),
        )
    
    @staticmethod
    def _already_installed(installation: ModuleInstallation) -> ModuleAlreadyInstalledError:
        return ModuleAlreadyInstalledError(
            f"Module {installation.module_code} is already installed in tenant {installation.tenant_id}",
            details={"tenant_id": installation.tenant_id, "module_code": installation.module_code},
        )
    
    def _map_row_to_installation(self, row: Dict[str, Any]) -> ModuleInstallation:
        return ModuleInstallation(
            tenant_id=row["tenant_id"],
            module_code=row["module_code"],
            initialized=row.get("initialized", False),
            initialization_status=InitializationStatus(row.get("initialization_status", "pending")),
            config=dict(row.get("config") or {}),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
