"""AsyncPG role repository."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import asyncpg

from ....core.exceptions import RoleAlreadyExistsError, ValidationError
from ....utils import utc_now
from ...database.connection import DatabaseConnection, affected_rows
from ...database.error_handling import database_error_handler
from ..entities.role import Role


logger = logging.getLogger(__name__)

UPDATABLE_COLUMNS = ("name", "description", "explicit_permissions", "module_bundles")


class AsyncPGRoleRepository:
    """Role storage in the ``roles`` table."""
    
    def __init__(self, db: DatabaseConnection, table: str = "roles"):
        self._db = db
        self._table = table
    
    @database_error_handler("create role")
    async def create(self, role: Role) -> Role:
        now = utc_now()
        try:
            row = await self._db.fetch_one(
                f"""
                INSERT INTO {self._table} (
                    tenant_id, id, name, description, explicit_permissions, module_bundles,
                    resolved_permissions, resolved_at, is_system, created_at, updated_at
                ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $10)
                RETURNING *
                """,
                role.tenant_id, role.id, role.name, role.description,
                list(role.explicit_permissions), list(role.module_bundles),
                list(role.resolved_permissions), role.resolved_at, role.is_system, now,
            )
        except asyncpg.UniqueViolationError:
            raise RoleAlreadyExistsError(
                f"Role {role.id} already exists in tenant {role.tenant_id}",
                details={"tenant_id": role.tenant_id, "role_id": role.id},
            )
        logger.info(f"Created role {role.id} in tenant {role.tenant_id}")
        return self._map_row_to_role(row)
    
    @database_error_handler("get role")
    async def get(self, tenant_id: str, role_id: str) -> Optional[Role]:
        row = await self._db.fetch_one(
            f"SELECT * FROM {self._table} WHERE tenant_id = $1 AND id = $2",
            tenant_id, role_id,
        )
        return self._map_row_to_role(row) if row else None
    
    @database_error_handler("list roles")
    async def list_for_tenant(self, tenant_id: str) -> List[Role]:
        rows = await self._db.fetch_all(
            f"SELECT * FROM {self._table} WHERE tenant_id = $1 ORDER BY created_at, id",
            tenant_id,
        )
        return [self._map_row_to_role(row) for row in rows]
    
    @database_error_handler("list role tenants")
    async def list_tenant_ids(self) -> List[str]:
        rows = await self._db.fetch_all(f"SELECT DISTINCT tenant_id FROM {self._table} ORDER BY tenant_id")
        return [row["tenant_id"] for row in rows]
    
    @database_error_handler("update role")
    async def update(self, tenant_id: str, role_id: str, changes: Dict[str, Any]) -> Optional[Role]:
        unknown = set(changes) - set(UPDATABLE_COLUMNS)
        if unknown:
            raise ValidationError(f"Role fields cannot be updated: {', '.join(sorted(unknown))}")
        if not changes:
            return await self.get(tenant_id, role_id)
        
        columns = list(changes)
        assignments = ", ".join(f"{column} = ${index + 3}" for index, column in enumerate(columns))
        params = [changes[column] for column in columns]
        row = await self._db.fetch_one(
            f"""
            UPDATE {self._table}
            SET {assignments}, updated_at = ${len(columns) + 3}
            WHERE tenant_id = $1 AND id = $2
            RETURNING *
            """,
            tenant_id, role_id, *params, utc_now(),
        )
        return self._map_row_to_role(row) if row else None
    
    @database_error_handler("store resolved permissions")
    async def set_resolved_permissions(
        self,
        tenant_id: str,
        role_id: str,
        permissions: List[str],
        resolved_at: datetime,
    ) -> bool:
        status = await self._db.execute(
            f"""
            UPDATE {self._table}
            SET resolved_permissions = $3, resolved_at = $4
            WHERE tenant_id = $1 AND id = $2
            """,
            tenant_id, role_id, list(permissions), resolved_at,
        )
        return affected_rows(status) > 0
    
    @database_error_handler("delete role")
    async def delete(self, tenant_id: str, role_id: str) -> bool:
        status = await self._db.execute(
            f"DELETE FROM {self._table} WHERE tenant_id = $1 AND id = $2",
            tenant_id, role_id,
        )
        deleted = affected_rows(status) > 0
        if deleted:
            logger.info(f"Deleted role {role_id} from tenant {tenant_id}")
        return deleted
    
    @database_error_handler("delete tenant roles")
    async def delete_for_tenant(self, tenant_id: str) -> int:
        status = await self._db.execute(f"DELETE FROM {self._table} WHERE tenant_id = $1", tenant_id)
        return affected_rows(status)
    
    def _map_row_to_role(self, row: Dict[str, Any]) -> Role:
        """Map database row to Role entity."""
        return Role(
            tenant_id=row["tenant_id"],
            id=row["id"],
            name=row["name"],
            description=row.get("description"),
            explicit_permissions=list(row.get("explicit_permissions") or []),
            module_bundles=list(row.get("module_bundles") or []),
            resolved_permissions=list(row.get("resolved_permissions") or []),
            resolved_at=row.get("resolved_at"),
            is_system=row.get("is_system", False),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
