"""AsyncPG membership repository."""

import logging
from typing import Any, Dict, List, Optional

import asyncpg

from ....core.exceptions import MembershipAlreadyExistsError, ValidationError
from ....utils import utc_now
from ...database.connection import DatabaseConnection, affected_rows
from ...database.error_handling import database_error_handler
from ..entities.membership import Membership


logger = logging.getLogger(__name__)

UPDATABLE_COLUMNS = ("role_id", "is_disabled")


class AsyncPGMembershipRepository:
    """Membership storage in the ``memberships`` table.
    
    The (tenant_id, user_id) primary key enforces one membership per pair.
    """
    
    def __init__(self, db: DatabaseConnection, table: str = "memberships"):
        self._db = db
        self._table = table
    
    @database_error_handler("create membership")
    async def create(self, membership: Membership) -> Membership:
        try:
            row = await self._db.fetch_one(
                f"""
                INSERT INTO {self._table} (tenant_id, user_id, role_id, is_owner, is_disabled, created_at, updated_at)
                VALUES ($1, $2, $3, $4, $5, $6, $6)
                RETURNING *
                """,
                membership.tenant_id, membership.user_id, membership.role_id,
                membership.is_owner, membership.is_disabled, utc_now(),
            )
        except asyncpg.UniqueViolationError:
            raise MembershipAlreadyExistsError(
                f"User {membership.user_id} is already a member of tenant {membership.tenant_id}",
                details={"tenant_id": membership.tenant_id, "user_id": membership.user_id},
            )
        logger.info(f"Added user {membership.user_id} to tenant {membership.tenant_id} as {membership.role_id}")
        return self._map_row_to_membership(row)
    
    @database_error_handler("get membership")
    async def get(self, tenant_id: str, user_id: str) -> Optional[Membership]:
        row = await self._db.fetch_one(
            f"SELECT * FROM {self._table} WHERE tenant_id = $1 AND user_id = $2",
            tenant_id, user_id,
        )
        return self._map_row_to_membership(row) if row else None
    
    @database_error_handler("list memberships")
    async def list_for_tenant(self, tenant_id: str) -> List[Membership]:
        rows = await self._db.fetch_all(
            f"SELECT * FROM {self._table} WHERE tenant_id = $1 ORDER BY created_at, user_id",
            tenant_id,
        )
        return [self._map_row_to_membership(row) for row in rows]
    
    @database_error_handler("list memberships by role")
    async def list_by_role(self, tenant_id: str, role_id: str) -> List[Membership]:
        rows = await self._db.fetch_all(
            f"SELECT * FROM {self._table} WHERE tenant_id = $1 AND role_id = $2 ORDER BY user_id",
            tenant_id, role_id,
        )
        return [self._map_row_to_membership(row) for row in rows]
    
    @database_error_handler("update membership")
    async def update(self, tenant_id: str, user_id: str, changes: Dict[str, Any]) -> Optional[Membership]:
        unknown = set(changes) - set(UPDATABLE_COLUMNS)
        if unknown:
            raise ValidationError(f"Membership fields cannot be updated: {', '.join(sorted(unknown))}")
        if not changes:
            return await self.get(tenant_id, user_id)
        
        columns = list(changes)
        assignments = ", ".join(f"{column} = ${index + 3}" for index, column in enumerate(columns))
        row = await self._db.fetch_one(
            f"""
            UPDATE {self._table}
            SET {assignments}, updated_at = ${len(columns) + 3}
            WHERE tenant_id = $1 AND user_id = $2
            RETURNING *
            """,
            tenant_id, user_id, *[changes[column] for column in columns], utc_now(),
        )
        return self._map_row_to_membership(row) if row else None
    
    @database_error_handler("delete membership")
    async def delete(self, tenant_id: str, user_id: str) -> bool:
        status = await self._db.execute(
            f"DELETE FROM {self._table} WHERE tenant_id = $1 AND user_id = $2",
            tenant_id, user_id,
        )
        return affected_rows(status) > 0
    
    @database_error_handler("delete tenant memberships")
    async def delete_for_tenant(self, tenant_id: str) -> int:
        status = await self._db.execute(f"DELETE FROM {self._table} WHERE tenant_id = $1", tenant_id)
        return affected_rows(status)
    
    def _map_row_to_membership(self, row: Dict[str, Any]) -> Membership:
        return Membership(
            tenant_id=row["tenant_id"],
            user_id=row["user_id"],
            role_id=row["role_id"],
            is_owner=row.get("is_owner", False),
            is_disabled=row.get("is_disabled", False),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
