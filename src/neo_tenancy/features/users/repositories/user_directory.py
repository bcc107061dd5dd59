"""AsyncPG platform user directory."""

import logging
from typing import Optional

from ....utils import utc_now
from ...database.connection import DatabaseConnection, affected_rows
from ...database.error_handling import database_error_handler


logger = logging.getLogger(__name__)


class AsyncPGUserDirectory:
    """Reads and writes the ``platform_users`` table."""
    
    def __init__(self, db: DatabaseConnection, table: str = "platform_users", tenants_table: str = "tenants"):
        self._db = db
        self._table = table
        self._tenants_table = tenants_table
    
    @database_error_handler("check global admin")
    async def is_global_admin(self, user_id: str) -> bool:
        value = await self._db.fetch_value(
            f"SELECT is_global_admin FROM {self._table} WHERE id = $1",
            user_id,
        )
        return bool(value)
    
    @database_error_handler("set active tenant")
    async def set_active_tenant(self, user_id: str, tenant_id: Optional[str]) -> None:
        await self._db.execute(
            f"""
            INSERT INTO {self._table} (id, active_tenant_id, updated_at)
            VALUES ($1, $2, $3)
            ON CONFLICT (id) DO UPDATE SET active_tenant_id = EXCLUDED.active_tenant_id, updated_at = EXCLUDED.updated_at
            """,
            user_id, tenant_id, utc_now(),
        )
    
    @database_error_handler("get active tenant")
    async def get_active_tenant(self, user_id: str) -> Optional[str]:
        return await self._db.fetch_value(
            f"SELECT active_tenant_id FROM {self._table} WHERE id = $1",
            user_id,
        )
    
    @database_error_handler("restore active tenant")
    async def restore_active_tenant(self, user_id: str, expected: str, tenant_id: Optional[str]) -> bool:
        status = await self._db.execute(
            f"""
            UPDATE {self._table}
            SET active_tenant_id = (SELECT id FROM {self._tenants_table} WHERE id = $3), updated_at = $4
            WHERE id = $1 AND active_tenant_id = $2
            """,
            user_id, expected, tenant_id, utc_now(),
        )
        return affected_rows(status) > 0
