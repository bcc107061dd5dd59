"""Permission catalog stored in PostgreSQL."""

import logging
from typing import Dict, Iterable

from ...database.connection import DatabaseConnection
from ...database.error_handling import database_error_handler
from ..entities.definitions import ModulePermissionDefinition, PermissionDefinition


logger = logging.getLogger(__name__)


class AsyncPGPermissionCatalog:
    """Reads module permission definitions from ``module_permission_definitions``."""
    
    def __init__(self, db: DatabaseConnection, table: str = "module_permission_definitions"):
        self._db = db
        self._table = table
    
    @database_error_handler("list module permission definitions")
    async def list_all(self) -> Dict[str, ModulePermissionDefinition]:
        rows = await self._db.fetch_all(
            f"SELECT module_id, permission_id, label, enabled FROM {self._table} "
            f"ORDER BY module_id, position, permission_id"
        )
        
        grouped: Dict[str, list] = {}
        for row in rows:
            grouped.setdefault(row["module_id"], []).append(
                PermissionDefinition(id=row["permission_id"], label=row["label"], enabled=row["enabled"])
            )
        
        return {
            module_id: ModulePermissionDefinition(module_id=module_id, permissions=tuple(permissions))
            for module_id, permissions in grouped.items()
        }
    
    @database_error_handler("seed module permission definitions")
    async def seed(self, definitions: Iterable[ModulePermissionDefinition]) -> int:
        """Upsert definitions; returns the number of permission rows written."""
        rows = [
            (definition.module_id, permission.id, permission.label, permission.enabled, position)
            for definition in definitions
            for position, permission in enumerate(definition.permissions)
        ]
        async with self._db.transaction() as tx:
            await tx.execute_many(
                f"""
                INSERT INTO {self._table} (module_id, permission_id, label, enabled, position)
                VALUES ($1, $2, $3, $4, $5)
                ON CONFLICT (module_id, permission_id)
                DO UPDATE SET label = EXCLUDED.label, enabled = EXCLUDED.enabled, position = EXCLUDED.position
                """,
                rows,
            )
        logger.info(f"Seeded {len(rows)} module permission definitions")
        return len(rows)
