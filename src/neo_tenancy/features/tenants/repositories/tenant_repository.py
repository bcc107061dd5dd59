"""AsyncPG tenant, settings and template repositories."""

import logging
from typing import Any, Dict, List, Optional

import asyncpg

from ....core.exceptions import TenantAlreadyExistsError, ValidationError
from ....utils import utc_now
from ...database.connection import DatabaseConnection, affected_rows
from ...database.error_handling import database_error_handler
from ..entities.tenant import DocumentTemplate, Tenant, TenantSettings


logger = logging.getLogger(__name__)

UPDATABLE_COLUMNS = (
    "name", "base_currency", "country", "description", "contact_email", "logo_url",
    "modules", "fiscal_year_start", "fiscal_year_end",
)


class AsyncPGTenantRepository:
    """Tenant storage in the ``tenants`` table.
    
    The ``(owner_id, name)`` unique constraint closes the duplicate-name
    race, and dependent tables cascade on delete.
    """
    
    def __init__(self, db: DatabaseConnection, table: str = "tenants"):
        self._db = db
        self._table = table
    
    @database_error_handler("create tenant")
    async def create(self, tenant: Tenant) -> Tenant:
        now = utc_now()
        try:
            row = await self._db.fetch_one(
                f"""
                INSERT INTO {self._table} (
                    id, owner_id, name, base_currency, fiscal_year_start, fiscal_year_end,
                    modules, bundle_id, subscription_plan, country, description,
                    contact_email, logo_url, created_at, updated_at
                ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $14)
                RETURNING *
                """,
                tenant.id, tenant.owner_id, tenant.name, tenant.base_currency,
                tenant.fiscal_year_start, tenant.fiscal_year_end, list(tenant.modules),
                tenant.bundle_id, tenant.subscription_plan, tenant.country, tenant.description,
                tenant.contact_email, tenant.logo_url, now,
            )
        except asyncpg.UniqueViolationError as e:
            raise TenantAlreadyExistsError(
                f"Tenant '{tenant.name}' already exists for owner {tenant.owner_id}",
                details={
                    "owner_id": tenant.owner_id,
                    "name": tenant.name,
                    "constraint": getattr(e, "constraint_name", None),
                },
            )
        logger.info(f"Created tenant {tenant.id}")
        return self._map_row_to_tenant(row)
    
    @database_error_handler("get tenant")
    async def get(self, tenant_id: str) -> Optional[Tenant]:
        row = await self._db.fetch_one(f"SELECT * FROM {self._table} WHERE id = $1", tenant_id)
        return self._map_row_to_tenant(row) if row else None
    
    @database_error_handler("find tenant by name")
    async def find_by_name_and_owner(self, name: str, owner_id: str) -> Optional[Tenant]:
        row = await self._db.fetch_one(
            f"SELECT * FROM {self._table} WHERE owner_id = $1 AND name = $2",
            owner_id, name,
        )
        return self._map_row_to_tenant(row) if row else None
    
    @database_error_handler("list tenants for owner")
    async def list_for_owner(self, owner_id: str) -> List[Tenant]:
        rows = await self._db.fetch_all(
            f"SELECT * FROM {self._table} WHERE owner_id = $1 ORDER BY created_at DESC",
            owner_id,
        )
        return [self._map_row_to_tenant(row) for row in rows]
    
    @database_error_handler("update tenant")
    async def update(self, tenant_id: str, changes: Dict[str, Any]) -> Optional[Tenant]:
        unknown = set(changes) - set(UPDATABLE_COLUMNS)
        if unknown:
            raise ValidationError(f"Tenant fields cannot be updated: {', '.join(sorted(unknown))}")
        if not changes:
            return await self.get(tenant_id)
        
        columns = list(changes)
        assignments = ", ".join(f"{column} = ${index + 2}" for index, column in enumerate(columns))
        try:
            row = await self._db.fetch_one(
                f"""
                UPDATE {self._table}
                SET {assignments}, updated_at = ${len(columns) + 2}
                WHERE id = $1
                RETURNING *
                """,
                tenant_id, *[changes[column] for column in columns], utc_now(),
            )
        except asyncpg.UniqueViolationError:
            raise TenantAlreadyExistsError(
                f"Tenant '{changes.get('name')}' already exists for this owner",
                details={"tenant_id": tenant_id, "name": changes.get("name")},
            )
        return self._map_row_to_tenant(row) if row else None
    
    @database_error_handler("delete tenant")
    async def delete(self, tenant_id: str) -> bool:
        status = await self._db.execute(f"DELETE FROM {self._table} WHERE id = $1", tenant_id)
        deleted = affected_rows(status) > 0
        if deleted:
            logger.info(f"Deleted tenant {tenant_id}")
        return deleted
    
    def _map_row_to_tenant(self, row: Dict[str, Any]) -> Tenant:
        """Map database row to Tenant entity."""
        return Tenant(
            id=row["id"],
            owner_id=row["owner_id"],
            name=row["name"],
            base_currency=row["base_currency"],
            fiscal_year_start=row["fiscal_year_start"],
            fiscal_year_end=row["fiscal_year_end"],
            modules=list(row.get("modules") or []),
            bundle_id=row.get("bundle_id"),
            subscription_plan=row.get("subscription_plan"),
            country=row.get("country"),
            description=row.get("description"),
            contact_email=row.get("contact_email"),
            logo_url=row.get("logo_url"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


class AsyncPGTenantSettingsRepository:
    """Tenant settings in the ``tenant_settings`` table."""
    
    def __init__(self, db: DatabaseConnection, table: str = "tenant_settings"):
        self._db = db
        self._table = table
    
    @database_error_handler("save tenant settings")
    async def save(self, settings: TenantSettings) -> TenantSettings:
        row = await self._db.fetch_one(
            f"""
            INSERT INTO {self._table} (tenant_id, timezone, date_format, language, ui_mode, extra, created_at, updated_at)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $7)
            ON CONFLICT (tenant_id) DO UPDATE SET
                timezone = EXCLUDED.timezone, date_format = EXCLUDED.date_format,
                language = EXCLUDED.language, ui_mode = EXCLUDED.ui_mode,
                extra = EXCLUDED.extra, updated_at = EXCLUDED.updated_at
            RETURNING *
            """,
            settings.tenant_id, settings.timezone, settings.date_format, settings.language,
            settings.ui_mode, dict(settings.extra), utc_now(),
        )
        return self._map_row_to_settings(row)
    
    @database_error_handler("get tenant settings")
    async def get(self, tenant_id: str) -> Optional[TenantSettings]:
        row = await self._db.fetch_one(f"SELECT * FROM {self._table} WHERE tenant_id = $1", tenant_id)
        return self._map_row_to_settings(row) if row else None
    
    @database_error_handler("delete tenant settings")
    async def delete_for_tenant(self, tenant_id: str) -> int:
        status = await self._db.execute(f"DELETE FROM {self._table} WHERE tenant_id = $1", tenant_id)
        return affected_rows(status)
    
    def _map_row_to_settings(self, row: Dict[str, Any]) -> TenantSettings:
        return TenantSettings(
            tenant_id=row["tenant_id"],
            timezone=row["timezone"],
            date_format=row["date_format"],
            language=row["language"],
            ui_mode=row["ui_mode"],
            extra=dict(row.get("extra") or {}),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


class AsyncPGTemplateRepository:
    """Document templates in the ``document_templates`` table."""
    
    def __init__(self, db: DatabaseConnection, table: str = "document_templates"):
        self._db = db
        self._table = table
    
    @database_error_handler("list system templates")
    async def list_system_templates(self) -> List[DocumentTemplate]:
        rows = await self._db.fetch_all(
            f"SELECT * FROM {self._table} WHERE tenant_id IS NULL ORDER BY code"
        )
        return [self._map_row_to_template(row) for row in rows]
    
    @database_error_handler("list tenant templates")
    async def list_for_tenant(self, tenant_id: str) -> List[DocumentTemplate]:
        rows = await self._db.fetch_all(
            f"SELECT * FROM {self._table} WHERE tenant_id = $1 ORDER BY code",
            tenant_id,
        )
        return [self._map_row_to_template(row) for row in rows]
    
    @database_error_handler("create template")
    async def create(self, template: DocumentTemplate) -> DocumentTemplate:
        row = await self._db.fetch_one(
            f"""
            INSERT INTO {self._table} (id, tenant_id, code, name, payload, created_at)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING *
            """,
            template.id, template.tenant_id, template.code, template.name,
            dict(template.payload), template.created_at or utc_now(),
        )
        return self._map_row_to_template(row)
    
    @database_error_handler("delete tenant templates")
    async def delete_for_tenant(self, tenant_id: str) -> int:
        status = await self._db.execute(f"DELETE FROM {self._table} WHERE tenant_id = $1", tenant_id)
        return affected_rows(status)
    
    def _map_row_to_template(self, row: Dict[str, Any]) -> DocumentTemplate:
        return DocumentTemplate(
            id=row["id"],
            code=row["code"],
            name=row["name"],
            tenant_id=row.get("tenant_id"),
            payload=dict(row.get("payload") or {}),
            created_at=row.get("created_at"),
        )
