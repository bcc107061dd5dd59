"""PostgreSQL schema for the asyncpg repositories.

Every tenant-owned table cascades on tenant deletion, which is what the
admin delete path and the last provisioning compensation rely on.
"""

import logging

from .connection import DatabaseConnection


logger = logging.getLogger(__name__)


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS tenants (
    id                  TEXT PRIMARY KEY,
    owner_id            TEXT NOT NULL,
    name                TEXT NOT NULL,
    base_currency       TEXT NOT NULL,
    fiscal_year_start   DATE NOT NULL,
    fiscal_year_end     DATE NOT NULL,
    modules             JSONB NOT NULL DEFAULT '[]'::jsonb,
    bundle_id           TEXT,
    subscription_plan   TEXT,
    country             TEXT,
    description         TEXT,
    contact_email       TEXT,
    logo_url            TEXT,
    created_at          TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at          TIMESTAMPTZ NOT NULL DEFAULT now(),
    CONSTRAINT tenants_owner_name_key UNIQUE (owner_id, name)
);

CREATE TABLE IF NOT EXISTS tenant_settings (
    tenant_id           TEXT PRIMARY KEY REFERENCES tenants(id) ON DELETE CASCADE,
    timezone            TEXT NOT NULL,
    date_format         TEXT NOT NULL,
    language            TEXT NOT NULL,
    ui_mode             TEXT NOT NULL,
    extra               JSONB NOT NULL DEFAULT '{}'::jsonb,
    created_at          TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at          TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS roles (
    tenant_id               TEXT NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
    id                      TEXT NOT NULL,
    name                    TEXT NOT NULL,
    description             TEXT,
    explicit_permissions    JSONB NOT NULL DEFAULT '[]'::jsonb,
    module_bundles          JSONB NOT NULL DEFAULT '[]'::jsonb,
    resolved_permissions    JSONB NOT NULL DEFAULT '[]'::jsonb,
    resolved_at             TIMESTAMPTZ,
    is_system               BOOLEAN NOT NULL DEFAULT false,
    created_at              TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at              TIMESTAMPTZ NOT NULL DEFAULT now(),
    PRIMARY KEY (tenant_id, id)
);

CREATE TABLE IF NOT EXISTS memberships (
    tenant_id       TEXT NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
    user_id         TEXT NOT NULL,
    role_id         TEXT NOT NULL,
    is_owner        BOOLEAN NOT NULL DEFAULT false,
    is_disabled     BOOLEAN NOT NULL DEFAULT false,
    created_at      TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at      TIMESTAMPTZ NOT NULL DEFAULT now(),
    PRIMARY KEY (tenant_id, user_id)
);

CREATE INDEX IF NOT EXISTS memberships_role_idx ON memberships (tenant_id, role_id);

CREATE TABLE IF NOT EXISTS module_installations (
    tenant_id               TEXT NOT NULL REFERENCES tenants(id) ON DELETE CASCADE,
    module_code             TEXT NOT NULL,
    initialized             BOOLEAN NOT NULL DEFAULT false,
    initialization_status   TEXT NOT NULL DEFAULT 'pending'
        CHECK (initialization_status IN ('pending', 'in_progress', 'complete')),
    config                  JSONB NOT NULL DEFAULT '{}'::jsonb,
    created_at              TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at              TIMESTAMPTZ NOT NULL DEFAULT now(),
    PRIMARY KEY (tenant_id, module_code)
);

CREATE TABLE IF NOT EXISTS document_templates (
    id              TEXT PRIMARY KEY,
    tenant_id       TEXT REFERENCES tenants(id) ON DELETE CASCADE,
    code            TEXT NOT NULL,
    name            TEXT NOT NULL,
    payload         JSONB NOT NULL DEFAULT '{}'::jsonb,
    created_at      TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS platform_users (
    id                  TEXT PRIMARY KEY,
    is_global_admin     BOOLEAN NOT NULL DEFAULT false,
    active_tenant_id    TEXT REFERENCES tenants(id) ON DELETE SET NULL,
    updated_at          TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS module_permission_definitions (
    module_id       TEXT NOT NULL,
    permission_id   TEXT NOT NULL,
    label           TEXT NOT NULL,
    enabled         BOOLEAN,
    position        INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (module_id, permission_id)
);
"""


async def apply_schema(db: DatabaseConnection) -> None:
    """Create the tables if they do not exist."""
    await db.execute(SCHEMA_SQL)
    logger.info("Applied neo-tenancy database schema")
