"""Database feature: asyncpg connection wrapper and schema."""

from .connection import DatabaseConnection, affected_rows
from .error_handling import database_error_handler
from .schema import SCHEMA_SQL, apply_schema

__all__ = [
    "DatabaseConnection",
    "affected_rows",
    "database_error_handler",
    "SCHEMA_SQL",
    "apply_schema",
]
