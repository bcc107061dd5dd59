"""Catalog repositories."""

from .static_catalog import StaticPermissionCatalog
from .asyncpg_catalog import AsyncPGPermissionCatalog

__all__ = [
    "StaticPermissionCatalog",
    "AsyncPGPermissionCatalog",
]
