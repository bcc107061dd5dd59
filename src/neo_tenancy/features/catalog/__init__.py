"""Catalog feature: module registry, bundles and permission definitions."""

from .entities import (
    PermissionDefinition,
    ModulePermissionDefinition,
    ModuleDescriptor,
    ModuleBundle,
    ModuleRegistry,
    PermissionCatalog,
)
from .repositories import StaticPermissionCatalog, AsyncPGPermissionCatalog
from .defaults import (
    ADMIN_MODULE,
    DEFAULT_MODULES,
    DEFAULT_BUNDLES,
    DEFAULT_DEPENDENCIES,
    DEFAULT_PERMISSION_DEFINITIONS,
    build_default_registry,
    build_default_catalog,
)

__all__ = [
    "PermissionDefinition",
    "ModulePermissionDefinition",
    "ModuleDescriptor",
    "ModuleBundle",
    "ModuleRegistry",
    "PermissionCatalog",
    "StaticPermissionCatalog",
    "AsyncPGPermissionCatalog",
    "ADMIN_MODULE",
    "DEFAULT_MODULES",
    "DEFAULT_BUNDLES",
    "DEFAULT_DEPENDENCIES",
    "DEFAULT_PERMISSION_DEFINITIONS",
    "build_default_registry",
    "build_default_catalog",
]
