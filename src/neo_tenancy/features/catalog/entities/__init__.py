"""Catalog entities."""

from .definitions import (
    PermissionDefinition,
    ModulePermissionDefinition,
    ModuleDescriptor,
    ModuleBundle,
)
from .registry import ModuleRegistry
from .protocols import PermissionCatalog

__all__ = [
    "PermissionDefinition",
    "ModulePermissionDefinition",
    "ModuleDescriptor",
    "ModuleBundle",
    "ModuleRegistry",
    "PermissionCatalog",
]
