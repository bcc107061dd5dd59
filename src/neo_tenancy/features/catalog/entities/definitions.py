"""Catalog entries for modules, bundles and module permissions.

All of these are immutable configuration, loaded once per process and
passed to the services that need them.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ....core.exceptions import ValidationError


@dataclass(frozen=True)
class PermissionDefinition:
    """A single dotted, hierarchical permission id owned by one module."""
    
    id: str
    label: str
    enabled: Optional[bool] = True
    
    def __post_init__(self):
        if not self.id or self.id.startswith(".") or self.id.endswith(".") or ".." in self.id:
            raise ValidationError(f"Invalid permission id: {self.id!r}")
    
    @property
    def is_enabled(self) -> bool:
        """Only an explicit ``False`` disables a permission."""
        return self.enabled is not False


@dataclass(frozen=True)
class ModulePermissionDefinition:
    """The permission set a module contributes when attached to a role."""
    
    module_id: str
    permissions: Tuple[PermissionDefinition, ...] = ()
    
    def enabled_permission_ids(self) -> List[str]:
        return [p.id for p in self.permissions if p.is_enabled]


@dataclass(frozen=True)
class ModuleDescriptor:
    """Static metadata for an installable module."""
    
    code: str
    name: str
    description: str = ""


@dataclass(frozen=True)
class ModuleBundle:
    """A curated set of modules offered together at tenant creation."""
    
    id: str
    name: str
    modules_included: Tuple[str, ...] = ()
    description: str = ""
    business_domains: Tuple[str, ...] = ()
