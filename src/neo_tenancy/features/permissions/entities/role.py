"""Role domain entity for the permissions feature.

A role is tenant-scoped. Its effective permission set is derived from the
explicit grants plus every permission contributed by its module bundles,
and is stored on the role as a cache that the resolver must refresh after
every change to either input.
"""

from datetime import datetime
from typing import List, Optional
from dataclasses import dataclass, field


@dataclass
class Role:
    """Domain entity representing a tenant role."""
    
    tenant_id: str
    id: str
    name: str
    description: Optional[str] = None
    explicit_permissions: List[str] = field(default_factory=list)
    module_bundles: List[str] = field(default_factory=list)
    resolved_permissions: List[str] = field(default_factory=list)
    resolved_at: Optional[datetime] = None
    is_system: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    @property
    def is_resolved(self) -> bool:
        """True once a resolution pass has stored the derived set."""
        return self.resolved_at is not None
    
    def __str__(self) -> str:
        return f"Role({self.tenant_id}/{self.id})"
