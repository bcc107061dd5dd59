"""Module installation entity, keyed by (tenant, module code)."""

from datetime import datetime
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from ....config.constants import InitializationStatus


IMPLICIT_FLAG = "isImplicit"


@dataclass
class ModuleInstallation:
    """A module installed into a tenant.
    
    ``config["isImplicit"]`` marks installs that exist only because another
    module depends on them. Promotion to explicit flips the flag in place.
    """
    
    tenant_id: str
    module_code: str
    initialized: bool = False
    initialization_status: InitializationStatus = InitializationStatus.PENDING
    config: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    def __post_init__(self):
        if not isinstance(self.initialization_status, InitializationStatus):
            self.initialization_status = InitializationStatus(self.initialization_status)
    
    @property
    def is_implicit(self) -> bool:
        return bool(self.config.get(IMPLICIT_FLAG, False))
