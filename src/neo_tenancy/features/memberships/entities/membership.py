"""Membership domain entity: one user's access to one tenant."""

from datetime import datetime
from typing import Optional
from dataclasses import dataclass


@dataclass
class Membership:
    """Links a user to a tenant through exactly one role.
    
    The owner membership's role is never reassigned, and a disabled
    membership keeps its role but fails every non-owner authorization check.
    """
    
    tenant_id: str
    user_id: str
    role_id: str
    is_owner: bool = False
    is_disabled: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    @property
    def is_active(self) -> bool:
        return not self.is_disabled
