"""Constants and enums for neo-tenancy.

Fixed identifiers, lifecycle states and key patterns shared by the
permission, module and tenant features.
"""

from enum import Enum
from typing import Final


WILDCARD_PERMISSION: Final[str] = "*"
PERMISSION_SEPARATOR: Final[str] = "."
TENANT_ID_PREFIX: Final[str] = "cmp"
ROLE_ID_PREFIX: Final[str] = "role"


class SystemRoleId(str, Enum):
    """Fixed ids of the roles seeded into every tenant."""
    
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class InitializationStatus(str, Enum):
    """Module installation initialization status."""
    
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class SagaState(str, Enum):
    """Tenant provisioning saga states."""
    
    NOT_STARTED = "not_started"
    TENANT_CREATED = "tenant_created"
    ROLES_CREATED = "roles_created"
    MEMBERSHIP_ASSIGNED = "membership_assigned"
    MODULES_CREATED = "modules_created"
    COMPLETE = "complete"
    ROLLING_BACK = "rolling_back"
    FAILED = "failed"
    
    @property
    def is_terminal(self) -> bool:
        return self in (SagaState.COMPLETE, SagaState.FAILED)


class EnsureOutcome(str, Enum):
    """Result of ensuring a module installation exists."""
    
    CREATED = "created"
    PROMOTED = "promoted"
    UNCHANGED = "unchanged"


class DecisionReason(str, Enum):
    """Why an authorization check allowed or denied."""
    
    GLOBAL_ADMIN = "global_admin"
    NO_MEMBERSHIP = "no_membership"
    OWNER = "owner"
    MEMBERSHIP_DISABLED = "membership_disabled"
    ROLE_NOT_FOUND = "role_not_found"
    NO_PERMISSIONS = "no_permissions"
    PERMISSION_GRANTED = "permission_granted"
    PERMISSION_MISSING = "permission_missing"


class CacheKeys:
    """Cache key patterns for Redis."""
    
    ROLE_PERMISSIONS: Final[str] = "tenancy:{tenant_id}:role:{role_id}:permissions"


class CacheTTL:
    """Cache TTL values in seconds."""
    
    ROLE_PERMISSIONS: Final[int] = 300       # 5 minutes


class Headers:
    """Request headers read by the route guards."""
    
    TENANT_ID: Final[str] = "X-Tenant-ID"
    USER_ID: Final[str] = "X-User-ID"
