"""Domain-specific exceptions for neo-tenancy.

Validation, conflict, not-found and forbidden errors propagate to the caller
unchanged. Provisioning failures are wrapped in TenantProvisioningError once
the saga has attempted its rollback.
"""

from typing import Any, Dict, List, Optional

from .base import NeoTenancyError


# Configuration Errors
class ConfigurationError(NeoTenancyError):
    """Raised when there's a configuration issue."""
    pass


# Validation Errors
class ValidationError(NeoTenancyError):
    """Raised when input is missing or malformed."""
    pass


class UnknownBundleError(ValidationError):
    """Raised when a requested module bundle does not exist."""
    pass


class UnknownModuleError(ValidationError):
    """Raised when a module code is not in the module registry."""
    pass


class DependencyCycleError(ValidationError):
    """Raised when the module dependency table contains a cycle."""
    pass


# Conflict Errors
class ConflictError(NeoTenancyError):
    """Raised when a write collides with existing state."""
    pass


class TenantAlreadyExistsError(ConflictError):
    """Raised when the creator already owns a tenant with the same name."""
    pass


class RoleAlreadyExistsError(ConflictError):
    """Raised when a role id is already taken inside a tenant."""
    pass


class MembershipAlreadyExistsError(ConflictError):
    """Raised when a user already has a membership in a tenant."""
    pass


class ModuleAlreadyInstalledError(ConflictError):
    """Raised when an installation record already exists."""
    pass


# Not Found Errors
class NotFoundError(NeoTenancyError):
    """Base class for missing records."""
    pass


class TenantNotFoundError(NotFoundError):
    """Raised when tenant is not found."""
    pass


class RoleNotFoundError(NotFoundError):
    """Raised when role is not found."""
    pass


class MembershipNotFoundError(NotFoundError):
    """Raised when a user has no membership in a tenant."""
    pass


class ModuleInstallationNotFoundError(NotFoundError):
    """Raised when a module is not installed for a tenant."""
    pass


# Authorization Errors
class AuthorizationError(NeoTenancyError):
    """Base class for forbidden operations."""
    pass


class PermissionDeniedError(AuthorizationError):
    """Raised when an actor lacks the required permission."""
    pass


class ProtectedOperationError(AuthorizationError):
    """Raised for operations that are never allowed.
    
    Deleting a system role, deleting a role that still has assignees and
    disabling, reassigning or removing an owner membership.
    """
    pass


# Provisioning Errors
class RollbackError(NeoTenancyError):
    """A single compensating action that failed during saga rollback."""
    
    def __init__(self, step: str, cause: BaseException):
        super().__init__(
            f"Compensation '{step}' failed: {cause}",
            details={"step": step, "cause": str(cause)},
        )
        self.step = step
        self.cause = cause


class TenantProvisioningError(NeoTenancyError):
    """Raised when tenant creation failed and rollback was attempted.
    
    The triggering error is chained as ``__cause__``. When any compensation
    failed, ``rollback_succeeded`` is False and ``rollback_errors`` lists
    them; an operator has to reconcile the leftover state.
    """
    
    def __init__(
        self,
        message: str,
        rollback_errors: Optional[List[RollbackError]] = None,
        completed_steps: Optional[List[str]] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.rollback_errors = list(rollback_errors or [])
        self.completed_steps = list(completed_steps or [])
        merged = {
            "rollback_succeeded": not self.rollback_errors,
            "failed_compensations": [err.step for err in self.rollback_errors],
            "completed_steps": self.completed_steps,
        }
        merged.update(details or {})
        super().__init__(message, details=merged)
    
    @property
    def rollback_succeeded(self) -> bool:
        """True when every compensation ran without error."""
        return not self.rollback_errors
