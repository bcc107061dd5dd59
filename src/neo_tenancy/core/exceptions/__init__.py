"""Exceptions module for neo-tenancy.

Complete exception hierarchy, organized by domain concerns and
infrastructure concerns.
"""

from .base import (
    NeoTenancyError,
    get_http_status_code,
    create_error_response,
)

from .domain import (
    # Configuration Errors
    ConfigurationError,
    
    # Validation Errors
    ValidationError,
    UnknownBundleError,
    UnknownModuleError,
    DependencyCycleError,
    
    # Conflict Errors
    ConflictError,
    TenantAlreadyExistsError,
    RoleAlreadyExistsError,
    MembershipAlreadyExistsError,
    ModuleAlreadyInstalledError,
    
    # Not Found Errors
    NotFoundError,
    TenantNotFoundError,
    RoleNotFoundError,
    MembershipNotFoundError,
    ModuleInstallationNotFoundError,
    
    # Authorization Errors
    AuthorizationError,
    PermissionDeniedError,
    ProtectedOperationError,
    
    # Provisioning Errors
    RollbackError,
    TenantProvisioningError,
)

from .infrastructure import (
    DatabaseError,
    CacheError,
    StoreTimeoutError,
)

__all__ = [
    "NeoTenancyError",
    "get_http_status_code",
    "create_error_response",
    "ConfigurationError",
    "ValidationError",
    "UnknownBundleError",
    "UnknownModuleError",
    "DependencyCycleError",
    "ConflictError",
    "TenantAlreadyExistsError",
    "RoleAlreadyExistsError",
    "MembershipAlreadyExistsError",
    "ModuleAlreadyInstalledError",
    "NotFoundError",
    "TenantNotFoundError",
    "RoleNotFoundError",
    "MembershipNotFoundError",
    "ModuleInstallationNotFoundError",
    "AuthorizationError",
    "PermissionDeniedError",
    "ProtectedOperationError",
    "RollbackError",
    "TenantProvisioningError",
    "DatabaseError",
    "CacheError",
    "StoreTimeoutError",
]
