"""HTTP status code mapping for exceptions."""

from typing import Dict, Type

from .domain import (
    ConfigurationError,
    ValidationError,
    ConflictError,
    NotFoundError,
    AuthorizationError,
    TenantProvisioningError,
    RollbackError,
)
from .infrastructure import DatabaseError, CacheError, StoreTimeoutError


HTTP_STATUS_MAP: Dict[Type[Exception], int] = {
    # 400 Bad Request
    ValidationError: 400,
    
    # 403 Forbidden
    AuthorizationError: 403,
    
    # 404 Not Found
    NotFoundError: 404,
    
    # 409 Conflict
    ConflictError: 409,
    
    # 500 Internal Server Error
    ConfigurationError: 500,
    TenantProvisioningError: 500,
    RollbackError: 500,
    DatabaseError: 500,
    CacheError: 500,
    
    # 504 Gateway Timeout
    StoreTimeoutError: 504,
}


def get_http_status_code(exception: Exception) -> int:
    """Resolve the status code by walking the exception's MRO."""
    for klass in type(exception).__mro__:
        if klass in HTTP_STATUS_MAP:
            return HTTP_STATUS_MAP[klass]
    return 500
