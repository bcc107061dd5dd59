"""Base exceptions for neo-tenancy.

All exceptions inherit from NeoTenancyError and carry an error code, a
details mapping and, through http_mapping, an HTTP status code for callers
that adapt the core to a web transport.
"""

from typing import Any, Dict, Optional


class NeoTenancyError(Exception):
    """Base exception for all neo-tenancy errors."""
    
    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for exception.
    
    Args:
        exception: The exception instance
        
    Returns:
        HTTP status code
    """
    from .http_mapping import get_http_status_code as _get_status_code
    return _get_status_code(exception)


def create_error_response(exception: NeoTenancyError) -> Dict[str, Any]:
    """Create standardized error response from exception.
    
    Args:
        exception: The neo-tenancy exception
        
    Returns:
        Error response dictionary
    """
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }
