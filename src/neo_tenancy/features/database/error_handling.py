"""Standardized error handling for the asyncpg repositories."""

import functools
import logging
from typing import Any, Callable

from ...core.exceptions import NeoTenancyError, DatabaseError


logger = logging.getLogger(__name__)


def database_error_handler(operation_name: str) -> Callable:
    """Log driver failures and re-raise them as DatabaseError.
    
    Errors that are already part of the neo-tenancy hierarchy (conflicts
    translated from unique violations, for instance) pass through
    untouched.
    
    Usage:
        @database_error_handler("create role")
        async def create(self, role): ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            try:
                return await func(*args, **kwargs)
            except NeoTenancyError:
                raise
            except Exception as e:
                logger.error(f"Failed to {operation_name}: {e}")
                raise DatabaseError(f"Failed to {operation_name}: {e}") from e
        return wrapper
    return decorator
