"""Infrastructure exceptions raised by storage and cache adapters."""

from .base import NeoTenancyError


class DatabaseError(NeoTenancyError):
    """Raised when a database operation fails."""
    pass


class CacheError(NeoTenancyError):
    """Raised when a cache operation fails."""
    pass


class StoreTimeoutError(NeoTenancyError):
    """Raised when a store call exceeds its time budget."""
    pass
