"""Users feature: platform user directory (global admins, active tenant)."""

from .entities import UserDirectory
from .repositories import InMemoryUserDirectory, AsyncPGUserDirectory

__all__ = [
    "UserDirectory",
    "InMemoryUserDirectory",
    "AsyncPGUserDirectory",
]
