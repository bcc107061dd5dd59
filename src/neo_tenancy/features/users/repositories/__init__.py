"""Users repositories."""

from .memory_user_directory import InMemoryUserDirectory
from .user_directory import AsyncPGUserDirectory

__all__ = [
    "InMemoryUserDirectory",
    "AsyncPGUserDirectory",
]
