"""Modules repositories."""

from .memory_installation_repository import InMemoryModuleInstallationRepository
from .installation_repository import AsyncPGModuleInstallationRepository

__all__ = [
    "InMemoryModuleInstallationRepository",
    "AsyncPGModuleInstallationRepository",
]
