"""Modules feature: per-tenant module installations and activation."""

from .entities import ModuleInstallation, IMPLICIT_FLAG, ModuleInstallationRepository
from .repositories import InMemoryModuleInstallationRepository, AsyncPGModuleInstallationRepository
from .services import ModuleActivationService

__all__ = [
    "ModuleInstallation",
    "IMPLICIT_FLAG",
    "ModuleInstallationRepository",
    "InMemoryModuleInstallationRepository",
    "AsyncPGModuleInstallationRepository",
    "ModuleActivationService",
]
