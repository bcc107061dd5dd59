"""Modules entities."""

from .installation import ModuleInstallation, IMPLICIT_FLAG
from .protocols import ModuleInstallationRepository

__all__ = [
    "ModuleInstallation",
    "IMPLICIT_FLAG",
    "ModuleInstallationRepository",
]
