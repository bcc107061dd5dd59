"""Modules services."""

from .module_activation_service import ModuleActivationService

__all__ = ["ModuleActivationService"]
