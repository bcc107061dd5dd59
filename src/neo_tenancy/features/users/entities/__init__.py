"""Users entities."""

from .protocols import UserDirectory

__all__ = ["UserDirectory"]
