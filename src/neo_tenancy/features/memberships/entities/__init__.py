"""Memberships entities."""

from .membership import Membership
from .protocols import MembershipRepository

__all__ = [
    "Membership",
    "MembershipRepository",
]
