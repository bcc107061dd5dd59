"""Memberships feature: user-to-role assignments inside a tenant."""

from .entities import Membership, MembershipRepository
from .repositories import InMemoryMembershipRepository, AsyncPGMembershipRepository
from .services import MembershipService

__all__ = [
    "Membership",
    "MembershipRepository",
    "InMemoryMembershipRepository",
    "AsyncPGMembershipRepository",
    "MembershipService",
]
