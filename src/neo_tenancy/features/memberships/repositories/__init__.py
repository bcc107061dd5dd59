"""Memberships repositories."""

from .memory_membership_repository import InMemoryMembershipRepository
from .membership_repository import AsyncPGMembershipRepository

__all__ = [
    "InMemoryMembershipRepository",
    "AsyncPGMembershipRepository",
]
