"""Utilities module for neo-tenancy."""

from .uuid import generate_uuid_v7, generate_short_id, generate_prefixed_id, to_base36
from .timezone import utc_now, calendar_year_bounds

__all__ = [
    # Identifier Generation
    "generate_uuid_v7",
    "generate_short_id",
    "generate_prefixed_id",
    "to_base36",
    # Timezone Utilities
    "utc_now",
    "calendar_year_bounds",
]
