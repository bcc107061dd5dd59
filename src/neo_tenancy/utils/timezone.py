"""Timezone utilities for neo-tenancy."""

from datetime import date, datetime, timezone
from typing import Tuple


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone awareness.
    
    Returns:
        Current UTC datetime with timezone info
    """
    return datetime.now(timezone.utc)


def calendar_year_bounds(year: int) -> Tuple[date, date]:
    """First and last day of a calendar year."""
    return date(year, 1, 1), date(year, 12, 31)
