"""Permission matching rules.

A held permission grants a required one when it is the wildcard, equal to
it, or a dotted ancestor of it. Matching is case-sensitive and works on
whole segments: ``accounting.vouchers`` grants ``accounting.vouchers.approve``
but not ``accounting.voucherstypes.list``.
"""

from typing import Iterable, Optional

from ....config.constants import WILDCARD_PERMISSION, PERMISSION_SEPARATOR


def permission_matches(held: str, required: str) -> bool:
    """Check whether a single held permission grants ``required``."""
    if held == WILDCARD_PERMISSION:
        return True
    if held == required:
        return True
    return bool(held) and required.startswith(held + PERMISSION_SEPARATOR)


def find_matching_permission(held: Iterable[str], required: str) -> Optional[str]:
    """Return the first held permission that grants ``required``, if any."""
    for permission in held:
        if permission_matches(permission, required):
            return permission
    return None
