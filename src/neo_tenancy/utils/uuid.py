"""Identifier utilities for neo-tenancy."""

import secrets
import string
import time
import uuid


BASE36_ALPHABET = string.digits + string.ascii_lowercase


def generate_uuid_v7() -> str:
    """
    Generate a UUIDv7 with time-based ordering.
    
    Returns:
        String representation of UUIDv7
    """
    timestamp_bytes = int(time.time() * 1000).to_bytes(6, byteorder='big')
    random_bytes = uuid.uuid4().bytes[6:]
    uuid_bytes = timestamp_bytes + random_bytes
    
    # Version 7 and RFC 4122 variant
    uuid_bytes = uuid_bytes[:6] + bytes([(uuid_bytes[6] & 0x0f) | 0x70]) + uuid_bytes[7:]
    uuid_bytes = uuid_bytes[:8] + bytes([(uuid_bytes[8] & 0x3f) | 0x80]) + uuid_bytes[9:]
    
    return str(uuid.UUID(bytes=uuid_bytes))


def to_base36(value: int) -> str:
    """Encode a non-negative integer in lowercase base36."""
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_short_id(length: int = 6) -> str:
    """
    Generate a short lowercase alphanumeric ID.
    
    Args:
        length: Length of the generated ID
        
    Returns:
        Short alphanumeric string
    """
    return ''.join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def generate_prefixed_id(prefix: str, random_length: int = 6) -> str:
    """Generate ``<prefix>_<base36 ms timestamp>_<random>``, e.g. ``cmp_lx2k9a1b_q8z3mv``."""
    return f"{prefix}_{to_base36(int(time.time() * 1000))}_{generate_short_id(random_length)}"
