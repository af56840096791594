"""Reference Generator - human-readable booking references

References look like ``YTR-M2K9ZQ1A-7FQ0X3LB``: a fixed prefix, the creation
time in base 36 (millisecond resolution) and a random base-36 suffix. The
timestamp part makes references roughly sortable for support lookups; the
suffix keeps bookings created in the same millisecond apart. Collisions are
possible in theory (36**8 suffixes per millisecond) and are caught by the
repository's uniqueness check at insert time.
"""
import secrets
import string
from datetime import datetime, timezone
from typing import Optional

DEFAULT_PREFIX = "YTR"
SUFFIX_LENGTH = 8

BASE36_ALPHABET = string.digits + string.ascii_uppercase


def to_base36(number: int) -> str:
    if number < 0:
        raise ValueError("Cannot encode negative numbers")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_booking_reference(now: Optional[datetime] = None, prefix: str = DEFAULT_PREFIX) -> str:
    """Mint a new booking reference"""
    now = now or datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{prefix}-{to_base36(millis)}-{suffix}".upper()
