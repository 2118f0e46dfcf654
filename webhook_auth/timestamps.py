"""
Timestamp Validation
====================
Parsing and freshness checks for the x-timestamp header.
"""

from .exceptions import TimestampFormatError
from .models import TimestampWindow

# 9999-12-31T23:59:59.999Z
MAX_TIMESTAMP_MS = 253402300799999
_MAX_DIGITS = len(str(MAX_TIMESTAMP_MS))


def parse_timestamp(header: object) -> int:
    """
    Parse an x-timestamp header into epoch milliseconds.

    Only plain ASCII decimal digits are accepted: no sign, whitespace,
    decimal point or exponent.

    Raises:
        TimestampFormatError: if the value is not a valid timestamp
    """
    if not isinstance(header, str) or not header:
        raise TimestampFormatError("timestamp must be a non-empty string", header)
    if not (header.isascii() and header.isdigit()):
        raise TimestampFormatError("timestamp must contain only decimal digits", header)
    if len(header.lstrip("0")) > _MAX_DIGITS:
        raise TimestampFormatError("timestamp out of range", header)

    value = int(header)
    if value > MAX_TIMESTAMP_MS:
        raise TimestampFormatError("timestamp out of range", header)
    return value


def is_fresh(timestamp_ms: int, now_ms: int, window: TimestampWindow) -> bool:
    """
    Check if timestamp is within the allowed skew of now.

    The window is symmetric and closed: a difference exactly equal to
    max_skew_ms is accepted.
    """
    return abs(now_ms - timestamp_ms) <= window.max_skew_ms
