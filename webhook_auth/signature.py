"""
Signature Functions
===================
HMAC signature computation and verification over the canonical signing
string: the x-timestamp header value immediately followed by the raw body.
"""

import hmac
import hashlib
from typing import Union

SIGNATURE_ALGORITHM = "sha256"
SIGNATURE_HEX_LENGTH = 64
_HEX_DIGITS = frozenset("0123456789abcdef")

BytesLike = Union[bytes, bytearray, str]


def _to_bytes(value: BytesLike) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def canonical_message(timestamp: str, raw_body: BytesLike) -> bytes:
    """Build the exact byte sequence that gets signed."""
    return timestamp.encode("utf-8") + _to_bytes(raw_body)


def compute_signature(
    secret: BytesLike,
    timestamp: str,
    raw_body: BytesLike,
) -> str:
    """
    Compute HMAC-SHA256 signature for a webhook request.

    The signature covers:
    - Timestamp header value (epoch milliseconds, as sent)
    - Raw request body bytes

    Args:
        secret: Shared secret
        timestamp: x-timestamp header value
        raw_body: Request body exactly as received

    Returns:
        Lowercase hex-encoded HMAC-SHA256 signature (64 chars)
    """
    return hmac.new(
        _to_bytes(secret),
        canonical_message(timestamp, raw_body),
        hashlib.sha256,
    ).hexdigest()


def is_well_formed_signature(value: object) -> bool:
    """True if value looks like a lowercase 64-char hex digest."""
    return (
        isinstance(value, str)
        and len(value) == SIGNATURE_HEX_LENGTH
        and all(ch in _HEX_DIGITS for ch in value)
    )


def verify_signature(
    secret: BytesLike,
    timestamp: str,
    raw_body: BytesLike,
    provided_signature: object,
) -> bool:
    """
    Verify request signature using constant-time comparison.

    Never raises. Malformed input (wrong length, upper-case or non-hex
    characters, non-string values) simply fails verification.

    Args:
        secret: Shared secret
        timestamp: x-timestamp header value
        raw_body: Request body exactly as received
        provided_signature: x-signature header value

    Returns:
        True if signature is valid
    """
    if not isinstance(timestamp, str):
        return False
    if not is_well_formed_signature(provided_signature):
        return False
    expected_signature = compute_signature(secret, timestamp, raw_body)
    return hmac.compare_digest(
        expected_signature.encode("ascii"),
        provided_signature.encode("ascii"),
    )
