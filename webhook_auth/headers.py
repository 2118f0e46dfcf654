"""
Header Functions
================
Functions for creating and parsing webhook security headers.
"""

from typing import Dict, Mapping, Optional, Union

from .clock import ClockSource, SystemClock
from .models import Credentials, IncomingRequest
from .signature import compute_signature

API_KEY_HEADER = "x-api-key"
TIMESTAMP_HEADER = "x-timestamp"
SIGNATURE_HEADER = "x-signature"


def _get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is not None:
        return value
    # Plain dicts are case-sensitive; starlette Headers already are not
    for key, candidate in headers.items():
        if key.lower() == name:
            return candidate
    return None


def extract_incoming_request(
    headers: Mapping[str, str],
    raw_body: Union[bytes, bytearray] = b"",
) -> IncomingRequest:
    """
    Build an IncomingRequest from request headers and the raw body.

    Header names are matched case-insensitively.
    """
    return IncomingRequest(
        api_key=_get_header(headers, API_KEY_HEADER),
        timestamp=_get_header(headers, TIMESTAMP_HEADER),
        signature=_get_header(headers, SIGNATURE_HEADER),
        raw_body=bytes(raw_body),
    )


def create_signed_headers(
    credentials: Credentials,
    raw_body: Union[bytes, str] = b"",
    clock: Optional[ClockSource] = None,
    content_type: str = "application/json",
) -> Dict[str, str]:
    """
    Create headers for a signed webhook request.

    The body must be sent exactly as passed here, since the signature
    covers its bytes.

    Args:
        credentials: API key and shared secret of the publisher
        raw_body: Request body to be sent
        clock: Source of the timestamp; defaults to the system clock
        content_type: Content-Type header value

    Returns:
        Dictionary of headers to include in request
    """
    clock = clock or SystemClock()
    timestamp = str(clock.now_ms())
    signature = compute_signature(credentials.shared_secret, timestamp, raw_body)

    return {
        "content-type": content_type,
        API_KEY_HEADER: credentials.api_key,
        TIMESTAMP_HEADER: timestamp,
        SIGNATURE_HEADER: signature,
    }
