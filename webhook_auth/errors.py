"""
Error Classification
====================
Maps authentication results to the caller-facing status and error body.
"""

from typing import Any, Dict, Tuple

from pydantic import BaseModel

from .models import AuthResult, RejectReason

UNAUTHORIZED_STATUS = 401
MALFORMED_REQUEST_STATUS = 400

REASON_MESSAGES: Dict[RejectReason, str] = {
    RejectReason.MISSING_HEADERS: (
        "Missing required security headers (x-api-key, x-timestamp, x-signature)"
    ),
    RejectReason.INVALID_API_KEY: "Invalid API key",
    RejectReason.INVALID_TIMESTAMP_FORMAT: "Invalid timestamp format",
    RejectReason.EXPIRED: "Request expired",
    RejectReason.INVALID_SIGNATURE: "Invalid signature",
    RejectReason.REPLAY_SIGNATURE_REUSED: "Signature already used",
}


class ErrorBody(BaseModel):
    error: str
    details: str


def reason_message(reason_code: RejectReason) -> str:
    """Caller-facing text for a rejection reason."""
    return REASON_MESSAGES[RejectReason(reason_code)]


def classify(result: AuthResult) -> Tuple[int, Dict[str, Any]]:
    """
    Map a rejected AuthResult to (status_code, json_body).

    Raises:
        ValueError: if the result is not a rejection
    """
    if result.ok or result.reason_code is None:
        raise ValueError("only rejected results can be classified")

    body = ErrorBody(error="Unauthorized", details=reason_message(result.reason_code))
    return UNAUTHORIZED_STATUS, body.model_dump()
