"""
Webhook Auth Models
===================
Data models and enums for inbound webhook authentication.
"""

from typing import Optional
from dataclasses import dataclass, field
from enum import Enum

DEFAULT_MAX_SKEW_MS = 5 * 60 * 1000  # 5 minutes


class AuthDecision(str, Enum):
    """Authentication verdict."""
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"


class RejectReason(str, Enum):
    """Closed set of reasons for rejecting a request."""
    MISSING_HEADERS = "missing_headers"
    INVALID_API_KEY = "invalid_api_key"
    INVALID_TIMESTAMP_FORMAT = "invalid_timestamp_format"
    EXPIRED = "expired"
    INVALID_SIGNATURE = "invalid_signature"
    REPLAY_SIGNATURE_REUSED = "replay_signature_reused"


def mask_secret(value: str, visible: int = 4) -> str:
    """Mask a secret for display, keeping only a short prefix."""
    if not value:
        return ""
    return f"{value[:visible]}****"


@dataclass(frozen=True)
class Credentials:
    """Process-wide shared credentials. Never rendered in full."""
    api_key: str
    shared_secret: bytes = field(repr=False)

    def __post_init__(self):
        if isinstance(self.shared_secret, str):
            object.__setattr__(self, "shared_secret", self.shared_secret.encode("utf-8"))

    def __repr__(self) -> str:
        return f"Credentials(api_key={mask_secret(self.api_key)!r}, shared_secret='****')"


@dataclass(frozen=True)
class TimestampWindow:
    """Symmetric tolerance around "now", in milliseconds."""
    max_skew_ms: int = DEFAULT_MAX_SKEW_MS

    def __post_init__(self):
        if self.max_skew_ms < 0:
            raise ValueError("max_skew_ms must be non-negative")


@dataclass(frozen=True)
class IncomingRequest:
    """Security headers and the raw body exactly as received."""
    api_key: Optional[str]
    timestamp: Optional[str]
    signature: Optional[str]
    raw_body: bytes = b""


@dataclass(frozen=True)
class AuthResult:
    """Result of an authentication check."""
    decision: AuthDecision
    reason_code: Optional[RejectReason] = None

    @classmethod
    def authenticated(cls) -> "AuthResult":
        return cls(decision=AuthDecision.AUTHENTICATED)

    @classmethod
    def rejected(cls, reason_code: RejectReason) -> "AuthResult":
        return cls(decision=AuthDecision.REJECTED, reason_code=reason_code)

    @property
    def ok(self) -> bool:
        return self.decision == AuthDecision.AUTHENTICATED
