"""
Webhook Auth
============
Shared-secret authentication for inbound content webhooks: API key,
millisecond timestamp freshness, HMAC-SHA256 body signature and replay
protection.
"""

__version__ = "0.1.0"

from .models import (
    AuthDecision,
    AuthResult,
    Credentials,
    IncomingRequest,
    RejectReason,
    TimestampWindow,
    mask_secret,
)
from .clock import ClockSource, FrozenClock, SystemClock
from .exceptions import ConfigurationError, TimestampFormatError, WebhookAuthError
from .signature import (
    compute_signature,
    verify_signature,
    SIGNATURE_ALGORITHM,
)
from .timestamps import parse_timestamp, is_fresh, MAX_TIMESTAMP_MS
from .replay_guard import ReplayGuard, InMemoryReplayGuard
from .authenticator import RequestAuthenticator
from .errors import (
    classify,
    reason_message,
    REASON_MESSAGES,
    UNAUTHORIZED_STATUS,
    MALFORMED_REQUEST_STATUS,
)
from .headers import create_signed_headers, extract_incoming_request
from .config import WebhookAuthSettings, load_credentials
from .middleware import (
    SignedWebhookMiddleware,
    WebhookUnauthorized,
    register_exception_handler,
    require_signed_webhook,
)
from .router import create_webhook_router

__all__ = [
    # Models
    "AuthDecision",
    "AuthResult",
    "Credentials",
    "IncomingRequest",
    "RejectReason",
    "TimestampWindow",
    "mask_secret",
    # Clock
    "ClockSource",
    "FrozenClock",
    "SystemClock",
    # Exceptions
    "ConfigurationError",
    "TimestampFormatError",
    "WebhookAuthError",
    # Signature
    "compute_signature",
    "verify_signature",
    "SIGNATURE_ALGORITHM",
    # Timestamps
    "parse_timestamp",
    "is_fresh",
    "MAX_TIMESTAMP_MS",
    # Replay Guard
    "ReplayGuard",
    "InMemoryReplayGuard",
    # Authenticator
    "RequestAuthenticator",
    # Errors
    "classify",
    "reason_message",
    "REASON_MESSAGES",
    "UNAUTHORIZED_STATUS",
    "MALFORMED_REQUEST_STATUS",
    # Headers
    "create_signed_headers",
    "extract_incoming_request",
    # Config
    "WebhookAuthSettings",
    "load_credentials",
    # Web integration
    "SignedWebhookMiddleware",
    "WebhookUnauthorized",
    "register_exception_handler",
    "require_signed_webhook",
    "create_webhook_router",
]
