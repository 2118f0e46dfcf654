"""
Request Authenticator
=====================
Runs the webhook authentication checks in a fixed order and returns a
structured verdict.

Order (first failure wins):
1. all three security headers present
2. API key matches
3. timestamp parses
4. timestamp within the freshness window
5. signature matches the raw body
6. signature not seen before
"""

import hmac
from typing import Optional

import structlog

from .clock import ClockSource, SystemClock
from .exceptions import TimestampFormatError
from .models import (
    AuthResult,
    Credentials,
    IncomingRequest,
    RejectReason,
    TimestampWindow,
    mask_secret,
)
from .replay_guard import InMemoryReplayGuard, ReplayGuard
from .signature import verify_signature
from .timestamps import is_fresh, parse_timestamp

logger = structlog.get_logger(__name__)


def _present(value: Optional[str]) -> bool:
    return isinstance(value, str) and value != ""


class RequestAuthenticator:
    """
    Authenticates inbound webhook requests against shared credentials.

    Args:
        credentials: Expected API key and shared secret
        clock: Source of "now"; defaults to the system clock
        window: Allowed timestamp skew
        replay_guard: Store of used signatures; an in-memory guard is
            created when replay_protection is on and none is supplied
        replay_protection: Set False to rely on the freshness window alone
    """

    def __init__(
        self,
        credentials: Credentials,
        clock: Optional[ClockSource] = None,
        window: Optional[TimestampWindow] = None,
        replay_guard: Optional[ReplayGuard] = None,
        replay_protection: bool = True,
    ):
        self.credentials = credentials
        self.clock = clock or SystemClock()
        self.window = window or TimestampWindow()
        if replay_protection and replay_guard is None:
            replay_guard = InMemoryReplayGuard(clock=self.clock)
        self.replay_guard = replay_guard if replay_protection else None

    def authenticate(self, request: IncomingRequest) -> AuthResult:
        if not (
            _present(request.api_key)
            and _present(request.timestamp)
            and _present(request.signature)
        ):
            return self._reject(RejectReason.MISSING_HEADERS, request)

        if not hmac.compare_digest(
            request.api_key.encode("utf-8"),
            self.credentials.api_key.encode("utf-8"),
        ):
            return self._reject(RejectReason.INVALID_API_KEY, request)

        try:
            timestamp_ms = parse_timestamp(request.timestamp)
        except TimestampFormatError:
            return self._reject(RejectReason.INVALID_TIMESTAMP_FORMAT, request)

        now = self.clock.now_ms()
        if not is_fresh(timestamp_ms, now, self.window):
            return self._reject(
                RejectReason.EXPIRED, request, skew_ms=now - timestamp_ms
            )

        if not verify_signature(
            self.credentials.shared_secret,
            request.timestamp,
            request.raw_body,
            request.signature,
        ):
            return self._reject(RejectReason.INVALID_SIGNATURE, request)

        # Still fresh until the later of now and the claimed time, plus skew
        expires_at_ms = max(now, timestamp_ms) + self.window.max_skew_ms
        if self.replay_guard is not None and not self.replay_guard.check_and_record(
            request.signature, expires_at_ms
        ):
            return self._reject(RejectReason.REPLAY_SIGNATURE_REUSED, request)

        logger.debug(
            "webhook_authenticated",
            api_key=mask_secret(request.api_key),
            timestamp=timestamp_ms,
        )
        return AuthResult.authenticated()

    __call__ = authenticate

    def _reject(
        self,
        reason_code: RejectReason,
        request: IncomingRequest,
        **context,
    ) -> AuthResult:
        logger.warning(
            "webhook_auth_rejected",
            reason=reason_code.value,
            api_key=mask_secret(request.api_key or ""),
            **context,
        )
        return AuthResult.rejected(reason_code)
