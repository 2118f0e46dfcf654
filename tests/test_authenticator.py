"""
Request Authenticator Tests
===========================
Ordering, window boundaries, replay and end-to-end scenarios.
"""

from dataclasses import replace

import pytest

from webhook_auth import (
    AuthDecision,
    AuthResult,
    FrozenClock,
    InMemoryReplayGuard,
    IncomingRequest,
    RejectReason,
    RequestAuthenticator,
    TimestampWindow,
)

class TestPresence:
    """Missing or empty headers."""

    @pytest.mark.parametrize("field", ["api_key", "timestamp", "signature"])
    def test_missing_header(self, authenticator, make_request, field):
        request = replace(make_request(), **{field: None})

        result = authenticator.authenticate(request)

        assert result.reason_code == RejectReason.MISSING_HEADERS

    @pytest.mark.parametrize("field", ["api_key", "timestamp", "signature"])
    def test_empty_header(self, authenticator, make_request, field):
        request = replace(make_request(), **{field: ""})

        result = authenticator.authenticate(request)

        assert result.reason_code == RejectReason.MISSING_HEADERS

    def test_missing_signature_not_invalid_signature(self, authenticator, make_request):
        """A request lacking only x-signature is a presence failure."""
        request = replace(make_request(api_key="wrong", timestamp="bad"), signature=None)

        result = authenticator.authenticate(request)

        assert result.reason_code == RejectReason.MISSING_HEADERS


class TestOrdering:
    """Each check is reported before the ones after it."""

    def test_wrong_api_key_before_signature(self, authenticator, make_request):
        request = make_request(api_key="wrong")

        result = authenticator.authenticate(request)

        assert result.reason_code == RejectReason.INVALID_API_KEY

    def test_wrong_api_key_with_bad_signature(self, authenticator, make_request):
        request = make_request(api_key="wrong", signature="0" * 64)

        assert authenticator.authenticate(request).reason_code == RejectReason.INVALID_API_KEY

    def test_bad_timestamp_format_before_signature(self, authenticator, make_request):
        request = make_request(timestamp="not-a-number", signature="0" * 64)

        result = authenticator.authenticate(request)

        assert result.reason_code == RejectReason.INVALID_TIMESTAMP_FORMAT

    def test_expired_before_signature(self, now_ms, authenticator, make_request):
        request = make_request(timestamp=str(now_ms - 600_000), signature="0" * 64)

        assert authenticator.authenticate(request).reason_code == RejectReason.EXPIRED

    def test_no_replay_record_on_rejection(self, credentials, clock, make_request):
        guard = InMemoryReplayGuard(clock=clock)
        authenticator = RequestAuthenticator(credentials, clock=clock, replay_guard=guard)

        authenticator.authenticate(make_request(signed_body=b"other"))

        assert len(guard) == 0


class TestWindowBoundary:
    """Freshness window edges at exactly +/- 5 minutes."""

    @pytest.mark.parametrize("offset,accepted", [
        (-300_000, True),
        (-300_001, False),
        (300_000, True),
        (300_001, False),
    ])
    def test_boundary(self, authenticator, make_request, now_ms, offset, accepted):
        request = make_request(timestamp=str(now_ms + offset))

        result = authenticator.authenticate(request)

        if accepted:
            assert result.ok
        else:
            assert result.reason_code == RejectReason.EXPIRED

    def test_custom_window(self, now_ms, credentials, clock, make_request):
        authenticator = RequestAuthenticator(
            credentials, clock=clock, window=TimestampWindow(max_skew_ms=1000)
        )

        assert authenticator.authenticate(make_request(timestamp=str(now_ms - 1000))).ok
        assert (
            authenticator.authenticate(make_request(timestamp=str(now_ms - 1001))).reason_code
            == RejectReason.EXPIRED
        )

    def test_clock_moves_request_out_of_window(self, authenticator, clock, make_request):
        request = make_request()
        clock.advance(300_001)

        assert authenticator.authenticate(request).reason_code == RejectReason.EXPIRED


class TestReplay:
    """Signature reuse inside the freshness window."""

    def test_second_submission_rejected(self, authenticator, make_request):
        request = make_request()

        assert authenticator.authenticate(request).ok
        assert authenticator.authenticate(request).reason_code == RejectReason.REPLAY_SIGNATURE_REUSED

    def test_replay_rejected_until_window_closes(self, authenticator, clock, make_request):
        request = make_request()
        authenticator.authenticate(request)

        clock.advance(300_000)

        assert authenticator.authenticate(request).reason_code == RejectReason.REPLAY_SIGNATURE_REUSED

    def test_replay_after_window_closes_is_expired(self, authenticator, clock, make_request):
        request = make_request()
        authenticator.authenticate(request)

        clock.advance(300_001)

        assert authenticator.authenticate(request).reason_code == RejectReason.EXPIRED

    def test_future_dated_replay_rejected_while_fresh(self, now_ms, authenticator, clock, make_request):
        """A request dated ahead of now stays guarded until its own window closes."""
        request = make_request(timestamp=str(now_ms + 300_000))
        assert authenticator.authenticate(request).ok

        clock.advance(400_000)
        assert authenticator.authenticate(request).reason_code == RejectReason.REPLAY_SIGNATURE_REUSED

        clock.set(now_ms + 600_000)
        assert authenticator.authenticate(request).reason_code == RejectReason.REPLAY_SIGNATURE_REUSED

        clock.set(now_ms + 600_001)
        assert authenticator.authenticate(request).reason_code == RejectReason.EXPIRED

    def test_future_dated_expiry_recorded(self, now_ms, credentials, clock, make_request):
        guard = InMemoryReplayGuard(clock=clock)
        authenticator = RequestAuthenticator(credentials, clock=clock, replay_guard=guard)
        request = make_request(timestamp=str(now_ms + 120_000))

        authenticator.authenticate(request)

        clock.set(now_ms + 420_000)
        assert guard.has_seen(request.signature) is True
        clock.set(now_ms + 420_001)
        assert guard.has_seen(request.signature) is False

    def test_replay_protection_disabled(self, credentials, clock, make_request):
        """Freshness-window-only mode accepts an identical request twice."""
        authenticator = RequestAuthenticator(credentials, clock=clock, replay_protection=False)
        request = make_request()

        assert authenticator.replay_guard is None
        assert authenticator.authenticate(request).ok
        assert authenticator.authenticate(request).ok

    def test_recorded_expiry(self, now_ms, credentials, clock, make_request):
        guard = InMemoryReplayGuard(clock=clock)
        authenticator = RequestAuthenticator(credentials, clock=clock, replay_guard=guard)
        request = make_request()

        authenticator.authenticate(request)

        clock.set(now_ms + 300_000)
        assert guard.has_seen(request.signature) is True
        clock.set(now_ms + 300_001)
        assert guard.has_seen(request.signature) is False

    def test_custom_guard_protocol(self, now_ms, credentials, clock, make_request):
        """Any object implementing the ReplayGuard protocol works as a guard."""

        class DictGuard:
            def __init__(self):
                self.entries = {}

            def has_seen(self, signature):
                return signature in self.entries

            def record(self, signature, expires_at_ms):
                self.entries[signature] = expires_at_ms

            def check_and_record(self, signature, expires_at_ms):
                if self.has_seen(signature):
                    return False
                self.record(signature, expires_at_ms)
                return True

            def sweep(self):
                return 0

        guard = DictGuard()
        authenticator = RequestAuthenticator(credentials, clock=clock, replay_guard=guard)
        request = make_request()

        assert authenticator.authenticate(request).ok
        assert guard.entries[request.signature] == now_ms + 300_000
        assert authenticator.authenticate(request).reason_code == RejectReason.REPLAY_SIGNATURE_REUSED


class TestScenarios:
    """End-to-end scenarios with secret "s1" and API key "k1"."""

    def test_valid_request_authenticated(self, authenticator, make_request):
        result = authenticator.authenticate(make_request())

        assert result == AuthResult(decision=AuthDecision.AUTHENTICATED)
        assert result.reason_code is None

    def test_timestamp_header_deleted(self, authenticator, make_request):
        request = replace(make_request(), timestamp=None)

        assert authenticator.authenticate(request).reason_code == RejectReason.MISSING_HEADERS

    def test_wrong_api_key(self, authenticator, make_request):
        assert authenticator.authenticate(make_request(api_key="wrong")).reason_code == RejectReason.INVALID_API_KEY

    def test_ten_minutes_stale(self, now_ms, authenticator, make_request):
        request = make_request(timestamp=str(now_ms - 600_000))

        assert authenticator.authenticate(request).reason_code == RejectReason.EXPIRED

    def test_signature_over_different_body(self, authenticator, make_request):
        request = make_request(signed_body=b'{"x":2}')

        assert authenticator.authenticate(request).reason_code == RejectReason.INVALID_SIGNATURE

    def test_sent_twice(self, authenticator, make_request):
        request = make_request()

        first = authenticator.authenticate(request)
        second = authenticator.authenticate(request)

        assert first.ok
        assert second.decision == AuthDecision.REJECTED
        assert second.reason_code == RejectReason.REPLAY_SIGNATURE_REUSED

    def test_wrong_secret(self, authenticator, make_request):
        request = make_request(secret=b"not-s1")

        assert authenticator.authenticate(request).reason_code == RejectReason.INVALID_SIGNATURE

    def test_callable(self, authenticator, make_request):
        assert authenticator(make_request()).ok

    def test_result_is_immutable(self, authenticator, make_request):
        result = authenticator.authenticate(make_request())

        with pytest.raises(Exception):
            result.decision = AuthDecision.REJECTED

    def test_empty_body_signed(self, credentials, now_ms):
        from webhook_auth import compute_signature

        clock = FrozenClock(now_ms)
        authenticator = RequestAuthenticator(credentials, clock=clock)
        ts = str(now_ms)
        request = IncomingRequest(
            api_key="k1",
            timestamp=ts,
            signature=compute_signature(b"s1", ts, b""),
            raw_body=b"",
        )

        assert authenticator.authenticate(request).ok
