import pytest

from webhook_auth import (
    Credentials,
    FrozenClock,
    IncomingRequest,
    RequestAuthenticator,
    compute_signature,
)

NOW_MS = 1_760_000_000_000
API_KEY = "k1"
SECRET = b"s1"


@pytest.fixture
def credentials():
    return Credentials(api_key=API_KEY, shared_secret=SECRET)


@pytest.fixture
def clock():
    return FrozenClock(NOW_MS)


@pytest.fixture
def authenticator(credentials, clock):
    return RequestAuthenticator(credentials, clock=clock)


@pytest.fixture
def make_request():
    """Build a correctly signed IncomingRequest, with overrides."""

    def _make(
        body=b'{"x":1}',
        timestamp=None,
        api_key=API_KEY,
        secret=SECRET,
        signed_body=None,
        signature=None,
    ):
        ts = str(NOW_MS) if timestamp is None else timestamp
        if signature is None:
            signature = compute_signature(
                secret, ts, body if signed_body is None else signed_body
            )
        return IncomingRequest(
            api_key=api_key,
            timestamp=ts,
            signature=signature,
            raw_body=body,
        )

    return _make


@pytest.fixture
def now_ms():
    return NOW_MS
