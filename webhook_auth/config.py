"""
Webhook Auth Configuration
==========================
Credentials and settings loaded once from the environment at startup.
"""

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

import structlog

from .exceptions import ConfigurationError
from .authenticator import RequestAuthenticator
from .clock import ClockSource
from .models import DEFAULT_MAX_SKEW_MS, Credentials, TimestampWindow
from .replay_guard import DEFAULT_MAX_ENTRIES, InMemoryReplayGuard

logger = structlog.get_logger(__name__)

API_KEY_ENV = "INGEST_API_KEY"
SECRET_ENV = "INGEST_WEBHOOK_SECRET"
MAX_SKEW_ENV = "INGEST_MAX_SKEW_MS"
REPLAY_PROTECTION_ENV = "INGEST_REPLAY_PROTECTION"
REPLAY_MAX_ENTRIES_ENV = "INGEST_REPLAY_MAX_ENTRIES"

MIN_RECOMMENDED_SECRET_LENGTH = 32
_FALSE_VALUES = {"0", "false", "no", "off"}


def _require(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name, "")
    if not value:
        raise ConfigurationError(f"{name} environment variable is not set", variable=name)
    return value


def _int_setting(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}", variable=name)


def security_warnings(environ: Mapping[str, str]) -> List[str]:
    """Return warnings for configured secrets that are weaker than recommended."""
    warnings = []
    for name in (API_KEY_ENV, SECRET_ENV):
        value = environ.get(name)
        if value and len(value) < MIN_RECOMMENDED_SECRET_LENGTH:
            warnings.append(
                f"SECURITY WARNING: {name} is shorter than recommended "
                f"{MIN_RECOMMENDED_SECRET_LENGTH} characters"
            )
    return warnings


def load_credentials(environ: Optional[Mapping[str, str]] = None) -> Credentials:
    """
    Build Credentials from INGEST_API_KEY and INGEST_WEBHOOK_SECRET.

    Raises:
        ConfigurationError: if either variable is missing or empty
    """
    environ = os.environ if environ is None else environ
    api_key = _require(environ, API_KEY_ENV)
    secret = _require(environ, SECRET_ENV)

    for warning in security_warnings(environ):
        logger.warning("secret_too_short", message=warning)

    return Credentials(api_key=api_key, shared_secret=secret.encode("utf-8"))


@dataclass(frozen=True)
class WebhookAuthSettings:
    """All webhook authentication settings for one process."""
    credentials: Credentials
    window: TimestampWindow = field(default_factory=TimestampWindow)
    replay_protection: bool = True
    replay_max_entries: int = DEFAULT_MAX_ENTRIES

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "WebhookAuthSettings":
        environ = os.environ if environ is None else environ
        credentials = load_credentials(environ)

        max_skew_ms = _int_setting(environ, MAX_SKEW_ENV, DEFAULT_MAX_SKEW_MS)
        if max_skew_ms < 0:
            raise ConfigurationError(f"{MAX_SKEW_ENV} must be non-negative", variable=MAX_SKEW_ENV)

        replay_max_entries = _int_setting(environ, REPLAY_MAX_ENTRIES_ENV, DEFAULT_MAX_ENTRIES)
        if replay_max_entries < 1:
            raise ConfigurationError(
                f"{REPLAY_MAX_ENTRIES_ENV} must be positive", variable=REPLAY_MAX_ENTRIES_ENV
            )

        replay_protection = (
            environ.get(REPLAY_PROTECTION_ENV, "true").strip().lower() not in _FALSE_VALUES
        )

        logger.info(
            "webhook_auth_configured",
            max_skew_ms=max_skew_ms,
            replay_protection=replay_protection,
            replay_max_entries=replay_max_entries,
        )
        return cls(
            credentials=credentials,
            window=TimestampWindow(max_skew_ms=max_skew_ms),
            replay_protection=replay_protection,
            replay_max_entries=replay_max_entries,
        )

    def build_authenticator(self, clock: Optional[ClockSource] = None) -> RequestAuthenticator:
        """Create a RequestAuthenticator wired from these settings."""
        replay_guard = None
        if self.replay_protection:
            replay_guard = InMemoryReplayGuard(clock=clock, max_entries=self.replay_max_entries)
        return RequestAuthenticator(
            self.credentials,
            clock=clock,
            window=self.window,
            replay_guard=replay_guard,
            replay_protection=self.replay_protection,
        )
