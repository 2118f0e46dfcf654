"""
Webhook Auth Exceptions
=======================
Exception classes for configuration and parsing errors.

Rejected requests are never signalled with exceptions; see AuthResult.
"""


class WebhookAuthError(Exception):
    """Base exception for the webhook_auth package."""
    pass


class ConfigurationError(WebhookAuthError):
    """Raised when required credentials are missing at startup."""

    def __init__(self, message: str, variable: str = ""):
        super().__init__(message)
        self.variable = variable


class TimestampFormatError(WebhookAuthError, ValueError):
    """Raised when an x-timestamp header is not a valid epoch-millisecond value."""

    def __init__(self, message: str, value: object = None):
        super().__init__(message)
        self.value = value
