"""Failure kinds raised while talking to the mixer."""


class MixerClientError(Exception):
    """Base class for all mixer client failures."""


class TransportFailure(MixerClientError):
    """Device unreachable, connection refused or request timed out."""


class ProtocolFailure(MixerClientError):
    """Device answered with a non-success HTTP status."""

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        super().__init__(message or f"Device returned HTTP {status_code}")


class MalformedPayload(MixerClientError):
    """Response body is not JSON or lacks required fields."""


class ValidationFailure(MixerClientError):
    """A received value lies outside its accepted range."""
