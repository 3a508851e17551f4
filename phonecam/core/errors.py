"""
PhoneCam error taxonomy.

Every failure the core surfaces is one of these; nothing here is allowed
to terminate the process.
"""
from typing import Optional


class PhoneCamError(Exception):
    """Base class for all PhoneCam errors."""


class ConfigurationError(PhoneCamError):
    """Missing or invalid configuration (credential, config value)."""


class UpstreamError(PhoneCamError):
    """Non-success response from an answer backend."""

    def __init__(self, message: str, provider: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class StreamConnectionError(PhoneCamError, ConnectionError):
    """Stream handshake failed; the session is back to inactive."""


class AlreadyActiveError(PhoneCamError):
    """A stream session is already starting or active."""
