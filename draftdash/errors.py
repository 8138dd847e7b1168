"""
Capture error taxonomy.

Only SessionCreationError (and its subclasses) crosses the capture service
boundary as a failure. TokenNotFoundError is a recoverable "keep polling"
signal. InterceptionAnomaly and ReleaseError are logged where they occur and
never propagated.
"""

from typing import Any, Optional


class CaptureError(Exception):
    """Base class for token capture errors."""


class SessionCreationError(CaptureError):
    """A new capture session could not be started."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, detail: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class ConfigurationError(SessionCreationError):
    """Required remote browser provider credentials are missing."""


class ProvisioningError(SessionCreationError):
    """The remote browser provider rejected or failed the session request."""


class TokenNotFoundError(CaptureError):
    """No token has been captured (yet) for the session."""

    def __init__(self, session_id: str):
        super().__init__(
            "Token not found. Please make sure you logged in and navigated "
            "to a page that makes API calls."
        )
        self.session_id = session_id


class InterceptionAnomaly(CaptureError):
    """A network event could not be inspected. Logged and swallowed."""


class ReleaseError(CaptureError):
    """The remote release request failed. Logged and swallowed."""
