"""Exceptions raised by the notification pipeline.

Every stage raises a subclass of ``NotifyError`` so callers at the
boundaries (HTTP handler, CLI) can catch one type.
"""


class NotifyError(Exception):
    """Base exception for all pipeline errors."""


class ValidationError(NotifyError):
    """Raised when a required inbound field is missing."""


class DecodeError(NotifyError):
    """Raised when a body that should be JSON cannot be decoded."""


class NetworkError(NotifyError):
    """Raised on connection failure, timeout or an unusable URL."""


class DeliveryError(NotifyError):
    """Raised when the DingTalk robot rejects a message."""

    def __init__(self, errcode, errmsg: str = "") -> None:
        self.errcode = errcode
        self.errmsg = errmsg
        super().__init__(f"errcode={errcode} errmsg={errmsg}")


# ---------------------------------------------------------------------------
# SonarQube HTTP status errors
# ---------------------------------------------------------------------------

class SonarClientError(NotifyError):
    """Raised on an unexpected HTTP status from SonarQube."""


class AuthenticationError(SonarClientError):
    """Raised on HTTP 401 — invalid or expired token."""


class NotFoundError(SonarClientError):
    """Raised on HTTP 404 — project, branch or PR not found."""
