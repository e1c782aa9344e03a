"""Exceptions raised by the pysrm library."""

from __future__ import annotations

from .const import AUTH_ERROR_CODES, ERROR_VERSION_NOT_SUPPORTED, SESSION_ERROR_CODES


class SrmError(Exception):
    """Base class for all SRM client errors."""


class InvalidArgumentError(SrmError, ValueError):
    """Raised for bad call-time input, before any request is sent."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with an optional name of the offending field."""
        super().__init__(message)
        self.field = field


class RequestTimeoutError(SrmError, TimeoutError):
    """Raised when a request exceeds its configured deadline."""


class TransportError(SrmError):
    """Raised on connection failures and non-2xx HTTP responses."""

    def __init__(self, message: str, status: int | None = None) -> None:
        """Initialize with the HTTP status, if one was received."""
        super().__init__(message)
        self.status = status


class ProtocolError(SrmError):
    """Raised when the router answers with an unexpected payload."""


class RemoteError(SrmError):
    """Raised when the router reports an application error."""

    def __init__(self, code: int | None, message: str) -> None:
        """Initialize with the vendor error code and its message."""
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def is_version_error(self) -> bool:
        """Return True if the requested API version is not supported."""
        return self.code == ERROR_VERSION_NOT_SUPPORTED

    @property
    def is_session_error(self) -> bool:
        """Return True if the session is no longer connected."""
        return self.code in SESSION_ERROR_CODES

    @property
    def is_auth_error(self) -> bool:
        """Return True if the credentials were rejected."""
        return self.code in AUTH_ERROR_CODES
