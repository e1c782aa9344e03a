"""Python library for the Synology SRM router web API."""

from .client import SrmClient, SrmSessionInfo
from .const import DEFAULT_PORT, DEFAULT_TIMEOUT, MAX_API_VERSION
from .exceptions import (
    InvalidArgumentError,
    ProtocolError,
    RemoteError,
    RequestTimeoutError,
    SrmError,
    TransportError,
)
from .validators import is_valid_ipv4

__all__ = [
    "DEFAULT_PORT",
    "DEFAULT_TIMEOUT",
    "MAX_API_VERSION",
    "InvalidArgumentError",
    "ProtocolError",
    "RemoteError",
    "RequestTimeoutError",
    "SrmClient",
    "SrmError",
    "SrmSessionInfo",
    "TransportError",
    "is_valid_ipv4",
]
