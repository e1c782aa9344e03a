"""Argument validation for pysrm.

Everything in here runs before a request is built, so a rejected argument
never reaches the router.
"""

from __future__ import annotations

import ipaddress
import logging
from collections.abc import Mapping
from numbers import Real
from typing import Any

from yarl import URL

from .const import SMART_WAN_INTERFACES, SMART_WAN_MODES, TRAFFIC_INTERVALS
from .exceptions import InvalidArgumentError

_LOGGER = logging.getLogger(__name__)


def is_valid_ipv4(value: Any) -> bool:
    """Return True if value is a dotted-quad IPv4 address."""
    if not isinstance(value, str):
        return False
    try:
        ipaddress.IPv4Address(value.strip())
    except ValueError:
        return False
    return True


def validate_base_url(base_url: str) -> URL:
    """Parse and validate the router base URL.

    Args:
        base_url: Full router URL, e.g. ``https://192.168.1.1:8001``

    Returns:
        Parsed URL

    Raises:
        InvalidArgumentError: If the URL is empty, relative or not http(s)
    """
    if not base_url:
        raise InvalidArgumentError("Router base URL must be provided", "base_url")
    try:
        url = URL(base_url)
    except (TypeError, ValueError) as err:
        raise InvalidArgumentError(
            f"Invalid router base URL: {base_url}", "base_url"
        ) from err
    if not url.is_absolute() or url.scheme not in ("http", "https") or not url.host:
        raise InvalidArgumentError(
            f"Invalid router base URL: {base_url}", "base_url"
        )
    return url


def validate_credentials(account: str, password: str) -> None:
    """Validate that both login fields are present."""
    if not account or not password:
        raise InvalidArgumentError("Credentials must be provided", "credentials")


def validate_traffic_interval(interval: str) -> None:
    """Validate a traffic interval name."""
    if interval not in TRAFFIC_INTERVALS:
        raise InvalidArgumentError(
            f"Interval must be in {list(TRAFFIC_INTERVALS)}", "interval"
        )


def validate_api_version(api_version: int) -> None:
    """Validate an API version used for version negotiation."""
    if isinstance(api_version, bool) or not isinstance(api_version, int) or api_version < 1:
        raise InvalidArgumentError(
            f"API version must be a positive integer (got {api_version!r})",
            "api_version",
        )


def validate_smart_wan_config(config: Any) -> None:
    """Validate a smart WAN configuration before it is sent.

    Args:
        config: Smart WAN configuration, e.g. ``{"smartwan_mode": "failover",
            "dw_weight_ratio": 0, "smartwan_ifname_1": "wan",
            "smartwan_ifname_2": "lan1", "smartwan_failback": True}``

    Raises:
        InvalidArgumentError: On the first field that fails validation
    """
    if not isinstance(config, Mapping):
        raise InvalidArgumentError("Invalid WAN config")

    ratio = config.get("dw_weight_ratio")
    if isinstance(ratio, bool) or not isinstance(ratio, Real) or not 0 <= ratio <= 100:
        raise InvalidArgumentError("Invalid dw_weight_ratio", "dw_weight_ratio")

    for field in ("smartwan_ifname_1", "smartwan_ifname_2"):
        value = config.get(field)
        if not isinstance(value, str) or value not in SMART_WAN_INTERFACES:
            raise InvalidArgumentError(f"Invalid {field}", field)

    mode = config.get("smartwan_mode")
    if not isinstance(mode, str) or mode not in SMART_WAN_MODES:
        raise InvalidArgumentError("Invalid smartwan_mode", "smartwan_mode")

    _LOGGER.debug(
        "Smart WAN config validated: %s <-> %s (%s)",
        config["smartwan_ifname_1"],
        config["smartwan_ifname_2"],
        config["smartwan_mode"],
    )
