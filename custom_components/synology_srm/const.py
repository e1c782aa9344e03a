"""Constants for the Synology SRM integration."""

from __future__ import annotations

from typing import Final

from homeassistant.const import Platform

from .pysrm.const import DEFAULT_PORT as PYSRM_DEFAULT_PORT

DOMAIN: Final = "synology_srm"
MANUFACTURER: Final = "Synology"

PLATFORMS: Final[list[Platform]] = [
    Platform.BINARY_SENSOR,
    Platform.SENSOR,
]

CONF_VERIFY_SSL: Final = "verify_ssl"

DEFAULT_PORT: Final = PYSRM_DEFAULT_PORT
DEFAULT_VERIFY_SSL: Final = False

# Polling interval configuration (in seconds)
DEFAULT_SCAN_INTERVAL: Final = 60
MIN_SCAN_INTERVAL: Final = 60
MAX_SCAN_INTERVAL: Final = 3600

# Connection handling (in seconds)
LOGIN_TIMEOUT: Final = 5.0
RECONNECT_DELAY: Final = 60  # After a login timeout or repeated failed cycles
NOT_CONNECTED_RECONNECT_DELAY: Final = 90  # After the router dropped the session
SHUTDOWN_TIMEOUT: Final = 10.0
MAX_CONSECUTIVE_FAILURES: Final = 3  # Failed cycles before a full reconnect

# Object ids written by the poller
OBJ_CONNECTION: Final = "info.connection"
OBJ_IPV4_STATUS: Final = "router.IPV4_status"
OBJ_IPV4_IP: Final = "router.IPV4_IP"
OBJ_IPV6_STATUS: Final = "router.IPV6_status"
OBJ_IPV6_IP: Final = "router.IPV6_IP"
OBJ_DEVICES_ALL: Final = "devices.all"
OBJ_DEVICES_ONLINE: Final = "devices.online"
OBJ_DEVICES_ONLINE_WIFI: Final = "devices.online_wifi"
OBJ_DEVICES_ONLINE_ETHERNET: Final = "devices.online_ethernet"
OBJ_DEVICES_MESH: Final = "devices.mesh"
OBJ_TRAFFIC_LIVE: Final = "traffic.live"

MESH_PREFIX: Final = "mesh"


def signal_object_added(entry_id: str) -> str:
    """Return the dispatcher signal fired when a store object is created."""
    return f"{DOMAIN}_{entry_id}_object_added"


def signal_state_updated(entry_id: str, object_id: str) -> str:
    """Return the dispatcher signal fired when a store value changes."""
    return f"{DOMAIN}_{entry_id}_state_{object_id}"
