"""Constants for the pysrm library."""

from __future__ import annotations

from typing import Final

DEFAULT_PORT: Final = 8001
DEFAULT_TIMEOUT: Final = 5.0  # seconds per request

PATH_AUTH: Final = "/webapi/auth.cgi"
PATH_ENTRY: Final = "/webapi/entry.cgi"

SID_COOKIE: Final = "id"

API_AUTH: Final = "SYNO.API.Auth"
API_CONNECTION_STATUS: Final = "SYNO.Core.Network.Router.ConnectionStatus"
API_DEVICES: Final = "SYNO.Core.Network.NSM.Device"
API_WIFI_DEVICES: Final = "SYNO.Mesh.Network.WifiDevice"
API_MESH_NODES: Final = "SYNO.Mesh.Node.List"
API_TRAFFIC: Final = "SYNO.Core.NGFW.Traffic"
API_UTILIZATION: Final = "SYNO.Core.System.Utilization"
API_WIFI_SETTINGS: Final = "SYNO.Wifi.Network.Setting"
API_SMART_WAN_GATEWAY: Final = "SYNO.Core.Network.SmartWAN.Gateway"
API_SMART_WAN: Final = "SYNO.Core.Network.SmartWAN.General"
API_POLICY_ROUTE: Final = "SYNO.Core.Network.Router.PolicyRoute"
API_WOL: Final = "SYNO.Core.Network.WOL"
API_QOS: Final = "SYNO.Core.NGFW.QoS.Rules"
API_ACCESS_CONTROL: Final = "SYNO.SafeAccess.AccessControl.ConfigGroup"

AUTH_API_VERSION: Final = 2
# Highest version known for the versioned device and mesh endpoints
MAX_API_VERSION: Final = 4

TRAFFIC_INTERVALS: Final[tuple[str, ...]] = ("live", "day", "week", "month")

SMART_WAN_INTERFACES: Final[frozenset[str]] = frozenset(
    {
        "wan",
        "lan1",
        "3glte",
        "PPPoE-WAN",
        "PPPoE-LAN1",
        "vpn",
        "wifi24g",
        "wifi5g",
        "DS-Lite",
        "MapE",
    }
)
SMART_WAN_MODES: Final[frozenset[str]] = frozenset(
    {"failover", "loadbalancing_failover"}
)

ERROR_VERSION_NOT_SUPPORTED: Final = 104
# Codes reported once the session behind the sid is gone
SESSION_ERROR_CODES: Final[frozenset[int]] = frozenset({106, 107, 119})

ERROR_MESSAGES: Final[dict[int, str]] = {
    100: "Unknown error",
    101: "Invalid parameters",
    102: "API does not exist",
    103: "Method does not exist",
    104: "This API version is not supported",
    105: "Insufficient user privilege",
    106: "Session timeout",
    107: "Session interrupted by duplicate login",
    119: "Not connected",
    400: "No such account or incorrect password",
    401: "Account disabled",
    402: "Permission denied",
    403: "2-step verification code required",
    404: "Failed to authenticate 2-step verification code",
}

AUTH_ERROR_CODES: Final[frozenset[int]] = frozenset({400, 401, 402, 403, 404})
