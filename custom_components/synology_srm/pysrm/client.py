"""Async client for the Synology SRM web API.

The router exposes two form-encoded POST endpoints::

    /webapi/auth.cgi   login / logout (returns a session id)
    /webapi/entry.cgi  everything else

Every call names the remote operation with ``api``/``method``/``version``
fields and the router answers with ``{"success": bool, "data"|"error": ...}``.
The session id is presented back as an ``id`` cookie.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

import aiohttp

from .const import (
    API_ACCESS_CONTROL,
    API_AUTH,
    API_CONNECTION_STATUS,
    API_DEVICES,
    API_MESH_NODES,
    API_POLICY_ROUTE,
    API_QOS,
    API_SMART_WAN,
    API_SMART_WAN_GATEWAY,
    API_TRAFFIC,
    API_UTILIZATION,
    API_WIFI_DEVICES,
    API_WIFI_SETTINGS,
    API_WOL,
    AUTH_API_VERSION,
    DEFAULT_TIMEOUT,
    ERROR_MESSAGES,
    MAX_API_VERSION,
    PATH_AUTH,
    PATH_ENTRY,
    SID_COOKIE,
)
from .exceptions import (
    ProtocolError,
    RemoteError,
    RequestTimeoutError,
    SrmError,
    TransportError,
)
from .validators import (
    validate_api_version,
    validate_base_url,
    validate_credentials,
    validate_smart_wan_config,
    validate_traffic_interval,
)

_LOGGER = logging.getLogger(__name__)


@dataclass
class SrmSessionInfo:
    """Connection details of the authenticated session."""

    base_url: str
    protocol: str
    hostname: str
    port: int | None
    account: str
    password: str = field(repr=False)
    sid: str | None = None


def build_error(response: Mapping[str, Any]) -> RemoteError:
    """Map a ``success: false`` response onto a RemoteError."""
    error = response.get("error")
    if not isinstance(error, Mapping) or "code" not in error:
        return RemoteError(None, "Unknown error (no code)")
    code = error["code"]
    message = ERROR_MESSAGES.get(code) if isinstance(code, int) else None
    if message is None:
        message = f"Unknown error ({code}) {json.dumps(error)}"
    return RemoteError(code if isinstance(code, int) else None, message)


def require_mapping(data: Any) -> dict[str, Any]:
    """Return ``data`` as a dict, or raise ProtocolError for any other shape."""
    if not isinstance(data, Mapping):
        raise ProtocolError("Invalid response")
    return dict(data)


def require_records(data: Any, key: str) -> list[dict[str, Any]]:
    """Return the list of objects stored under ``key`` in a response.

    A missing or null key is an empty list; anything that is not a list of
    objects is a ProtocolError.
    """
    items = require_mapping(data).get(key)
    if items is None:
        return []
    if not isinstance(items, list) or not all(
        isinstance(item, Mapping) for item in items
    ):
        raise ProtocolError("Invalid response")
    return [dict(item) for item in items]


def _form_value(value: Any) -> str:
    """Render a payload value the way the router's form parser expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class SrmClient:
    """Client for one Synology SRM router.

    Args:
        session: Shared :class:`aiohttp.ClientSession` (obtained from HA helper).
    """

    def __init__(self, session: aiohttp.ClientSession) -> None:
        self._http = session
        self._session_info: SrmSessionInfo | None = None
        self._timeout = DEFAULT_TIMEOUT
        self._verify_ssl = False

    @property
    def session_info(self) -> SrmSessionInfo | None:
        """Return the current session details, if authenticated once."""
        return self._session_info

    @property
    def sid(self) -> str | None:
        """Return the live session id, or None when logged out."""
        if self._session_info is None:
            return None
        return self._session_info.sid

    # ------------------------------------------------------------------
    # Low level
    # ------------------------------------------------------------------

    async def request(self, path: str, payload: Mapping[str, Any]) -> Any:
        """Send one API call and return its decoded ``data`` field.

        Args:
            path: API path, e.g. ``/webapi/entry.cgi``
            payload: Form fields; JSON-typed fields must already be serialised

        Returns:
            The ``data`` field of the response (a dict, a list or None), or
            an empty dict when the field is missing

        Raises:
            RequestTimeoutError: If the request exceeds the configured timeout.
            TransportError: On connection errors or non-2xx HTTP status.
            ProtocolError: If the response is not a valid SRM envelope.
            RemoteError: If the router reports ``success: false``.
        """
        if self._session_info is None:
            raise TransportError("Client is not authenticated")

        info = self._session_info
        url = f"{info.protocol}://{info.hostname}"
        if info.port is not None:
            url = f"{url}:{info.port}"
        url = f"{url}{path}"

        form = urlencode({key: _form_value(value) for key, value in payload.items()})
        headers = {"Content-Type": "application/x-www-form-urlencoded"}
        if info.sid:
            headers["Cookie"] = f"{SID_COOKIE}={info.sid}"

        api_name = payload.get("api", "unknown")
        _LOGGER.debug("SRM request %s %s.%s", path, api_name, payload.get("method"))

        try:
            async with self._http.post(
                url,
                data=form,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                ssl=self._verify_ssl,
            ) as resp:
                if not 200 <= resp.status <= 299:
                    raise TransportError(f"{resp.status} {resp.reason}", resp.status)
                try:
                    body = await resp.text()
                except UnicodeDecodeError as err:
                    raise ProtocolError("Invalid response") from err
        except TimeoutError as err:
            raise RequestTimeoutError("Request timeout") from err
        except aiohttp.ClientError as err:
            raise TransportError(f"HTTP error for {info.hostname}: {err}") from err

        try:
            result = json.loads(body)
        except ValueError as err:
            raise ProtocolError("Invalid response") from err
        if not isinstance(result, dict) or "success" not in result:
            raise ProtocolError("Invalid response")

        if not result["success"]:
            error = build_error(result)
            _LOGGER.debug(
                "SRM %s failed with code %s: %s", api_name, error.code, error.message
            )
            raise error

        data = result.get("data", {})
        if data is not None and not isinstance(data, (dict, list)):
            raise ProtocolError("Invalid response")
        return data

    async def _entry(self, payload: Mapping[str, Any]) -> Any:
        return await self.request(PATH_ENTRY, payload)

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    async def authenticate(
        self,
        base_url: str,
        account: str,
        password: str,
        *,
        sid: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = False,
    ) -> str:
        """Log in with user credentials and keep the returned session id.

        Args:
            base_url: Full router URL, e.g. ``https://10.0.0.1:8001``
            account: Account login, e.g. ``admin``
            password: Account password
            sid: Previous session id to present during login
            timeout: Per-request timeout in seconds
            verify_ssl: Verify the router's TLS certificate

        Returns:
            Session identifier
        """
        url = validate_base_url(base_url)
        validate_credentials(account, password)

        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._session_info = SrmSessionInfo(
            base_url=base_url,
            protocol=url.scheme,
            hostname=url.host or "",
            port=url.explicit_port,
            account=account,
            password=password,
            sid=sid or None,
        )

        response = await self.request(
            PATH_AUTH,
            {
                "account": account,
                "passwd": password,
                "method": "Login",
                "version": AUTH_API_VERSION,
                "api": API_AUTH,
            },
        )
        if not isinstance(response, Mapping) or "sid" not in response:
            raise ProtocolError("No sid returned")

        self._session_info.sid = str(response["sid"])
        _LOGGER.debug("Authenticated against %s as %s", url.host, account)
        return self._session_info.sid

    async def logout(self) -> None:
        """Destroy the session on the router.

        The local session id is dropped even if the router cannot be reached;
        the error is still raised to the caller.
        """
        try:
            await self.request(
                PATH_AUTH,
                {"method": "Logout", "version": AUTH_API_VERSION, "api": API_AUTH},
            )
        finally:
            if self._session_info is not None:
                self._session_info.sid = None

    # ------------------------------------------------------------------
    # Router and network
    # ------------------------------------------------------------------

    async def get_connection_status(self) -> dict[str, Any]:
        """Retrieve the WAN status (``ipv4``/``ipv6`` blocks)."""
        return require_mapping(
            await self._entry(
                {"method": "get", "version": 1, "api": API_CONNECTION_STATUS}
            )
        )

    async def get_traffic(self, interval: str = "live") -> Any:
        """Retrieve traffic by device for ``live``, ``day``, ``week`` or ``month``."""
        validate_traffic_interval(interval)
        return await self._entry(
            {
                "method": "get",
                "version": 1,
                "mode": "net",
                "interval": interval,
                "api": API_TRAFFIC,
            }
        )

    async def get_network_utilization(self) -> Any:
        """Retrieve received/transmitted counters per network interface."""
        return await self._entry(
            {
                "method": "get",
                "version": 1,
                "resource": json.dumps(["network"]),
                "api": API_UTILIZATION,
            }
        )

    async def get_wifi_network_settings(self) -> Any:
        return await self._entry(
            {"method": "get", "version": 1, "api": API_WIFI_SETTINGS}
        )

    async def set_wifi_network_settings(self, profiles: Sequence[Any]) -> None:
        await self._entry(
            {
                "api": API_WIFI_SETTINGS,
                "method": "set",
                "version": 1,
                "profiles": json.dumps(profiles),
            }
        )

    # ------------------------------------------------------------------
    # Devices and mesh
    # ------------------------------------------------------------------

    async def _get_versioned(
        self, payload: Mapping[str, Any], key: str, api_version: int
    ) -> list[dict[str, Any]]:
        """Call a versioned endpoint, stepping down while the version is refused.

        The version error of the last attempt (version 1) is raised as is.
        """
        validate_api_version(api_version)
        version = api_version
        while True:
            try:
                data = await self._entry({**payload, "version": version})
            except RemoteError as err:
                if not err.is_version_error or version <= 1:
                    raise
                _LOGGER.debug(
                    "%s version %d not supported, trying lower version",
                    payload["api"],
                    version,
                )
                version -= 1
                continue
            return require_records(data, key)

    async def get_all_devices(
        self, api_version: int = MAX_API_VERSION
    ) -> list[dict[str, Any]]:
        """Retrieve every device known to the router (IP, signal, online state...)."""
        return await self._get_versioned(
            {"method": "get", "conntype": "all", "api": API_DEVICES},
            "devices",
            api_version,
        )

    async def get_wifi_devices(self) -> list[dict[str, Any]]:
        """Retrieve devices connected to the Wi-Fi network."""
        data = await self._entry(
            {"method": "get", "version": 1, "api": API_WIFI_DEVICES}
        )
        return require_records(data, "devices")

    async def get_mesh_nodes(
        self, api_version: int = MAX_API_VERSION
    ) -> list[dict[str, Any]]:
        """Retrieve mesh nodes with rates, status and connected device counts."""
        return await self._get_versioned(
            {"method": "get", "api": API_MESH_NODES},
            "nodes",
            api_version,
        )

    # ------------------------------------------------------------------
    # Smart WAN
    # ------------------------------------------------------------------

    async def get_smart_wan_gateway(self, gatewaytype: str = "ipv4") -> list[Any]:
        data = await self._entry(
            {
                "api": API_SMART_WAN_GATEWAY,
                "method": "list",
                "version": 1,
                "gatewaytype": json.dumps(gatewaytype),
            }
        )
        gateways = require_mapping(data).get("list")
        if gateways is None:
            return []
        if not isinstance(gateways, list):
            raise ProtocolError("Invalid response")
        return gateways

    async def get_smart_wan(self) -> dict[str, Any]:
        return require_mapping(
            await self._entry({"api": API_SMART_WAN, "method": "get", "version": 1})
        )

    async def set_smart_wan(self, config: Mapping[str, Any]) -> Any:
        """Write a smart WAN configuration after validating it locally."""
        validate_smart_wan_config(config)
        return await self._entry(
            {"api": API_SMART_WAN, "method": "set", "version": 1, **config}
        )

    async def switch_smart_wan(self) -> Any:
        """Swap the primary and secondary smart WAN interfaces."""
        current = dict(await self.get_smart_wan())
        current["smartwan_ifname_1"], current["smartwan_ifname_2"] = (
            current.get("smartwan_ifname_2"),
            current.get("smartwan_ifname_1"),
        )
        return await self.set_smart_wan(current)

    # ------------------------------------------------------------------
    # Routing, wake on LAN, QoS
    # ------------------------------------------------------------------

    async def get_policy_routes(self) -> list[Any]:
        data = await self._entry(
            {"method": "get", "version": 1, "api": API_POLICY_ROUTE, "type": "ipv4"}
        )
        return require_records(data, "rules")

    async def set_policy_routes(self, rules: Sequence[Any]) -> None:
        """Replace the policy routes; the router expects the complete list."""
        await self._entry(
            {
                "method": "set",
                "version": 1,
                "api": API_POLICY_ROUTE,
                "type": "ipv4",
                "rules": json.dumps(rules),
            }
        )

    async def get_wake_on_lan_devices(self) -> Any:
        return await self._entry(
            {
                "api": API_WOL,
                "method": "get_devices",
                "version": 1,
                "findhost": False,
                "client_list": json.dumps([]),
            }
        )

    async def add_wake_on_lan(self, mac: str, host: str = "") -> None:
        payload: dict[str, Any] = {
            "api": API_WOL,
            "method": "add_device",
            "version": 1,
            "mac": json.dumps(mac),
        }
        if host:
            payload["host"] = json.dumps(host)
        await self._entry(payload)

    async def wake_on_lan(self, mac: str) -> None:
        await self._entry(
            {"api": API_WOL, "method": "wake", "version": 1, "mac": json.dumps(mac)}
        )

    async def get_qos(self) -> list[Any]:
        """Retrieve QoS rules by device (guaranteed/maximum rates and protocols)."""
        data = await self._entry({"api": API_QOS, "method": "get", "version": 1})
        return require_records(data, "rules")

    # ------------------------------------------------------------------
    # Access control
    # ------------------------------------------------------------------

    async def get_access_control_groups(
        self,
        request_online_status: bool = False,
        additional: Iterable[str] = ("device", "total_timespent"),
    ) -> list[dict[str, Any]]:
        """Retrieve access control groups (safe access profiles).

        Args:
            request_online_status: Annotate each group with ``online`` and
                ``online_device_count``; this needs an extra device request
            additional: Additional information requested from the router

        Returns:
            Access control groups
        """
        data = await self._entry(
            {
                "api": API_ACCESS_CONTROL,
                "method": "get",
                "version": 1,
                "additional": json.dumps(list(additional)),
            }
        )
        groups = require_records(data, "config_groups")
        if request_online_status:
            try:
                devices = await self.get_all_devices()
            except SrmError as err:
                _LOGGER.warning("Error during device retrieval: %s", err)
            else:
                self.compute_access_control_group_status(groups, devices)
        return groups

    @staticmethod
    def compute_access_control_group_status(
        groups: list[dict[str, Any]], devices: Iterable[Mapping[str, Any]]
    ) -> None:
        """Set ``online_device_count`` and ``online`` on each group in place."""
        online_macs = {
            device.get("mac") for device in devices if device.get("is_online") is True
        }
        for group in groups:
            count = sum(1 for mac in group.get("devices") or [] if mac in online_macs)
            group["online_device_count"] = count
            group["online"] = count > 0
