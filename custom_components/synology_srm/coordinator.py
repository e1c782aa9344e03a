"""Polling orchestrator for Synology SRM routers."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any

from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback
from homeassistant.helpers import issue_registry as ir
from homeassistant.helpers.event import async_call_later, async_track_time_interval
from homeassistant.util import dt as dt_util

from .const import (
    DEFAULT_SCAN_INTERVAL,
    DEFAULT_VERIFY_SSL,
    DOMAIN,
    LOGIN_TIMEOUT,
    MAX_CONSECUTIVE_FAILURES,
    MIN_SCAN_INTERVAL,
    NOT_CONNECTED_RECONNECT_DELAY,
    OBJ_CONNECTION,
    OBJ_DEVICES_ALL,
    OBJ_DEVICES_MESH,
    OBJ_DEVICES_ONLINE,
    OBJ_DEVICES_ONLINE_ETHERNET,
    OBJ_DEVICES_ONLINE_WIFI,
    OBJ_IPV4_IP,
    OBJ_IPV4_STATUS,
    OBJ_IPV6_IP,
    OBJ_IPV6_STATUS,
    OBJ_TRAFFIC_LIVE,
    RECONNECT_DELAY,
    SHUTDOWN_TIMEOUT,
)
from .objects import (
    MESH_NODE_OBJECTS,
    assign_mesh_node_keys,
    iter_mesh_node_objects,
    iter_static_objects,
    mesh_object_id,
)
from .pysrm import (
    ProtocolError,
    RemoteError,
    RequestTimeoutError,
    SrmClient,
    SrmError,
)
from .store import SrmStateStore

_LOGGER = logging.getLogger(__name__)


def _as_mapping(value: Any) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ProtocolError("Invalid response")
    return value


def _as_records(value: Any) -> list[Mapping[str, Any]]:
    """Return a list of objects, or raise ProtocolError for any other shape."""
    if not isinstance(value, list) or not all(
        isinstance(item, Mapping) for item in value
    ):
        raise ProtocolError("Invalid response")
    return value


class PollState(StrEnum):
    """Lifecycle of the poller."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    POLLING = "polling"
    RECONNECT_WAIT = "reconnect_wait"
    STOPPED = "stopped"


@dataclass(frozen=True)
class SrmPollerConfig:
    """Connection settings for one router."""

    host: str
    port: int
    username: str
    password: str = field(repr=False)
    scan_interval: int = DEFAULT_SCAN_INTERVAL
    verify_ssl: bool = DEFAULT_VERIFY_SSL

    @property
    def base_url(self) -> str:
        return f"https://{self.host}:{self.port}"

    @property
    def interval(self) -> int:
        """Polling interval in seconds, never below the router-friendly floor."""
        return max(int(self.scan_interval), MIN_SCAN_INTERVAL)


class SrmPoller:
    """Connect to the router, poll it on a timer and mirror results into the store.

    State machine::

        DISCONNECTED -> CONNECTING -> POLLING -> RECONNECT_WAIT -> CONNECTING
                                  \\-> STOPPED

    Exactly one interval timer is armed while polling; every transition that
    arms a timer cancels the previous one first.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        store: SrmStateStore,
        config: SrmPollerConfig,
        client_factory: Callable[[], SrmClient],
    ) -> None:
        """Initialize the poller.

        Args:
            hass: Home Assistant instance
            store: State store receiving polled values
            config: Router connection settings
            client_factory: Creates a fresh API client for every (re)connect
        """
        self._hass = hass
        self._store = store
        self._config = config
        self._client_factory = client_factory

        self._client: SrmClient | None = None
        self._state = PollState.DISCONNECTED
        self._stop_requested = False
        self._cycle_lock = asyncio.Lock()
        self._unsub_interval: CALLBACK_TYPE | None = None
        self._unsub_reconnect: CALLBACK_TYPE | None = None

        # Diagnostics tracking - exposed for diagnostics.py
        self.last_error: Exception | None = None
        self.consecutive_failures: int = 0
        self.last_update_attempt_time: datetime | None = None
        self.last_update_success_time: datetime | None = None

    @property
    def state(self) -> PollState:
        return self._state

    @property
    def client(self) -> SrmClient | None:
        """Return the connected client, if any."""
        return self._client

    @property
    def config(self) -> SrmPollerConfig:
        return self._config

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    @property
    def timer_armed(self) -> bool:
        """Return True while the polling interval timer is active."""
        return self._unsub_interval is not None

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    @callback
    def _async_set_state(self, state: PollState) -> None:
        if state is not self._state:
            _LOGGER.debug(
                "Router %s poller: %s -> %s", self._config.host, self._state, state
            )
        self._state = state

    @callback
    def _async_set_connected(self, connected: bool) -> None:
        if self._store.get_object(OBJ_CONNECTION) is not None:
            self._store.async_set_state(OBJ_CONNECTION, connected, ack=True)

    @callback
    def _async_cancel_timers(self) -> None:
        if self._unsub_interval is not None:
            self._unsub_interval()
            self._unsub_interval = None
        if self._unsub_reconnect is not None:
            self._unsub_reconnect()
            self._unsub_reconnect = None

    @callback
    def _async_arm_interval(self) -> None:
        self._async_cancel_timers()
        self._unsub_interval = async_track_time_interval(
            self._hass,
            self._async_handle_interval,
            timedelta(seconds=self._config.interval),
            cancel_on_shutdown=True,
        )

    @callback
    def _async_schedule_reconnect(self, delay: float) -> None:
        if self._stop_requested:
            return
        self._async_cancel_timers()
        self._async_set_state(PollState.RECONNECT_WAIT)
        self._unsub_reconnect = async_call_later(
            self._hass, delay, self._async_handle_reconnect
        )

    @callback
    def _async_handle_interval(self, now: datetime) -> None:
        if self._stop_requested:
            return
        if self._cycle_lock.locked():
            _LOGGER.debug("Previous polling cycle still running, skipping")
            return
        self._hass.async_create_task(self.async_poll())

    @callback
    def _async_handle_reconnect(self, now: datetime) -> None:
        self._unsub_reconnect = None
        self._hass.async_create_task(self.async_reconnect())

    def _issue_id(self) -> str:
        return f"cannot_connect_{self._store.entry_id}"

    def _create_connection_issue(self, error: str) -> None:
        ir.async_create_issue(
            self._hass,
            DOMAIN,
            self._issue_id(),
            is_fixable=False,
            severity=ir.IssueSeverity.ERROR,
            translation_key="cannot_connect",
            translation_placeholders={"host": self._config.host, "error": error},
        )

    def _clear_connection_issue(self) -> None:
        issue_registry = ir.async_get(self._hass)
        if issue_registry.async_get_issue(DOMAIN, self._issue_id()):
            issue_registry.async_delete(DOMAIN, self._issue_id())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def async_start(self) -> None:
        """Create the fixed objects and connect."""
        for object_id, definition in iter_static_objects():
            self._store.async_ensure_object(object_id, definition)
        self._async_set_connected(False)
        await self.async_connect()

    async def async_connect(self) -> None:
        """Log in, run one cycle immediately and arm the polling timer."""
        if self._stop_requested:
            _LOGGER.debug("Poller stopped, not connecting to %s", self._config.host)
            return

        self._async_cancel_timers()
        self._async_set_state(PollState.CONNECTING)
        client = self._client = self._client_factory()
        _LOGGER.debug("Connecting to router %s", self._config.base_url)

        try:
            await client.authenticate(
                self._config.base_url,
                self._config.username,
                self._config.password,
                timeout=LOGIN_TIMEOUT,
                verify_ssl=self._config.verify_ssl,
            )
        except RequestTimeoutError as err:
            self.last_error = err
            self._async_set_connected(False)
            _LOGGER.warning(
                "Login to router %s timed out, retrying in %ss",
                self._config.host,
                RECONNECT_DELAY,
            )
            self._async_schedule_reconnect(RECONNECT_DELAY)
            return
        except SrmError as err:
            self.last_error = err
            self._async_set_connected(False)
            self._async_set_state(PollState.STOPPED)
            _LOGGER.error("Cannot connect to router %s: %s", self._config.host, err)
            self._create_connection_issue(str(err))
            return

        if self._stop_requested:
            # Shut down while the login was in flight
            await self._async_logout(client)
            return

        _LOGGER.info(
            "Connection to router %s is ready, starting device checking",
            self._config.host,
        )
        self.last_error = None
        self.consecutive_failures = 0
        self._async_set_connected(True)
        self._clear_connection_issue()
        self._async_set_state(PollState.POLLING)

        await self.async_poll()

        # The first cycle may already have scheduled a reconnect
        if self._state is PollState.POLLING and not self._stop_requested:
            self._async_arm_interval()

    async def async_reconnect(self) -> None:
        """Drop the current session and connect from scratch."""
        if self._stop_requested:
            return
        _LOGGER.debug("Reconnecting to router %s", self._config.host)
        self._async_cancel_timers()
        await self._async_teardown_client()
        await self.async_connect()

    async def async_shutdown(self) -> None:
        """Stop polling and log out. Safe to call more than once."""
        already_stopped = self._stop_requested
        self._stop_requested = True
        self._async_cancel_timers()
        await self._async_teardown_client()
        self._async_set_connected(False)
        self._async_set_state(PollState.STOPPED)
        if not already_stopped:
            _LOGGER.debug("Poller for router %s stopped", self._config.host)

    async def _async_teardown_client(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await self._async_logout(client)

    async def _async_logout(self, client: SrmClient) -> None:
        if not client.sid:
            return
        try:
            async with asyncio.timeout(SHUTDOWN_TIMEOUT):
                await client.logout()
        except (SrmError, TimeoutError) as err:
            _LOGGER.debug("Logout from router %s failed: %s", self._config.host, err)

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    async def async_poll(self) -> None:
        """Run one polling cycle and handle its failure."""
        async with self._cycle_lock:
            client = self._client
            if client is None or self._state is not PollState.POLLING:
                _LOGGER.debug("Router %s not connected, skipping poll", self._config.host)
                return

            self.last_update_attempt_time = dt_util.utcnow()
            try:
                await self._async_run_cycle(client)
            except SrmError as err:
                if client is not self._client:
                    # The session was replaced or torn down while this cycle ran
                    _LOGGER.debug(
                        "Ignoring failure of superseded cycle on %s: %s",
                        self._config.host,
                        err,
                    )
                    return
                self.last_error = err
                self._async_handle_cycle_failure(err)
                return

            self.last_error = None
            self.consecutive_failures = 0
            self.last_update_success_time = dt_util.utcnow()

    @callback
    def _async_handle_cycle_failure(self, err: SrmError) -> None:
        if isinstance(err, RemoteError) and err.is_session_error:
            _LOGGER.error(
                "Router %s is not connected (%s), reconnecting in %ss",
                self._config.host,
                err,
                NOT_CONNECTED_RECONNECT_DELAY,
            )
            self._async_schedule_reconnect(NOT_CONNECTED_RECONNECT_DELAY)
            return

        self.consecutive_failures += 1
        if self.consecutive_failures >= MAX_CONSECUTIVE_FAILURES:
            _LOGGER.error(
                "Polling router %s failed %d times in a row (%s), reconnecting in %ss",
                self._config.host,
                self.consecutive_failures,
                err,
                RECONNECT_DELAY,
            )
            self._async_schedule_reconnect(RECONNECT_DELAY)
            return

        _LOGGER.warning(
            "Polling router %s failed (attempt #%d of %d): %s",
            self._config.host,
            self.consecutive_failures,
            MAX_CONSECUTIVE_FAILURES,
            err,
        )

    @callback
    def _async_write(self, object_id: str, value: Any) -> None:
        self._store.async_set_state(object_id, value, ack=True)

    @callback
    def _async_write_json(self, object_id: str, value: Any) -> None:
        self._store.async_set_state(object_id, json.dumps(value), ack=True)

    async def _async_run_cycle(self, client: SrmClient) -> None:
        status = await client.get_connection_status()
        _LOGGER.debug("Connection status: %s", status)
        if not isinstance(status, Mapping):
            raise ProtocolError("Invalid response")
        ipv4 = _as_mapping(status.get("ipv4"))
        ipv6 = _as_mapping(status.get("ipv6"))
        self._async_write(OBJ_IPV4_STATUS, ipv4.get("conn_status"))
        self._async_write(OBJ_IPV4_IP, ipv4.get("ip"))
        self._async_write(OBJ_IPV6_STATUS, ipv6.get("conn_status"))
        self._async_write(OBJ_IPV6_IP, ipv6.get("ip"))

        devices = _as_records(await client.get_all_devices())
        _LOGGER.debug("Device list all: %s", devices)
        online = [device for device in devices if device.get("is_online") is True]
        online_wifi = [device for device in online if device.get("is_wireless") is True]
        online_ethernet = [
            device for device in online if device.get("is_wireless") is False
        ]
        self._async_write_json(OBJ_DEVICES_ALL, devices)
        self._async_write_json(OBJ_DEVICES_ONLINE, online)
        self._async_write_json(OBJ_DEVICES_ONLINE_WIFI, online_wifi)
        self._async_write_json(OBJ_DEVICES_ONLINE_ETHERNET, online_ethernet)

        nodes = _as_records(await client.get_mesh_nodes())
        _LOGGER.debug("Mesh nodes: %s", nodes)
        self._async_write_json(OBJ_DEVICES_MESH, nodes)
        for node_key, node in zip(assign_mesh_node_keys(nodes), nodes):
            self._async_write_mesh_node(node_key, node)

        traffic = await client.get_traffic("live")
        _LOGGER.debug("Live traffic: %s", traffic)
        self._async_write_json(OBJ_TRAFFIC_LIVE, traffic)

    @callback
    def _async_write_mesh_node(self, node_key: str, node: Mapping[str, Any]) -> None:
        created = False
        for object_id, definition in iter_mesh_node_objects(node_key):
            created |= self._store.async_ensure_object(object_id, definition)
        if created:
            _LOGGER.info("Found new mesh node %s", node.get("name"))

        for definition in MESH_NODE_OBJECTS:
            if definition.key == "signal_strength":
                # Older firmware reports the field without the underscore
                value = node.get("signalstrength", node.get("signal_strength"))
            else:
                value = node.get(definition.key)
            self._async_write(mesh_object_id(node_key, definition.key), value)
