"""Services for Synology SRM routers."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import voluptuous as vol
from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers import config_validation as cv

from .const import DOMAIN
from .coordinator import PollState
from .pysrm import InvalidArgumentError, SrmClient, SrmError

if TYPE_CHECKING:
    from . import SrmConfigEntry

_LOGGER = logging.getLogger(__name__)

# Service names
SERVICE_RECONNECT = "reconnect"
SERVICE_WAKE_DEVICE = "wake_device"
SERVICE_SWITCH_SMART_WAN = "switch_smart_wan"

# Service schemas
ATTR_CONFIG_ENTRY_ID = "config_entry_id"
ATTR_MAC = "mac"
ATTR_HOST = "host"

_MAC_PATTERN = r"^([0-9A-Fa-f]{2}[:-]){5}[0-9A-Fa-f]{2}$"

SERVICE_RECONNECT_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_CONFIG_ENTRY_ID): cv.string,
    }
)

SERVICE_WAKE_DEVICE_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_CONFIG_ENTRY_ID): cv.string,
        vol.Required(ATTR_MAC): vol.All(cv.string, vol.Match(_MAC_PATTERN)),
        vol.Optional(ATTR_HOST): cv.string,
    }
)

SERVICE_SWITCH_SMART_WAN_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_CONFIG_ENTRY_ID): cv.string,
    }
)


def _get_entry_from_call(hass: HomeAssistant, call: ServiceCall) -> SrmConfigEntry:
    """Resolve the targeted config entry, defaulting to the only loaded one."""
    entry_id = call.data.get(ATTR_CONFIG_ENTRY_ID)
    if entry_id:
        entry = hass.config_entries.async_get_entry(entry_id)
        if (
            entry is None
            or entry.domain != DOMAIN
            or entry.state != ConfigEntryState.LOADED
        ):
            raise ServiceValidationError(
                translation_domain=DOMAIN,
                translation_key="invalid_config_entry",
                translation_placeholders={"config_entry_id": entry_id},
            )
        return entry

    loaded = [
        entry
        for entry in hass.config_entries.async_entries(DOMAIN)
        if entry.state == ConfigEntryState.LOADED
    ]
    if len(loaded) != 1:
        raise ServiceValidationError(
            translation_domain=DOMAIN,
            translation_key="config_entry_required",
        )
    return loaded[0]


def _get_connected_client(entry: SrmConfigEntry) -> SrmClient:
    poller = entry.runtime_data.poller
    client = poller.client
    if client is None or poller.state is not PollState.POLLING:
        raise HomeAssistantError(
            translation_domain=DOMAIN,
            translation_key="not_connected",
            translation_placeholders={"host": poller.config.host},
        )
    return client


async def _async_call_router(action: Callable[[], Awaitable[Any]]) -> Any:
    """Run a router call, mapping library errors onto Home Assistant errors."""
    try:
        return await action()
    except InvalidArgumentError as err:
        raise ServiceValidationError(
            translation_domain=DOMAIN,
            translation_key="invalid_argument",
            translation_placeholders={"error": str(err)},
        ) from err
    except SrmError as err:
        raise HomeAssistantError(
            translation_domain=DOMAIN,
            translation_key="command_failed",
            translation_placeholders={"error": str(err)},
        ) from err


async def async_reconnect(hass: HomeAssistant, call: ServiceCall) -> None:
    """Handle reconnect service call."""
    entry = _get_entry_from_call(hass, call)
    _LOGGER.info("Reconnect requested for %s", entry.title)
    await entry.runtime_data.poller.async_reconnect()


async def async_wake_device(hass: HomeAssistant, call: ServiceCall) -> None:
    """Handle wake_device service call.

    When a host name is given the device is registered for wake-on-LAN
    first, which the router requires for devices it has not seen yet.
    """
    entry = _get_entry_from_call(hass, call)
    client = _get_connected_client(entry)
    mac = call.data[ATTR_MAC]
    host = call.data.get(ATTR_HOST)

    if host:
        await _async_call_router(lambda: client.add_wake_on_lan(mac, host))
    await _async_call_router(lambda: client.wake_on_lan(mac))

    _LOGGER.info("Sent wake-on-LAN to %s via %s", mac, entry.title)


async def async_switch_smart_wan(hass: HomeAssistant, call: ServiceCall) -> None:
    """Handle switch_smart_wan service call."""
    entry = _get_entry_from_call(hass, call)
    client = _get_connected_client(entry)

    await _async_call_router(client.switch_smart_wan)

    _LOGGER.info("Switched smart WAN interfaces on %s", entry.title)


async def async_setup_services(hass: HomeAssistant) -> None:
    """Set up Synology SRM services.

    Services are registered once globally (idempotent registration).
    """
    async def handle_reconnect(call: ServiceCall) -> None:
        """Handle the reconnect service call."""
        await async_reconnect(hass, call)

    async def handle_wake_device(call: ServiceCall) -> None:
        """Handle the wake_device service call."""
        await async_wake_device(hass, call)

    async def handle_switch_smart_wan(call: ServiceCall) -> None:
        """Handle the switch_smart_wan service call."""
        await async_switch_smart_wan(hass, call)

    if not hass.services.has_service(DOMAIN, SERVICE_RECONNECT):
        hass.services.async_register(
            DOMAIN,
            SERVICE_RECONNECT,
            handle_reconnect,
            schema=SERVICE_RECONNECT_SCHEMA,
        )

    if not hass.services.has_service(DOMAIN, SERVICE_WAKE_DEVICE):
        hass.services.async_register(
            DOMAIN,
            SERVICE_WAKE_DEVICE,
            handle_wake_device,
            schema=SERVICE_WAKE_DEVICE_SCHEMA,
        )

    if not hass.services.has_service(DOMAIN, SERVICE_SWITCH_SMART_WAN):
        hass.services.async_register(
            DOMAIN,
            SERVICE_SWITCH_SMART_WAN,
            handle_switch_smart_wan,
            schema=SERVICE_SWITCH_SMART_WAN_SCHEMA,
        )
