"""The Synology SRM integration."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import (
    CONF_HOST,
    CONF_PASSWORD,
    CONF_PORT,
    CONF_SCAN_INTERVAL,
    CONF_USERNAME,
    EVENT_HOMEASSISTANT_STOP,
)
from homeassistant.core import Event, HomeAssistant
from homeassistant.exceptions import ConfigEntryError
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers import issue_registry as ir
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.typing import ConfigType

from .const import (
    CONF_VERIFY_SSL,
    DEFAULT_PORT,
    DEFAULT_SCAN_INTERVAL,
    DEFAULT_VERIFY_SSL,
    DOMAIN,
    PLATFORMS,
)
from .coordinator import SrmPoller, SrmPollerConfig
from .pysrm import SrmClient, is_valid_ipv4
from .services import async_setup_services
from .store import SrmStateStore

_LOGGER = logging.getLogger(__name__)

CONFIG_SCHEMA = cv.config_entry_only_config_schema(DOMAIN)


@dataclass
class SrmRuntimeData:
    """Runtime data for Synology SRM integration."""

    poller: SrmPoller
    store: SrmStateStore


type SrmConfigEntry = ConfigEntry[SrmRuntimeData]


def _build_poller_config(entry: ConfigEntry) -> SrmPollerConfig:
    """Build poller settings from entry data, with options taking precedence."""
    return SrmPollerConfig(
        host=entry.data[CONF_HOST],
        port=entry.data.get(CONF_PORT, DEFAULT_PORT),
        username=entry.data[CONF_USERNAME],
        password=entry.data[CONF_PASSWORD],
        scan_interval=entry.options.get(
            CONF_SCAN_INTERVAL,
            entry.data.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL),
        ),
        verify_ssl=entry.data.get(CONF_VERIFY_SSL, DEFAULT_VERIFY_SSL),
    )


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Set up the Synology SRM component."""
    await async_setup_services(hass)

    return True


async def async_setup_entry(hass: HomeAssistant, entry: SrmConfigEntry) -> bool:
    """Set up Synology SRM from a config entry."""
    _LOGGER.info("Setting up Synology SRM config entry: %s", entry.title)

    host = entry.data[CONF_HOST]
    if not is_valid_ipv4(host):
        raise ConfigEntryError(f"Invalid IPv4 address for the router: {host}")

    session = async_get_clientsession(hass)
    store = SrmStateStore(hass, entry.entry_id)
    poller = SrmPoller(
        hass,
        store,
        _build_poller_config(entry),
        lambda: SrmClient(session),
    )

    entry.runtime_data = SrmRuntimeData(poller=poller, store=store)

    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    async def _async_handle_stop(event: Event) -> None:
        await poller.async_shutdown()

    entry.async_on_unload(
        hass.bus.async_listen_once(EVENT_HOMEASSISTANT_STOP, _async_handle_stop)
    )

    # Entities subscribe to the store before the first values arrive
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    await poller.async_start()

    return True


async def async_unload_entry(hass: HomeAssistant, entry: SrmConfigEntry) -> bool:
    """Unload a config entry."""
    _LOGGER.info("Unloading Synology SRM config entry: %s", entry.title)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)

    await entry.runtime_data.poller.async_shutdown()

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: SrmConfigEntry) -> None:
    """Remove a config entry."""
    ir.async_delete_issue(hass, DOMAIN, f"cannot_connect_{entry.entry_id}")


async def _async_update_listener(hass: HomeAssistant, entry: SrmConfigEntry) -> None:
    """Handle options updates by reloading the entry."""
    await hass.config_entries.async_reload(entry.entry_id)
