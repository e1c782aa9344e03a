"""Config flow for Synology SRM integration."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant import config_entries
from homeassistant.const import (
    CONF_HOST,
    CONF_PASSWORD,
    CONF_PORT,
    CONF_SCAN_INTERVAL,
    CONF_USERNAME,
)
from homeassistant.core import HomeAssistant
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .const import (
    CONF_VERIFY_SSL,
    DEFAULT_PORT,
    DEFAULT_SCAN_INTERVAL,
    DEFAULT_VERIFY_SSL,
    DOMAIN,
    LOGIN_TIMEOUT,
    MIN_SCAN_INTERVAL,
)
from .helpers.flow_schemas import build_options_schema, build_user_schema
from .pysrm import RemoteError, SrmClient, SrmError, is_valid_ipv4

_LOGGER = logging.getLogger(__name__)


async def async_validate_login(hass: HomeAssistant, data: dict[str, Any]) -> None:
    """Log in to the router once and log out again.

    Raises:
        SrmError: If the router cannot be reached or rejects the login
    """
    client = SrmClient(async_get_clientsession(hass))
    await client.authenticate(
        f"https://{data[CONF_HOST]}:{data[CONF_PORT]}",
        data[CONF_USERNAME],
        data[CONF_PASSWORD],
        timeout=LOGIN_TIMEOUT,
        verify_ssl=data[CONF_VERIFY_SSL],
    )
    try:
        await client.logout()
    except SrmError as err:
        _LOGGER.debug("Logout after test login failed: %s", err)


class SrmConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Synology SRM."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Handle the router connection form."""
        errors: dict[str, str] = {}

        if user_input is not None:
            host = str(user_input[CONF_HOST]).strip()
            data = {
                CONF_HOST: host,
                CONF_PORT: int(user_input.get(CONF_PORT, DEFAULT_PORT)),
                CONF_USERNAME: user_input[CONF_USERNAME],
                CONF_PASSWORD: user_input[CONF_PASSWORD],
                CONF_SCAN_INTERVAL: max(
                    int(user_input.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL)),
                    MIN_SCAN_INTERVAL,
                ),
                CONF_VERIFY_SSL: bool(
                    user_input.get(CONF_VERIFY_SSL, DEFAULT_VERIFY_SSL)
                ),
            }

            if not is_valid_ipv4(host):
                errors[CONF_HOST] = "invalid_host"
            else:
                await self.async_set_unique_id(host)
                self._abort_if_unique_id_configured()

                try:
                    await async_validate_login(self.hass, data)
                except RemoteError as err:
                    _LOGGER.error("Router %s rejected the login: %s", host, err)
                    errors["base"] = (
                        "invalid_auth" if err.is_auth_error else "cannot_connect"
                    )
                except SrmError as err:
                    _LOGGER.error("Cannot connect to router %s: %s", host, err)
                    errors["base"] = "cannot_connect"
                except Exception:
                    _LOGGER.exception("Unexpected error while validating router %s", host)
                    errors["base"] = "unknown"
                else:
                    return self.async_create_entry(
                        title=f"Synology SRM {host}",
                        data=data,
                    )

        return self.async_show_form(
            step_id="user",
            data_schema=build_user_schema(user_input),
            errors=errors,
        )

    @staticmethod
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> config_entries.OptionsFlow:
        """Return the options flow."""
        return SrmOptionsFlow()


class SrmOptionsFlow(config_entries.OptionsFlow):
    """Handle Synology SRM options."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Manage the polling interval."""
        if user_input is not None:
            return self.async_create_entry(
                title="",
                data={
                    CONF_SCAN_INTERVAL: max(
                        int(user_input[CONF_SCAN_INTERVAL]), MIN_SCAN_INTERVAL
                    )
                },
            )

        current_scan_interval = self.config_entry.options.get(
            CONF_SCAN_INTERVAL,
            self.config_entry.data.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL),
        )
        return self.async_show_form(
            step_id="init",
            data_schema=build_options_schema(
                current_scan_interval=current_scan_interval
            ),
        )
