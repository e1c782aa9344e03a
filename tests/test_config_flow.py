"""Tests for Synology SRM config flow."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from homeassistant.core import HomeAssistant
from homeassistant.data_entry_flow import FlowResultType
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.synology_srm.const import DOMAIN
from custom_components.synology_srm.pysrm import (
    RemoteError,
    RequestTimeoutError,
    TransportError,
)

USER_INPUT: dict[str, Any] = {
    "host": "192.168.1.1",
    "port": 8001,
    "username": "admin",
    "password": "secret",
    "scan_interval": 60,
    "verify_ssl": False,
}


@contextmanager
def _patch_login(error: Exception | None = None) -> Generator[MagicMock, None, None]:
    """Patch the client used for the test login and entry setup."""
    client = MagicMock()
    client.authenticate = AsyncMock(return_value="sid-1234", side_effect=error)
    client.logout = AsyncMock(return_value=None)
    with (
        patch(
            "custom_components.synology_srm.config_flow.SrmClient",
            return_value=client,
        ),
        patch(
            "custom_components.synology_srm.async_setup_entry",
            return_value=True,
        ),
    ):
        yield client


async def test_user_flow_success(hass: HomeAssistant) -> None:
    """Test a successful login creates the entry."""
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": "user"}
    )
    assert result["type"] == FlowResultType.FORM
    assert result["step_id"] == "user"

    with _patch_login() as client:
        result = await hass.config_entries.flow.async_configure(
            result["flow_id"], {**USER_INPUT, "scan_interval": 120}
        )
        await hass.async_block_till_done()

    assert result["type"] == FlowResultType.CREATE_ENTRY
    assert result["title"] == "Synology SRM 192.168.1.1"
    assert result["data"] == {**USER_INPUT, "scan_interval": 120}
    assert result["result"].unique_id == "192.168.1.1"
    client.authenticate.assert_awaited_once()
    assert client.authenticate.call_args.args[0] == "https://192.168.1.1:8001"
    client.logout.assert_awaited_once()


async def test_user_flow_invalid_host(hass: HomeAssistant) -> None:
    """Test hostnames are rejected before any login."""
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": "user"}
    )

    with _patch_login() as client:
        result = await hass.config_entries.flow.async_configure(
            result["flow_id"], {**USER_INPUT, "host": "router.local"}
        )

    assert result["type"] == FlowResultType.FORM
    assert result["errors"] == {"host": "invalid_host"}
    client.authenticate.assert_not_called()


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (RemoteError(400, "No such account or incorrect password"), "invalid_auth"),
        (RemoteError(105, "Insufficient user privilege"), "cannot_connect"),
        (RequestTimeoutError("Request timeout"), "cannot_connect"),
        (TransportError("Cannot connect"), "cannot_connect"),
        (RuntimeError("boom"), "unknown"),
    ],
)
async def test_user_flow_login_errors(
    hass: HomeAssistant, error: Exception, expected: str
) -> None:
    """Test login failures map onto form errors."""
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": "user"}
    )

    with _patch_login(error):
        result = await hass.config_entries.flow.async_configure(
            result["flow_id"], USER_INPUT
        )

    assert result["type"] == FlowResultType.FORM
    assert result["errors"] == {"base": expected}


async def test_user_flow_recovers_after_error(hass: HomeAssistant) -> None:
    """Test the form can be resubmitted after a failed login."""
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": "user"}
    )
    with _patch_login(TransportError("Cannot connect")):
        result = await hass.config_entries.flow.async_configure(
            result["flow_id"], USER_INPUT
        )
    assert result["errors"] == {"base": "cannot_connect"}

    with _patch_login():
        result = await hass.config_entries.flow.async_configure(
            result["flow_id"], USER_INPUT
        )
        await hass.async_block_till_done()

    assert result["type"] == FlowResultType.CREATE_ENTRY


async def test_user_flow_logout_failure_ignored(hass: HomeAssistant) -> None:
    """Test a failing logout after the test login still creates the entry."""
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": "user"}
    )

    with _patch_login() as client:
        client.logout.side_effect = TransportError("Cannot connect")
        result = await hass.config_entries.flow.async_configure(
            result["flow_id"], USER_INPUT
        )
        await hass.async_block_till_done()

    assert result["type"] == FlowResultType.CREATE_ENTRY


async def test_already_configured(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> None:
    """Test the same router cannot be added twice."""
    mock_config_entry.add_to_hass(hass)
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": "user"}
    )

    with _patch_login() as client:
        result = await hass.config_entries.flow.async_configure(
            result["flow_id"], USER_INPUT
        )

    assert result["type"] == FlowResultType.ABORT
    assert result["reason"] == "already_configured"
    client.authenticate.assert_not_called()


async def test_options_flow_creates_entry(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> None:
    """Test options flow stores the polling interval."""
    mock_config_entry.add_to_hass(hass)

    result = await hass.config_entries.options.async_init(mock_config_entry.entry_id)
    assert result["type"] == FlowResultType.FORM
    assert result["step_id"] == "init"

    result = await hass.config_entries.options.async_configure(
        result["flow_id"], {"scan_interval": 300}
    )

    assert result["type"] == FlowResultType.CREATE_ENTRY
    assert mock_config_entry.options == {"scan_interval": 300}
