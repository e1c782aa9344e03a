"""Tests for Synology SRM diagnostics."""

from __future__ import annotations

import json

from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.synology_srm.diagnostics import (
    _format_exception,
    _redact_text,
    async_get_config_entry_diagnostics,
)
from custom_components.synology_srm.pysrm import RemoteError

from tests.conftest import create_mock_client, patch_srm_integration


async def test_diagnostics_redacts_sensitive_data(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> None:
    """Test diagnostics redact credentials, addresses and MACs."""
    mock_config_entry.add_to_hass(hass)

    with patch_srm_integration():
        await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

        diagnostics = await async_get_config_entry_diagnostics(hass, mock_config_entry)

        await hass.config_entries.async_unload(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    data = diagnostics["entry"]["data"]
    assert data["password"] == "**REDACTED**"
    assert data["username"] == "**REDACTED**"
    assert data["host"] == "**REDACTED**"
    assert data["port"] == 8001

    assert diagnostics["poller"]["state"] == "polling"
    assert diagnostics["poller"]["scan_interval"] == 60
    assert diagnostics["poller"]["consecutive_failures"] == 0
    assert diagnostics["last_exception"] is None

    dumped = json.dumps(diagnostics)
    assert "secret" not in dumped
    assert "192.168.1." not in dumped
    assert "00:11:32:00:00:01" not in dumped
    assert diagnostics["objects"]["info.connection"] == {"val": True, "ack": True}


async def test_diagnostics_include_last_error(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> None:
    """Test the last login error is reported with its code."""
    mock_config_entry.add_to_hass(hass)
    client = create_mock_client(auth_error=RemoteError(400, "No such account or incorrect password"))

    with patch_srm_integration(client):
        await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

        diagnostics = await async_get_config_entry_diagnostics(hass, mock_config_entry)

        await hass.config_entries.async_unload(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    assert diagnostics["poller"]["state"] == "stopped"
    assert diagnostics["last_exception"]["type"] == "RemoteError"
    assert diagnostics["last_exception"]["code"] == 400


def test_redact_text() -> None:
    """Test IP and MAC addresses are masked."""
    assert _redact_text("host 10.0.0.1 mac 00:11:32:AA:BB:CC") == (
        "host **REDACTED** mac **REDACTED**"
    )


def test_format_exception_with_cause() -> None:
    """Test chained causes are included."""
    try:
        try:
            raise OSError("connect to 10.0.0.1 failed")
        except OSError as err:
            raise RemoteError(None, "Unknown error (no code)") from err
    except RemoteError as err:
        result = _format_exception(err)

    assert result is not None
    assert result["cause"]["type"] == "OSError"
    assert "10.0.0.1" not in result["cause"]["message"]
    assert "code" not in result
