"""Fixtures for Synology SRM integration tests."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from homeassistant.core import HomeAssistant
from homeassistant.helpers import entity_registry as er
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.synology_srm.const import DOMAIN

ROUTER_HOST = "192.168.1.1"

DEVICES: list[dict[str, Any]] = [
    {"mac": "00:11:32:00:00:01", "ip_addr": "192.168.1.10", "is_online": True, "is_wireless": True},
    {"mac": "00:11:32:00:00:02", "ip_addr": "192.168.1.11", "is_online": True, "is_wireless": True},
    {"mac": "00:11:32:00:00:03", "ip_addr": "192.168.1.12", "is_online": True, "is_wireless": False},
    {"mac": "00:11:32:00:00:04", "ip_addr": "192.168.1.13", "is_online": True, "is_wireless": False},
    {"mac": "00:11:32:00:00:05", "ip_addr": "192.168.1.14", "is_online": True, "is_wireless": False},
    {"mac": "00:11:32:00:00:06", "ip_addr": "192.168.1.15", "is_online": True, "is_wireless": False},
    {"mac": "00:11:32:00:00:07", "ip_addr": "192.168.1.16", "is_online": False, "is_wireless": True},
    {"mac": "00:11:32:00:00:08", "ip_addr": "192.168.1.17", "is_online": False, "is_wireless": False},
    {"mac": "00:11:32:00:00:09", "ip_addr": "192.168.1.18", "is_online": False, "is_wireless": True},
    {"mac": "00:11:32:00:00:0a", "ip_addr": "192.168.1.19", "is_online": False, "is_wireless": False},
]

MESH_NODES: list[dict[str, Any]] = [
    {
        "name": "Living room",
        "band": "5G",
        "connected_devices": 3,
        "current_rate_rx": 1200,
        "current_rate_tx": 800,
        "network_status": "online",
        "node_id": 0,
        "node_status": "online",
        "parent_node_id": -1,
        "signalstrength": 100,
    },
]

CONNECTION_STATUS: dict[str, Any] = {
    "ipv4": {"conn_status": "normal", "ip": "203.0.113.5"},
    "ipv6": {"conn_status": "not_connected", "ip": ""},
}

TRAFFIC: list[dict[str, Any]] = [
    {"deviceID": "00:11:32:00:00:01", "download": 1024, "upload": 256},
    {"deviceID": "00:11:32:00:00:03", "download": 4096, "upload": 512},
]


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations):
    """Enable custom components in HA test harness."""
    yield


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Basic config entry for one router, keyed by its IP address."""
    return MockConfigEntry(
        domain=DOMAIN,
        title=f"Synology SRM {ROUTER_HOST}",
        unique_id=ROUTER_HOST,
        data={
            "host": ROUTER_HOST,
            "port": 8001,
            "username": "admin",
            "password": "secret",
            "scan_interval": 60,
            "verify_ssl": False,
        },
    )


def create_mock_client(
    *,
    auth_error: Exception | None = None,
    devices: list[dict[str, Any]] | Exception | None = None,
    mesh_nodes: list[dict[str, Any]] | None = None,
) -> MagicMock:
    """Create a mock SrmClient.

    Args:
        auth_error: Exception to raise from authenticate.
        devices: Device list to return, or Exception to raise.
        mesh_nodes: Mesh nodes to return.

    Returns:
        Configured MagicMock simulating SrmClient.
    """
    client = MagicMock()
    client.sid = None if auth_error else "sid-1234"
    client.authenticate = AsyncMock(return_value="sid-1234", side_effect=auth_error)
    client.logout = AsyncMock(return_value=None)
    client.get_connection_status = AsyncMock(return_value=CONNECTION_STATUS)
    if isinstance(devices, Exception):
        client.get_all_devices = AsyncMock(side_effect=devices)
    else:
        client.get_all_devices = AsyncMock(
            return_value=devices if devices is not None else DEVICES
        )
    client.get_mesh_nodes = AsyncMock(
        return_value=mesh_nodes if mesh_nodes is not None else MESH_NODES
    )
    client.get_traffic = AsyncMock(return_value=TRAFFIC)
    client.add_wake_on_lan = AsyncMock(return_value=None)
    client.wake_on_lan = AsyncMock(return_value=None)
    client.switch_smart_wan = AsyncMock(return_value={})
    return client


@contextmanager
def patch_srm_integration(
    client: MagicMock | None = None,
) -> Generator[MagicMock, None, None]:
    """Patch SrmClient for integration tests.

    Args:
        client: Mock client, created if not provided.

    Yields:
        The mock client.
    """
    client = client or create_mock_client()
    with patch("custom_components.synology_srm.SrmClient", return_value=client):
        yield client


def get_entity_id(hass: HomeAssistant, platform: str, entry_id: str, object_id: str) -> str | None:
    """Return the entity id created for a store object."""
    return er.async_get(hass).async_get_entity_id(
        platform, DOMAIN, f"{entry_id}_{object_id}"
    )


@pytest.fixture
def mock_srm_client() -> MagicMock:
    """Provide a mock client for direct poller tests."""
    return create_mock_client()
