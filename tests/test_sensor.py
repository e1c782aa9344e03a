"""Tests for Synology SRM sensor and binary sensor platforms."""

from __future__ import annotations

from datetime import timedelta

from homeassistant.components.sensor import SensorDeviceClass
from homeassistant.const import STATE_OFF, STATE_ON, UnitOfDataRate
from homeassistant.core import HomeAssistant
from homeassistant.helpers import device_registry as dr
from homeassistant.helpers import entity_registry as er
from homeassistant.util import dt as dt_util
from pytest_homeassistant_custom_component.common import (
    MockConfigEntry,
    async_fire_time_changed,
)

from custom_components.synology_srm.const import DOMAIN
from custom_components.synology_srm.objects import SrmObjectDefinition
from custom_components.synology_srm.sensor import build_sensor_description

from tests.conftest import create_mock_client, get_entity_id, patch_srm_integration


async def _setup(hass: HomeAssistant, entry: MockConfigEntry, client=None):
    entry.add_to_hass(hass)
    with patch_srm_integration(client) as mock_client:
        await hass.config_entries.async_setup(entry.entry_id)
        await hass.async_block_till_done()
    return mock_client


async def _unload(hass: HomeAssistant, entry: MockConfigEntry) -> None:
    await hass.config_entries.async_unload(entry.entry_id)
    await hass.async_block_till_done()


async def test_connection_binary_sensor(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> None:
    """Test the connectivity indicator follows the login state."""
    await _setup(hass, mock_config_entry)

    entity_id = get_entity_id(
        hass, "binary_sensor", mock_config_entry.entry_id, "info.connection"
    )
    assert entity_id is not None
    state = hass.states.get(entity_id)
    assert state is not None
    assert state.state == STATE_ON
    assert state.attributes["device_class"] == "connectivity"

    entry = er.async_get(hass).async_get(entity_id)
    assert entry is not None
    assert entry.entity_category == "diagnostic"

    await _unload(hass, mock_config_entry)


async def test_connection_off_after_shutdown(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> None:
    """Test the indicator turns off when the poller stops."""
    await _setup(hass, mock_config_entry)
    entity_id = get_entity_id(
        hass, "binary_sensor", mock_config_entry.entry_id, "info.connection"
    )

    await mock_config_entry.runtime_data.poller.async_shutdown()
    await hass.async_block_till_done()

    assert hass.states.get(entity_id).state == STATE_OFF

    await _unload(hass, mock_config_entry)


async def test_device_list_sensors(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> None:
    """Test JSON objects expose the entry count and the decoded entries."""
    await _setup(hass, mock_config_entry)

    entity_id = get_entity_id(
        hass, "sensor", mock_config_entry.entry_id, "devices.online"
    )
    state = hass.states.get(entity_id)
    assert state is not None
    assert state.state == "6"
    assert len(state.attributes["entries"]) == 6

    wifi = hass.states.get(
        get_entity_id(hass, "sensor", mock_config_entry.entry_id, "devices.online_wifi")
    )
    assert wifi.state == "2"

    ipv4 = hass.states.get(
        get_entity_id(hass, "sensor", mock_config_entry.entry_id, "router.IPV4_IP")
    )
    assert ipv4.state == "203.0.113.5"

    await _unload(hass, mock_config_entry)


async def test_sensor_updates_on_poll(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> None:
    """Test sensors follow the next polling cycle."""
    client = await _setup(hass, mock_config_entry)
    entity_id = get_entity_id(
        hass, "sensor", mock_config_entry.entry_id, "devices.online"
    )
    assert hass.states.get(entity_id).state == "6"

    client.get_all_devices.return_value = [{"mac": "a", "is_online": True}]
    async_fire_time_changed(hass, dt_util.utcnow() + timedelta(seconds=61))
    await hass.async_block_till_done()

    assert hass.states.get(entity_id).state == "1"

    await _unload(hass, mock_config_entry)


async def test_mesh_node_sensors(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> None:
    """Test mesh node sensors are attached to their own device."""
    await _setup(hass, mock_config_entry)

    entity_id = get_entity_id(
        hass, "sensor", mock_config_entry.entry_id, "mesh.Living_room.current_rate_rx"
    )
    assert entity_id is not None
    state = hass.states.get(entity_id)
    assert float(state.state) == 1200
    assert state.attributes["device_class"] == SensorDeviceClass.DATA_RATE
    assert state.attributes["unit_of_measurement"] == UnitOfDataRate.BYTES_PER_SECOND

    device_registry = dr.async_get(hass)
    router = device_registry.async_get_device(
        identifiers={(DOMAIN, mock_config_entry.entry_id)}
    )
    node = device_registry.async_get_device(
        identifiers={(DOMAIN, f"{mock_config_entry.entry_id}_mesh_Living_room")}
    )
    assert router is not None
    assert node is not None
    assert node.via_device_id == router.id
    assert er.async_get(hass).async_get(entity_id).device_id == node.id

    await _unload(hass, mock_config_entry)


async def test_mesh_node_added_later(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> None:
    """Test nodes joining the mesh get sensors on the fly."""
    client = create_mock_client(mesh_nodes=[])
    await _setup(hass, mock_config_entry, client)
    assert (
        get_entity_id(hass, "sensor", mock_config_entry.entry_id, "mesh.Office.node_status")
        is None
    )

    client.get_mesh_nodes.return_value = [{"name": "Office", "node_status": "online"}]
    await mock_config_entry.runtime_data.poller.async_poll()
    await hass.async_block_till_done()

    entity_id = get_entity_id(
        hass, "sensor", mock_config_entry.entry_id, "mesh.Office.node_status"
    )
    assert entity_id is not None
    assert hass.states.get(entity_id).state == "online"

    await _unload(hass, mock_config_entry)


def test_sensor_descriptions() -> None:
    """Test units map onto device and state classes."""
    rate = build_sensor_description(
        "mesh.Office.current_rate_tx",
        SrmObjectDefinition(
            key="current_rate_tx",
            name="Current transmit rate",
            value_type="number",
            role="media.bitrate",
            unit="bytes/s",
        ),
    )
    node_id = build_sensor_description(
        "mesh.Office.node_id",
        SrmObjectDefinition(key="node_id", name="Node ID", value_type="number", role="value"),
    )

    assert rate.device_class == SensorDeviceClass.DATA_RATE
    assert rate.native_unit_of_measurement == UnitOfDataRate.BYTES_PER_SECOND
    assert node_id.entity_category == "diagnostic"
    assert node_id.device_class is None
