"""Device info helpers for Synology SRM integration."""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST, CONF_PORT
from homeassistant.helpers.device_registry import DeviceInfo

from .const import DEFAULT_PORT, DOMAIN, MANUFACTURER


def get_router_identifier(entry: ConfigEntry) -> str:
    """Return the device identifier of the router itself."""
    return entry.entry_id


def get_mesh_node_identifier(entry: ConfigEntry, node_key: str) -> str:
    """Return the device identifier of one mesh node."""
    return f"{entry.entry_id}_mesh_{node_key}"


def build_router_device_info(entry: ConfigEntry) -> DeviceInfo:
    """Build DeviceInfo for the router."""
    host = entry.data[CONF_HOST]
    port = entry.data.get(CONF_PORT, DEFAULT_PORT)
    return DeviceInfo(
        identifiers={(DOMAIN, get_router_identifier(entry))},
        name=entry.title or f"Synology SRM {host}",
        manufacturer=MANUFACTURER,
        model="SRM router",
        configuration_url=f"https://{host}:{port}",
    )


def build_mesh_node_device_info(entry: ConfigEntry, node_key: str) -> DeviceInfo:
    """Build DeviceInfo for a mesh node, linked to the router.

    Nodes are keyed by their sanitised name, which doubles as display name.
    """
    return DeviceInfo(
        identifiers={(DOMAIN, get_mesh_node_identifier(entry, node_key))},
        name=node_key,
        manufacturer=MANUFACTURER,
        model="Mesh node",
        via_device=(DOMAIN, get_router_identifier(entry)),
    )
