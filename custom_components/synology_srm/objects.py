"""Static object catalog for the Synology SRM state store."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Final

from .const import MESH_PREFIX

VALUE_STRING: Final = "string"
VALUE_NUMBER: Final = "number"
VALUE_BOOLEAN: Final = "boolean"
VALUE_JSON: Final = "json"

UNIT_BYTES_PER_SECOND: Final = "bytes/s"
UNIT_DEVICES: Final = "devices"

_FORBIDDEN_CHARS = re.compile(r"[^\w\-]+")


@dataclass(frozen=True, kw_only=True)
class SrmObjectDefinition:
    """Definition of one object in the state store."""

    key: str
    name: str
    value_type: str
    role: str
    unit: str | None = None
    read: bool = True
    write: bool = False
    default: Any = None


def _text(key: str, name: str) -> SrmObjectDefinition:
    return SrmObjectDefinition(
        key=key, name=name, value_type=VALUE_STRING, role="text", default=""
    )


def _json(key: str, name: str) -> SrmObjectDefinition:
    return SrmObjectDefinition(
        key=key, name=name, value_type=VALUE_JSON, role="json", default=""
    )


def _number(
    key: str, name: str, role: str = "value", unit: str | None = None
) -> SrmObjectDefinition:
    return SrmObjectDefinition(
        key=key, name=name, value_type=VALUE_NUMBER, role=role, unit=unit, default=0
    )


INFO_OBJECTS: Final[tuple[SrmObjectDefinition, ...]] = (
    SrmObjectDefinition(
        key="connection",
        name="Router connected",
        value_type=VALUE_BOOLEAN,
        role="indicator.connected",
        default=False,
    ),
)

ROUTER_OBJECTS: Final[tuple[SrmObjectDefinition, ...]] = (
    _text("IPV4_status", "WAN status of IPV4"),
    _text("IPV4_IP", "WAN IP of IPV4"),
    _text("IPV6_status", "WAN status of IPV6"),
    _text("IPV6_IP", "WAN IP of IPV6"),
)

DEVICE_OBJECTS: Final[tuple[SrmObjectDefinition, ...]] = (
    _json("all", "All known devices"),
    _json("online", "All online devices"),
    _json("online_wifi", "All online WIFI devices"),
    _json("online_ethernet", "All online ethernet devices"),
    _json("mesh", "Mesh nodes"),
)

TRAFFIC_OBJECTS: Final[tuple[SrmObjectDefinition, ...]] = (
    _json("live", "Live traffic"),
)

MESH_NODE_OBJECTS: Final[tuple[SrmObjectDefinition, ...]] = (
    _text("name", "Node name"),
    _text("band", "Uplink band"),
    _number(
        "connected_devices", "Number connected devices", unit=UNIT_DEVICES
    ),
    _number(
        "current_rate_rx",
        "Current receive rate",
        role="media.bitrate",
        unit=UNIT_BYTES_PER_SECOND,
    ),
    _number(
        "current_rate_tx",
        "Current transmit rate",
        role="media.bitrate",
        unit=UNIT_BYTES_PER_SECOND,
    ),
    _text("network_status", "Network status"),
    _number("node_id", "Node ID"),
    _text("node_status", "Node status"),
    _number("parent_node_id", "Parent node ID"),
    _number("signal_strength", "Signal strength"),
)

STATIC_OBJECTS: Final[dict[str, tuple[SrmObjectDefinition, ...]]] = {
    "info": INFO_OBJECTS,
    "router": ROUTER_OBJECTS,
    "devices": DEVICE_OBJECTS,
    "traffic": TRAFFIC_OBJECTS,
}


def iter_static_objects() -> Iterator[tuple[str, SrmObjectDefinition]]:
    """Yield ``(object_id, definition)`` for every fixed object."""
    for channel, definitions in STATIC_OBJECTS.items():
        for definition in definitions:
            yield f"{channel}.{definition.key}", definition


def sanitize_object_key(name: Any) -> str:
    """Turn a free-form name into a single object id segment.

    Dots separate id levels, so runs of anything other than word characters
    and hyphens collapse into a single underscore.
    """
    key = _FORBIDDEN_CHARS.sub("_", str(name or "").strip()).strip("_")
    return key or "unnamed"


def assign_mesh_node_keys(nodes: Iterable[Mapping[str, Any]]) -> list[str]:
    """Return one object key per mesh node, unique within ``nodes``.

    Nodes are keyed by name. When two names sanitise to the same key, the
    later node gets its ``node_id`` (or its position) appended.
    """
    keys: list[str] = []
    for index, node in enumerate(nodes):
        key = sanitize_object_key(node.get("name"))
        if key in keys:
            node_id = node.get("node_id")
            suffix = index if node_id is None else node_id
            key = f"{key}_{sanitize_object_key(str(suffix))}"
        while key in keys:
            key = f"{key}_{index}"
        keys.append(key)
    return keys


def mesh_object_id(node_key: str, field: str) -> str:
    """Return the object id of one field of a mesh node."""
    return f"{MESH_PREFIX}.{node_key}.{field}"


def iter_mesh_node_objects(node_key: str) -> Iterator[tuple[str, SrmObjectDefinition]]:
    """Yield ``(object_id, definition)`` for every field of a mesh node."""
    for definition in MESH_NODE_OBJECTS:
        yield mesh_object_id(node_key, definition.key), definition


def split_object_id(object_id: str) -> tuple[str, str | None, str]:
    """Split an object id into ``(channel, node_key, key)``.

    ``node_key`` is only set for mesh node objects.
    """
    channel, _, rest = object_id.partition(".")
    if channel == MESH_PREFIX:
        node_key, _, key = rest.rpartition(".")
        return channel, node_key or None, key
    return channel, None, rest
