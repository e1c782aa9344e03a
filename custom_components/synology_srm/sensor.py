"""Sensor platform for Synology SRM routers."""

from __future__ import annotations

import json
import logging
from typing import Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EntityCategory, UnitOfDataRate
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.typing import StateType

from . import SrmConfigEntry
from .const import signal_object_added
from .entity import SrmObjectEntity
from .objects import (
    UNIT_BYTES_PER_SECOND,
    UNIT_DEVICES,
    VALUE_BOOLEAN,
    VALUE_JSON,
    VALUE_NUMBER,
    SrmObjectDefinition,
)
from .store import SrmStateStore

_LOGGER = logging.getLogger(__name__)

# Identifiers of the mesh topology rather than measurements
_DIAGNOSTIC_KEYS = frozenset({"node_id", "parent_node_id"})


def build_sensor_description(
    object_id: str, definition: SrmObjectDefinition
) -> SensorEntityDescription:
    """Derive the entity description of a store object."""
    if definition.unit == UNIT_BYTES_PER_SECOND:
        return SensorEntityDescription(
            key=object_id,
            device_class=SensorDeviceClass.DATA_RATE,
            native_unit_of_measurement=UnitOfDataRate.BYTES_PER_SECOND,
            state_class=SensorStateClass.MEASUREMENT,
        )
    if definition.unit == UNIT_DEVICES:
        return SensorEntityDescription(
            key=object_id,
            native_unit_of_measurement=UNIT_DEVICES,
            state_class=SensorStateClass.MEASUREMENT,
        )
    if definition.key in _DIAGNOSTIC_KEYS:
        return SensorEntityDescription(
            key=object_id,
            entity_category=EntityCategory.DIAGNOSTIC,
        )
    return SensorEntityDescription(key=object_id)


def _decode_json(value: Any) -> Any:
    if not isinstance(value, str) or not value:
        return None
    try:
        return json.loads(value)
    except ValueError:
        _LOGGER.debug("Stored value is not valid JSON: %.80s", value)
        return None


class SrmSensor(SrmObjectEntity, SensorEntity):
    """Representation of a Synology SRM store object as sensor."""

    # Device lists can be far larger than the recorder attribute limit
    _unrecorded_attributes = frozenset({"entries"})

    def __init__(
        self,
        entry: ConfigEntry,
        store: SrmStateStore,
        object_id: str,
        definition: SrmObjectDefinition,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(entry, store, object_id, definition)
        self.entity_description = build_sensor_description(object_id, definition)

    @property
    def native_value(self) -> StateType:
        """Return the value of the sensor.

        JSON objects report the number of entries they hold.
        """
        state = self.stored_state
        if state is None or state.value is None:
            return None
        if self._definition.value_type == VALUE_JSON:
            decoded = _decode_json(state.value)
            if isinstance(decoded, (list, dict)):
                return len(decoded)
            return None
        if self._definition.value_type == VALUE_NUMBER:
            if isinstance(state.value, bool) or not isinstance(
                state.value, (int, float)
            ):
                return None
            return state.value
        return str(state.value)

    @property
    def extra_state_attributes(self) -> dict[str, Any] | None:
        """Expose the decoded payload of JSON objects."""
        if self._definition.value_type != VALUE_JSON:
            return None
        state = self.stored_state
        if state is None:
            return None
        return {"entries": _decode_json(state.value)}


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: SrmConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Synology SRM sensors based on a config entry."""
    store = config_entry.runtime_data.store

    @callback
    def _async_add_object(object_id: str, definition: SrmObjectDefinition) -> None:
        if definition.value_type == VALUE_BOOLEAN:
            return
        _LOGGER.debug("Adding sensor for %s", object_id)
        async_add_entities([SrmSensor(config_entry, store, object_id, definition)])

    config_entry.async_on_unload(
        async_dispatcher_connect(
            hass, signal_object_added(config_entry.entry_id), _async_add_object
        )
    )

    async_add_entities(
        SrmSensor(config_entry, store, object_id, definition)
        for object_id in store.object_ids
        if (definition := store.get_object(object_id)) is not None
        and definition.value_type != VALUE_BOOLEAN
    )
