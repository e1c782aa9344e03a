"""Binary sensor platform for Synology SRM routers."""

from __future__ import annotations

from homeassistant.components.binary_sensor import (
    BinarySensorDeviceClass,
    BinarySensorEntity,
    BinarySensorEntityDescription,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EntityCategory
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import SrmConfigEntry
from .const import OBJ_CONNECTION, signal_object_added
from .entity import SrmObjectEntity
from .objects import VALUE_BOOLEAN, SrmObjectDefinition
from .store import SrmStateStore

BINARY_SENSORS: dict[str, BinarySensorEntityDescription] = {
    OBJ_CONNECTION: BinarySensorEntityDescription(
        key=OBJ_CONNECTION,
        device_class=BinarySensorDeviceClass.CONNECTIVITY,
        entity_category=EntityCategory.DIAGNOSTIC,
    ),
}


class SrmBinarySensor(SrmObjectEntity, BinarySensorEntity):
    """Representation of a boolean Synology SRM store object."""

    def __init__(
        self,
        entry: ConfigEntry,
        store: SrmStateStore,
        object_id: str,
        definition: SrmObjectDefinition,
    ) -> None:
        """Initialize the binary sensor."""
        super().__init__(entry, store, object_id, definition)
        self.entity_description = BINARY_SENSORS.get(
            object_id, BinarySensorEntityDescription(key=object_id)
        )

    @property
    def is_on(self) -> bool | None:
        """Return the state of the binary sensor."""
        state = self.stored_state
        if state is None or state.value is None:
            return None
        return bool(state.value)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: SrmConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Synology SRM binary sensors based on a config entry."""
    store = config_entry.runtime_data.store

    @callback
    def _async_add_object(object_id: str, definition: SrmObjectDefinition) -> None:
        if definition.value_type != VALUE_BOOLEAN:
            return
        async_add_entities([SrmBinarySensor(config_entry, store, object_id, definition)])

    config_entry.async_on_unload(
        async_dispatcher_connect(
            hass, signal_object_added(config_entry.entry_id), _async_add_object
        )
    )

    async_add_entities(
        SrmBinarySensor(config_entry, store, object_id, definition)
        for object_id in store.object_ids
        if (definition := store.get_object(object_id)) is not None
        and definition.value_type == VALUE_BOOLEAN
    )
