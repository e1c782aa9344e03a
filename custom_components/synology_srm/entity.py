"""Base entity for Synology SRM store objects."""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import callback
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity import Entity

from .const import signal_state_updated
from .device_info import build_mesh_node_device_info, build_router_device_info
from .objects import SrmObjectDefinition, split_object_id
from .store import SrmStateStore, SrmStoredState


class SrmObjectEntity(Entity):
    """Entity mirroring one object of the state store.

    The entity never polls; it re-renders whenever the store dispatches an
    update for its object id.
    """

    _attr_has_entity_name = True
    _attr_should_poll = False

    def __init__(
        self,
        entry: ConfigEntry,
        store: SrmStateStore,
        object_id: str,
        definition: SrmObjectDefinition,
    ) -> None:
        """Initialize the entity."""
        self._store = store
        self._object_id = object_id
        self._definition = definition

        self._attr_unique_id = f"{entry.entry_id}_{object_id}"
        self._attr_name = definition.name

        _, node_key, _ = split_object_id(object_id)
        if node_key is None:
            self._attr_device_info = build_router_device_info(entry)
        else:
            self._attr_device_info = build_mesh_node_device_info(entry, node_key)

    @property
    def object_id(self) -> str:
        return self._object_id

    @property
    def stored_state(self) -> SrmStoredState | None:
        """Return the current store entry for this object."""
        return self._store.get_state(self._object_id)

    @property
    def available(self) -> bool:
        return self.stored_state is not None

    async def async_added_to_hass(self) -> None:
        """Subscribe to store updates."""
        await super().async_added_to_hass()
        self.async_on_remove(
            async_dispatcher_connect(
                self.hass,
                signal_state_updated(self._store.entry_id, self._object_id),
                self._async_handle_update,
            )
        )

    @callback
    def _async_handle_update(self) -> None:
        self.async_write_ha_state()
