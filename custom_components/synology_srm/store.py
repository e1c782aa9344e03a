"""Key-value state store backing the Synology SRM entities.

The poller writes confirmed router values here; entities subscribe to the
dispatcher signals and render whatever the store holds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_send
from homeassistant.util import dt as dt_util

from .const import signal_object_added, signal_state_updated
from .objects import SrmObjectDefinition

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SrmStoredState:
    """A value together with its acknowledgement flag."""

    value: Any
    ack: bool
    last_changed: datetime


class SrmStateStore:
    """Per-entry object catalog and state values."""

    def __init__(self, hass: HomeAssistant, entry_id: str) -> None:
        """Initialize an empty store."""
        self._hass = hass
        self.entry_id = entry_id
        self._objects: dict[str, SrmObjectDefinition] = {}
        self._states: dict[str, SrmStoredState] = {}

    @property
    def object_ids(self) -> list[str]:
        """Return all known object ids in creation order."""
        return list(self._objects)

    def get_object(self, object_id: str) -> SrmObjectDefinition | None:
        return self._objects.get(object_id)

    def get_state(self, object_id: str) -> SrmStoredState | None:
        return self._states.get(object_id)

    @callback
    def async_ensure_object(
        self, object_id: str, definition: SrmObjectDefinition
    ) -> bool:
        """Create the object if it does not exist yet.

        Returns:
            True if the object was created by this call
        """
        if not object_id or any(not part for part in object_id.split(".")):
            raise ValueError(f"Invalid object id: {object_id!r}")
        if object_id in self._objects:
            return False
        self._objects[object_id] = definition
        _LOGGER.debug("Created object %s", object_id)
        async_dispatcher_send(
            self._hass, signal_object_added(self.entry_id), object_id, definition
        )
        return True

    @callback
    def async_set_state(self, object_id: str, value: Any, *, ack: bool = True) -> None:
        """Store a value for an existing object and notify subscribers."""
        if object_id not in self._objects:
            raise KeyError(f"Unknown object id: {object_id}")
        self._states[object_id] = SrmStoredState(
            value=value, ack=ack, last_changed=dt_util.utcnow()
        )
        async_dispatcher_send(
            self._hass, signal_state_updated(self.entry_id, object_id)
        )

    @callback
    def async_snapshot(self) -> dict[str, Any]:
        """Return ``{object_id: {"val": ..., "ack": ...}}`` for diagnostics."""
        return {
            object_id: {"val": state.value, "ack": state.ack}
            for object_id, state in self._states.items()
        }
