"""Diagnostics support for Synology SRM integration."""

from __future__ import annotations

from datetime import datetime
import re
import traceback
from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.const import CONF_HOST, CONF_PASSWORD, CONF_USERNAME
from homeassistant.core import HomeAssistant
from homeassistant.util import dt as dt_util

from . import SrmConfigEntry

TO_REDACT = {
    CONF_HOST,
    CONF_PASSWORD,
    CONF_USERNAME,
    "unique_id",
}

_REDACT_PATTERNS = (
    re.compile(r"\b(?:\d{1,3}\.){3}\d{1,3}\b"),
    re.compile(r"\b(?:[0-9A-Fa-f]{2}[:-]){5}[0-9A-Fa-f]{2}\b"),
)


def _redact_text(text: str) -> str:
    """Redact IP and MAC addresses from text."""
    redacted = text
    for pattern in _REDACT_PATTERNS:
        redacted = pattern.sub("**REDACTED**", redacted)
    return redacted


def _format_exception(exc: BaseException | None) -> dict[str, Any] | None:
    """Format exception with full traceback for diagnostics."""
    if exc is None:
        return None

    result: dict[str, Any] = {
        "type": type(exc).__name__,
        "message": _redact_text(str(exc)),
        "traceback": [
            _redact_text(line)
            for line in traceback.format_exception(type(exc), exc, exc.__traceback__)
        ],
    }
    code = getattr(exc, "code", None)
    if code is not None:
        result["code"] = code

    # Include the original cause if this is a chained exception
    if exc.__cause__ is not None:
        result["cause"] = {
            "type": type(exc.__cause__).__name__,
            "message": _redact_text(str(exc.__cause__)),
        }

    return result


def _format_datetime(dt: datetime | None) -> str | None:
    """Format datetime as ISO string with timezone."""
    if dt is None:
        return None
    return dt.isoformat()


def _redact_snapshot(snapshot: dict[str, Any]) -> dict[str, Any]:
    return {
        object_id: {
            **entry,
            "val": _redact_text(entry["val"])
            if isinstance(entry["val"], str)
            else entry["val"],
        }
        for object_id, entry in snapshot.items()
    }


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: SrmConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    poller = entry.runtime_data.poller
    store = entry.runtime_data.store

    now = dt_util.now()

    last_success_time = poller.last_update_success_time
    time_since_success = None
    if last_success_time is not None:
        delta = now - last_success_time
        time_since_success = f"{delta.total_seconds():.1f} seconds ago"

    return {
        "entry": {
            "title": _redact_text(entry.title),
            "data": async_redact_data(dict(entry.data), TO_REDACT),
            "options": dict(entry.options),
        },
        "poller": {
            "state": str(poller.state),
            "scan_interval": poller.config.interval,
            "timer_armed": poller.timer_armed,
            "stop_requested": poller.stop_requested,
            "last_update_success_time": _format_datetime(last_success_time),
            "time_since_last_success": time_since_success,
            "last_update_attempt_time": _format_datetime(
                poller.last_update_attempt_time
            ),
            "consecutive_failures": poller.consecutive_failures,
            "diagnostics_generated_at": _format_datetime(now),
        },
        "objects": _redact_snapshot(store.async_snapshot()),
        "last_exception": _format_exception(poller.last_error),
    }
