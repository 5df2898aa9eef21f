"""Reserved event names and their payload shapes.

Plugins may publish any other event name; the runtime imposes no schema
on those.

- ``"<pluginId>:restore"``: runtime -> plugin, payload is the saved state.
- ``"plugin:stateChange"``: plugin -> runtime, payload ``{pluginId, state}``.
- ``"plugin:unregistered"``: registry -> runtime, payload ``{pluginId}``.
- ``"plugin:configChanged"`` / ``"plugin:sectionChanged"``: registry ->
  runtime, payload ``{pluginId, previous, current}``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

STATE_CHANGE = "plugin:stateChange"
UNREGISTERED = "plugin:unregistered"
CONFIG_CHANGED = "plugin:configChanged"
SECTION_CHANGED = "plugin:sectionChanged"


def restore_event(plugin_id: str) -> str:
    """Event name carrying *plugin_id*'s last saved state."""
    return f"{plugin_id}:restore"


class StateChange(BaseModel):
    """Payload of ``plugin:stateChange``."""

    model_config = {"frozen": True, "populate_by_name": True}

    plugin_id: str = Field(alias="pluginId", min_length=1)
    state: Any


class PluginChange(BaseModel):
    """Payload of the registry's change notifications."""

    model_config = {"frozen": True, "populate_by_name": True}

    plugin_id: str = Field(alias="pluginId")
    previous: Any = None
    current: Any = None

    def to_payload(self) -> dict[str, Any]:
        return {"pluginId": self.plugin_id, "previous": self.previous, "current": self.current}
