"""Plugin runtime — registry, event bus, state store, lazy loader, zones.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus single-file providers in a local directory.
INVARIANT: Plugin failures are contained per slot, never zone-wide.
"""

from zonekit.plugins.event_bus import EventBus, Subscription
from zonekit.plugins.lifecycle import ZoneManager
from zonekit.plugins.loader import ChainResolver, HookResolver, ModuleResolver, PluginLoader
from zonekit.plugins.manager import PluginManager
from zonekit.plugins.registry import PluginRegistry
from zonekit.plugins.runtime import PluginRuntime
from zonekit.plugins.state import ABSENT, StateStore

__all__ = [
    "ABSENT",
    "ChainResolver",
    "EventBus",
    "HookResolver",
    "ModuleResolver",
    "PluginLoader",
    "PluginManager",
    "PluginRegistry",
    "PluginRuntime",
    "StateStore",
    "Subscription",
    "ZoneManager",
]
