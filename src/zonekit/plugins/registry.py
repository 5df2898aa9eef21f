"""Authoritative plugin id -> descriptor store.

Descriptors are replaced, never mutated in place, and every read returns
a snapshot taken under the lock. When the registry is wired to an
:class:`~zonekit.plugins.event_bus.EventBus` it announces removals and
config/section changes so lifecycle managers can react.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from zonekit.domain.descriptor import PluginConfig
from zonekit.domain.errors import DuplicateIdError, InvalidSectionError, NotFoundError
from zonekit.domain.events import CONFIG_CHANGED, SECTION_CHANGED, UNREGISTERED, PluginChange
from zonekit.domain.types import is_valid_section

if TYPE_CHECKING:
    from typing import Any

    from zonekit.domain.descriptor import PluginDescriptor
    from zonekit.plugins.event_bus import EventBus

logger = logging.getLogger(__name__)


class PluginRegistry:
    """Thread-safe registry of plugin descriptors.

    Parameters:
        bus: Optional event bus that receives ``plugin:unregistered``,
            ``plugin:configChanged`` and ``plugin:sectionChanged``.
    """

    def __init__(self, bus: EventBus | None = None) -> None:
        self._bus = bus
        self._lock = threading.RLock()
        self._plugins: dict[str, PluginDescriptor] = {}
        self._sequence: dict[str, int] = {}
        self._counter = 0

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def register(self, descriptor: PluginDescriptor) -> PluginDescriptor:
        """Insert *descriptor*.

        Raises:
            InvalidSectionError: section is not one of the fixed zones.
            DuplicateIdError: a descriptor with the same id exists.
        """
        if not is_valid_section(descriptor.section):
            raise InvalidSectionError(descriptor.section)
        with self._lock:
            if descriptor.id in self._plugins:
                raise DuplicateIdError(descriptor.id)
            self._plugins[descriptor.id] = descriptor
            self._sequence[descriptor.id] = self._counter
            self._counter += 1
        logger.debug("Registered plugin %s in %s", descriptor.id, descriptor.section)
        return descriptor

    def unregister(self, plugin_id: str) -> None:
        """Remove *plugin_id*. Unknown ids are a no-op."""
        with self._lock:
            removed = self._plugins.pop(plugin_id, None)
            self._sequence.pop(plugin_id, None)
        if removed is None:
            return
        logger.debug("Unregistered plugin %s", plugin_id)
        self._announce(UNREGISTERED, PluginChange(plugin_id=plugin_id, previous=removed))

    def set_config(
        self, plugin_id: str, config: PluginConfig | dict[str, Any]
    ) -> PluginDescriptor:
        """Atomically replace the config of *plugin_id*."""
        if not isinstance(config, PluginConfig):
            config = PluginConfig.model_validate(config)
        with self._lock:
            previous = self._get(plugin_id)
            updated = previous.with_config(config)
            self._plugins[plugin_id] = updated
        self._announce(
            CONFIG_CHANGED,
            PluginChange(plugin_id=plugin_id, previous=previous.config, current=config),
        )
        return updated

    def set_section(self, plugin_id: str, section: str) -> PluginDescriptor:
        """Atomically move *plugin_id* to *section*, revalidating it."""
        if not is_valid_section(section):
            raise InvalidSectionError(section)
        with self._lock:
            previous = self._get(plugin_id)
            updated = previous.with_section(section)
            self._plugins[plugin_id] = updated
        if previous.section != section:
            self._announce(
                SECTION_CHANGED,
                PluginChange(plugin_id=plugin_id, previous=previous.section, current=section),
            )
        return updated

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_id(self, plugin_id: str) -> PluginDescriptor:
        """Return the descriptor for *plugin_id* or raise ``NotFoundError``."""
        with self._lock:
            return self._get(plugin_id)

    def get_by_section(self, section: str) -> list[PluginDescriptor]:
        """Descriptors in *section*, by ``order`` then registration sequence.

        Descriptors without an ``order`` sort after those with one.
        """
        if not is_valid_section(section):
            raise InvalidSectionError(section)
        with self._lock:
            matches = [
                (d, self._sequence[d.id]) for d in self._plugins.values() if d.section == section
            ]
        matches.sort(key=lambda pair: (pair[0].order is None, pair[0].order or 0, pair[1]))
        return [d for d, _ in matches]

    def ids(self) -> list[str]:
        """Registered ids in registration order."""
        with self._lock:
            return sorted(self._plugins, key=self._sequence.__getitem__)

    def all(self) -> list[PluginDescriptor]:
        """Every registered descriptor in registration order."""
        with self._lock:
            return [self._plugins[i] for i in sorted(self._plugins, key=self._sequence.__getitem__)]

    def __contains__(self, plugin_id: object) -> bool:
        with self._lock:
            return plugin_id in self._plugins

    def __len__(self) -> int:
        with self._lock:
            return len(self._plugins)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _get(self, plugin_id: str) -> PluginDescriptor:
        try:
            return self._plugins[plugin_id]
        except KeyError:
            raise NotFoundError(plugin_id) from None

    def _announce(self, event: str, change: PluginChange) -> None:
        if self._bus is not None:
            self._bus.publish(event, change.to_payload())
