"""PluginRuntime — explicit composition root for one application session.

Holds the registry, event bus, state store and (optionally) the lazy
loader, and hands out one :class:`ZoneManager` per section. Nothing here
is global: separate runtimes (one per test, say) never share state.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import TYPE_CHECKING, Any

from zonekit.domain.errors import InvalidSectionError, LoadError, ZonekitError
from zonekit.domain.lifecycle import ZoneState
from zonekit.plugins.event_bus import EventBus
from zonekit.plugins.lifecycle import ZoneManager
from zonekit.plugins.registry import PluginRegistry
from zonekit.plugins.state import StateStore

if TYPE_CHECKING:
    from collections.abc import Iterable
    from types import TracebackType

    from zonekit.config.models import PluginOverride
    from zonekit.config.settings import ZonekitSettings
    from zonekit.domain.descriptor import PluginDescriptor
    from zonekit.domain.result import Slot
    from zonekit.plugins.loader import PluginLoader
    from zonekit.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class PluginRuntime:
    """Registry, bus, store and loader wired together for a host.

    Parameters:
        registry: Defaults to a registry announcing on *bus*.
        bus: Defaults to a fresh :class:`EventBus`.
        store: Defaults to an in-memory :class:`StateStore`.
        loader: Needed only for :meth:`load_plugins`.
        overrides: Per-plugin config overrides applied at registration.
        plugin_manager: Discovery manager used by :meth:`register_discovered`.
    """

    def __init__(
        self,
        *,
        registry: PluginRegistry | None = None,
        bus: EventBus | None = None,
        store: StateStore | None = None,
        loader: PluginLoader | None = None,
        overrides: dict[str, PluginOverride] | None = None,
        plugin_manager: PluginManager | None = None,
    ) -> None:
        self.bus = bus if bus is not None else EventBus()
        self.registry = registry if registry is not None else PluginRegistry(self.bus)
        self.store = store if store is not None else StateStore()
        self.loader = loader
        self.plugin_manager = plugin_manager
        self._overrides = dict(overrides or {})
        self._zones: dict[str, ZoneManager] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: ZonekitSettings) -> PluginRuntime:
        """Build a runtime whose medium and resolvers come from *settings*."""
        from zonekit.infrastructure.media import MemoryMedium, SqliteMedium
        from zonekit.plugins.loader import ChainResolver, HookResolver, ModuleResolver, PluginLoader
        from zonekit.plugins.manager import PluginManager

        if settings.state.backend == "sqlite":
            from zonekit.infrastructure.database.engine import init_database

            medium: Any = SqliteMedium(init_database(settings.resolve_path(settings.state.path)))
        else:
            medium = MemoryMedium()

        loader_cfg = settings.loader
        pm = PluginManager()
        pm.discover_and_load(
            local_dir=(
                settings.resolve_path(loader_cfg.local_dir) if loader_cfg.local_dir else None
            ),
            entry_points=loader_cfg.entry_points,
        )
        resolvers: list[Any] = []
        if loader_cfg.package:
            resolvers.append(ModuleResolver(loader_cfg.package))
        resolvers.append(HookResolver(pm))

        return cls(
            store=StateStore(medium),
            loader=PluginLoader(ChainResolver(*resolvers), timeout=loader_cfg.timeout),
            overrides=settings.plugins,
            plugin_manager=pm,
        )

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, descriptor: PluginDescriptor) -> PluginDescriptor:
        """Apply host overrides to *descriptor* and register it."""
        return self.registry.register(self._with_overrides(descriptor))

    def register_discovered(self) -> list[str]:
        """Register every descriptor contributed by discovered providers.

        Already-registered ids are left alone; invalid sections are
        skipped with a warning. Returns the newly registered ids.
        """
        if self.plugin_manager is None:
            return []
        added: list[str] = []
        for plugin_id, descriptor in self.plugin_manager.collect_descriptors().items():
            if plugin_id in self.registry:
                continue
            try:
                self.register(descriptor)
            except InvalidSectionError as exc:
                logger.warning("Skipping discovered plugin %s: %s", plugin_id, exc)
                continue
            added.append(plugin_id)
        return added

    def unregister(self, plugin_id: str, *, clear_state: bool = False) -> None:
        """Unregister *plugin_id*; optionally drop its saved state too."""
        self.registry.unregister(plugin_id)
        if clear_state:
            self.store.clear(plugin_id)

    def configure(
        self,
        plugin_id: str,
        *,
        enabled: bool | None = None,
        section: str | None = None,
    ) -> PluginDescriptor:
        """Enable/disable a plugin or move it to another section."""
        descriptor = self.registry.get_by_id(plugin_id)
        if section is not None and section != descriptor.section:
            descriptor = self.registry.set_section(plugin_id, section)
        if enabled is not None and enabled != descriptor.config.enabled:
            config = descriptor.config.model_copy(update={"enabled": enabled})
            descriptor = self.registry.set_config(plugin_id, config)
        return descriptor

    # ------------------------------------------------------------------
    # Zones
    # ------------------------------------------------------------------

    def zone(self, section: str) -> ZoneManager:
        """The live manager for *section*, created if missing or torn down."""
        with self._lock:
            zone = self._zones.get(section)
            if zone is None or zone.state is ZoneState.TORN_DOWN:
                zone = ZoneManager(section, self.registry, self.bus, self.store)
                self._zones[section] = zone
            return zone

    def render_zone(self, section: str) -> list[Slot]:
        """Activate *section* and return its ordered slots."""
        return self.zone(section).activate()

    async def load_plugins(
        self, plugin_ids: Iterable[str], *, strict: bool = True
    ) -> list[PluginDescriptor]:
        """Resolve *plugin_ids* through the loader and register them.

        With ``strict`` the first ``LoadError`` is raised once every load
        has finished; otherwise failures are logged and skipped.
        """
        if self.loader is None:
            msg = "This runtime has no plugin loader"
            raise ZonekitError(msg)
        ids = list(plugin_ids)
        outcomes = await asyncio.gather(
            *(self.loader.resolve(i) for i in ids), return_exceptions=True
        )
        loaded: list[PluginDescriptor] = []
        errors: list[LoadError] = []
        for outcome in outcomes:
            if isinstance(outcome, LoadError):
                errors.append(outcome)
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            if outcome.id not in self.registry:
                self.register(outcome)
            loaded.append(self.registry.get_by_id(outcome.id))
        if errors and strict:
            raise errors[0]
        return loaded

    async def render_zone_async(self, section: str, lazy_ids: Iterable[str] = ()) -> list[Slot]:
        """Load *lazy_ids* (failures skipped), then render *section*."""
        await self.load_plugins(lazy_ids, strict=False)
        return self.render_zone(section)

    def deactivate_zone(self, section: str) -> None:
        with self._lock:
            zone = self._zones.pop(section, None)
        if zone is not None:
            zone.deactivate()

    def teardown(self) -> None:
        """Tear down every zone and drop every subscription."""
        with self._lock:
            zones = list(self._zones.values())
            self._zones.clear()
        for zone in zones:
            zone.deactivate()
        self.bus.clear_all()
        close = getattr(self.store.medium, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> PluginRuntime:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.teardown()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _with_overrides(self, descriptor: PluginDescriptor) -> PluginDescriptor:
        override = self._overrides.get(descriptor.id)
        if override is None:
            return descriptor
        update: dict[str, Any] = {"config": override.apply(descriptor.config)}
        if override.section is not None:
            update["section"] = override.section
        if override.order is not None:
            update["order"] = override.order
        return descriptor.model_copy(update=update)
