"""Per-zone lifecycle manager.

A :class:`ZoneManager` owns one placement zone. Activation mounts every
enabled descriptor of its section, each inside its own isolation
boundary; state-change events are forwarded to the state store; teardown
unmounts everything and releases every subscription the zone created.

INVARIANT: One plugin's failure never affects another plugin's slot.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from zonekit.domain.errors import (
    InvalidSectionError,
    InvalidTransitionError,
    NotFoundError,
    PluginRuntimeError,
    SerializationError,
)
from zonekit.domain.events import (
    CONFIG_CHANGED,
    SECTION_CHANGED,
    STATE_CHANGE,
    UNREGISTERED,
    PluginChange,
    StateChange,
    restore_event,
)
from zonekit.domain.lifecycle import ZoneState, is_valid_transition
from zonekit.domain.result import Err, Ok, Slot
from zonekit.domain.types import is_valid_section
from zonekit.plugins.state import ABSENT

if TYPE_CHECKING:
    from zonekit.domain.descriptor import PluginConfig, PluginDescriptor
    from zonekit.plugins.event_bus import EventBus, EventHandler, Subscription
    from zonekit.plugins.registry import PluginRegistry
    from zonekit.plugins.state import StateStore

logger = logging.getLogger(__name__)


class ZoneManager:
    """Lifecycle state machine for one placement zone.

    Parameters:
        section: The zone this manager renders.
        registry: Source of descriptors.
        bus: Event bus for restore, state-change and registry events.
        store: Persistence for plugin state.
    """

    def __init__(
        self,
        section: str,
        registry: PluginRegistry,
        bus: EventBus,
        store: StateStore,
    ) -> None:
        if not is_valid_section(section):
            raise InvalidSectionError(section)
        self.section = section
        self._registry = registry
        self._bus = bus
        self._store = store
        self._lock = threading.RLock()
        self._state = ZoneState.IDLE
        self._slots: dict[str, Slot] = {}
        self._members: set[str] = set()
        self._configs: dict[str, PluginConfig] = {}
        self._owned: dict[str, list[Subscription]] = {}
        self._owners: dict[Subscription, set[str]] = {}
        self._tokens: list[Subscription] = []

    @property
    def state(self) -> ZoneState:
        return self._state

    @property
    def slots(self) -> list[Slot]:
        """Current slots in render order."""
        with self._lock:
            rank = {d.id: i for i, d in enumerate(self._registry.get_by_section(self.section))}
            return sorted(self._slots.values(), key=lambda s: rank.get(s.plugin_id, len(rank)))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def activate(self) -> list[Slot]:
        """Mount the zone's plugins and return the rendered slots.

        Activating a zone that is already ready returns its current slots.
        """
        with self._lock:
            if self._state in (ZoneState.READY, ZoneState.UPDATING):
                return self.slots
            self._transition(ZoneState.LOADING)
            self._tokens = [
                self._bus.subscribe(STATE_CHANGE, self._on_state_change),
                self._bus.subscribe(UNREGISTERED, self._on_unregistered),
                self._bus.subscribe(CONFIG_CHANGED, self._on_config_changed),
                self._bus.subscribe(SECTION_CHANGED, self._on_section_changed),
            ]
            for descriptor in self._registry.get_by_section(self.section):
                if not descriptor.config.enabled:
                    logger.debug("Skipping disabled plugin %s", descriptor.id)
                    continue
                self._mount(descriptor)
            self._transition(ZoneState.READY)
            failed = sum(1 for s in self._slots.values() if not s.ok)
            logger.debug(
                "Zone %s ready: %d slot(s), %d failed", self.section, len(self._slots), failed
            )
            return self.slots

    def deactivate(self) -> None:
        """Unmount every plugin and release every subscription. Idempotent."""
        with self._lock:
            if self._state is ZoneState.TORN_DOWN:
                return
            for plugin_id in list(self._slots):
                self._unmount(plugin_id)
            for token in self._tokens:
                token()
            self._tokens = []
            for plugin_id in list(self._owned):
                self._release(plugin_id)
            self._transition(ZoneState.TORN_DOWN)
            logger.debug("Zone %s torn down", self.section)

    def subscribe(self, owner_id: str, event: str, handler: EventHandler) -> Subscription:
        """Subscribe on behalf of *owner_id*; released when it unmounts."""
        token = self._bus.subscribe(event, handler)
        with self._lock:
            owned = self._owned.setdefault(owner_id, [])
            if token not in owned:
                owned.append(token)
            # The bus hands back one token per (event, handler) pair.
            self._owners.setdefault(token, set()).add(owner_id)
        return token

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_state_change(self, payload: Any) -> None:
        try:
            change = (
                payload if isinstance(payload, StateChange) else StateChange.model_validate(payload)
            )
        except ValidationError:
            logger.warning("Ignoring malformed %s payload: %r", STATE_CHANGE, payload)
            return

        plugin_id = change.plugin_id
        with self._lock:
            if plugin_id not in self._members:
                return
            try:
                self._store.save(plugin_id, change.state)
            except SerializationError as exc:
                logger.warning("Keeping previous state for plugin %s: %s", plugin_id, exc)
                return
            if self._state is not ZoneState.READY:
                # Loading, or a nested change raised from inside on_update.
                return
            self._transition(ZoneState.UPDATING)
            try:
                self._update(plugin_id, self._configs.get(plugin_id))
            finally:
                self._transition(ZoneState.READY)

    def _on_config_changed(self, payload: Any) -> None:
        change = PluginChange.model_validate(payload)
        descriptor = self._current(change.plugin_id)
        if descriptor is None or descriptor.section != self.section:
            return
        with self._lock:
            if self._state is not ZoneState.READY:
                return
            slot = self._slots.get(descriptor.id)
            if slot is None:
                if descriptor.config.enabled:
                    self._during_update(self._mount, descriptor)
                return
            if not descriptor.config.enabled:
                self._unmount(descriptor.id)
                return
            self._slots[descriptor.id] = Slot(descriptor, slot.outcome)
            if slot.ok:
                self._during_update(self._update, descriptor.id, change.previous)

    def _on_section_changed(self, payload: Any) -> None:
        change = PluginChange.model_validate(payload)
        with self._lock:
            if self._state is not ZoneState.READY:
                return
            if change.previous == self.section and change.plugin_id in self._slots:
                self._unmount(change.plugin_id)
            elif change.current == self.section:
                descriptor = self._current(change.plugin_id)
                if descriptor is not None and descriptor.config.enabled:
                    self._during_update(self._mount, descriptor)

    def _on_unregistered(self, payload: Any) -> None:
        change = PluginChange.model_validate(payload)
        with self._lock:
            if change.plugin_id in self._slots:
                self._unmount(change.plugin_id)

    # ------------------------------------------------------------------
    # Isolation boundary
    # ------------------------------------------------------------------

    def _mount(self, descriptor: PluginDescriptor) -> Slot:
        plugin_id = descriptor.id
        self._members.add(plugin_id)
        phase = "instantiate"
        try:
            instance = descriptor.factory(descriptor.config)
            phase = "restore"
            saved = self._store.load(plugin_id)
            if saved is not ABSENT:
                self._bus.publish(restore_event(plugin_id), saved)
            phase = "mount"
            on_mount = descriptor.hook("on_mount")
            if on_mount is not None:
                on_mount()
        except Exception as exc:
            slot = Slot(descriptor, Err(self._fail(plugin_id, exc, phase)))
        else:
            slot = Slot(descriptor, Ok(instance))
            self._configs[plugin_id] = descriptor.config
        self._slots[plugin_id] = slot
        if plugin_id not in self._registry:
            # Unregistered from inside its own factory or on_mount.
            self._unmount(plugin_id)
        return slot

    def _update(self, plugin_id: str, prev_config: PluginConfig | None) -> None:
        slot = self._slots.get(plugin_id)
        if slot is None or not slot.ok:
            return
        descriptor = self._current(plugin_id) or slot.descriptor
        on_update = descriptor.hook("on_update")
        if on_update is not None:
            try:
                on_update(prev_config if prev_config is not None else descriptor.config)
            except Exception as exc:
                self._slots[plugin_id] = Slot(
                    descriptor, Err(self._fail(plugin_id, exc, "update"))
                )
                return
        self._configs[plugin_id] = descriptor.config

    def _unmount(self, plugin_id: str) -> None:
        slot = self._slots.pop(plugin_id, None)
        self._members.discard(plugin_id)
        self._configs.pop(plugin_id, None)
        if slot is not None and slot.ok:
            on_unmount = slot.descriptor.hook("on_unmount")
            if on_unmount is not None:
                try:
                    on_unmount()
                except Exception as exc:
                    error = PluginRuntimeError(plugin_id, exc, "unmount")
                    logger.warning("%s", error, exc_info=exc)
        self._release(plugin_id)
        logger.debug("Unmounted plugin %s from %s", plugin_id, self.section)

    def _fail(self, plugin_id: str, exc: Exception, phase: str) -> PluginRuntimeError:
        error = PluginRuntimeError(plugin_id, exc, phase)
        logger.error("%s", error, exc_info=exc)
        self._members.discard(plugin_id)
        self._configs.pop(plugin_id, None)
        self._release(plugin_id)
        return error

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _release(self, plugin_id: str) -> None:
        for token in self._owned.pop(plugin_id, []):
            owners = self._owners.get(token, set())
            owners.discard(plugin_id)
            if owners:
                continue
            self._owners.pop(token, None)
            token()

    def _current(self, plugin_id: str) -> PluginDescriptor | None:
        try:
            return self._registry.get_by_id(plugin_id)
        except NotFoundError:
            return None

    def _during_update(self, fn: Any, *args: Any) -> None:
        self._transition(ZoneState.UPDATING)
        try:
            fn(*args)
        finally:
            self._transition(ZoneState.READY)

    def _transition(self, target: ZoneState) -> None:
        if not is_valid_transition(self._state, target):
            raise InvalidTransitionError(self.section, self._state, target)
        self._state = target
