"""Lazy plugin resolution.

A resolver turns a plugin id into whatever the plugin's module exports;
:class:`PluginLoader` turns that into a :class:`PluginDescriptor`,
deduplicating concurrent requests for the same id.

INVARIANT: Load failures are logged and re-raised as ``LoadError``.
"""

from __future__ import annotations

import asyncio
import importlib
import logging
from collections.abc import Awaitable, Callable, Mapping
from types import ModuleType
from typing import TYPE_CHECKING, Any

from zonekit.domain.descriptor import PluginDescriptor
from zonekit.domain.errors import DuplicateIdError, LoadError

if TYPE_CHECKING:
    from zonekit.plugins.manager import PluginManager
    from zonekit.plugins.registry import PluginRegistry

logger = logging.getLogger(__name__)

Resolver = Callable[[str], Awaitable[Any]]

EXPORT_NAMES = ("plugin", "PLUGIN", "default")


def as_descriptor(exported: Any) -> PluginDescriptor:
    """Coerce a resolver's export into a descriptor.

    Accepts a descriptor, a mapping of descriptor fields, or a module
    exposing one of :data:`EXPORT_NAMES`.
    """
    if isinstance(exported, ModuleType):
        for name in EXPORT_NAMES:
            if hasattr(exported, name):
                return as_descriptor(getattr(exported, name))
        msg = f"Module {exported.__name__} exports no plugin descriptor"
        raise LookupError(msg)
    if isinstance(exported, PluginDescriptor):
        return exported
    if isinstance(exported, Mapping):
        return PluginDescriptor.model_validate(dict(exported))
    msg = f"Cannot build a plugin descriptor from {type(exported).__name__}"
    raise TypeError(msg)


class ModuleResolver:
    """Import ``<package>.<plugin_id>`` in a worker thread."""

    def __init__(self, package: str | None = None) -> None:
        self.package = package

    def module_name(self, plugin_id: str) -> str:
        name = plugin_id.replace("-", "_")
        return f"{self.package}.{name}" if self.package else name

    async def __call__(self, plugin_id: str) -> ModuleType:
        return await asyncio.to_thread(importlib.import_module, self.module_name(plugin_id))


class HookResolver:
    """Look a plugin id up among descriptors contributed through pluggy."""

    def __init__(self, plugin_manager: PluginManager) -> None:
        self._pm = plugin_manager

    async def __call__(self, plugin_id: str) -> PluginDescriptor:
        descriptors = await asyncio.to_thread(self._pm.collect_descriptors)
        try:
            return descriptors[plugin_id]
        except KeyError:
            msg = f"No provider contributes plugin {plugin_id!r}"
            raise LookupError(msg) from None


class ChainResolver:
    """Try resolvers in order; the first success wins.

    When every resolver fails, the last one's error propagates.
    """

    def __init__(self, *resolvers: Resolver) -> None:
        if not resolvers:
            msg = "ChainResolver needs at least one resolver"
            raise ValueError(msg)
        self._resolvers = resolvers

    async def __call__(self, plugin_id: str) -> Any:
        *fallbacks, last = self._resolvers
        for resolver in fallbacks:
            try:
                return await resolver(plugin_id)
            except Exception as exc:
                logger.debug("Resolver %r failed for %s: %s", resolver, plugin_id, exc)
        return await last(plugin_id)


class PluginLoader:
    """Resolve plugin ids to descriptors on first use.

    Parameters:
        resolver: Async callable ``resolver(plugin_id) -> export``.
        registry: When given, resolved descriptors that are not yet
            registered are registered.
        timeout: Seconds allowed per underlying load; ``None`` waits
            as long as the resolver takes.

    Concurrent ``resolve`` calls for the same id share one in-flight
    task. Callers await it through :func:`asyncio.shield`, so a caller
    that gives up does not cancel the load for the others. Successful
    results are cached; failures are not, so a later call retries.
    """

    def __init__(
        self,
        resolver: Resolver,
        *,
        registry: PluginRegistry | None = None,
        timeout: float | None = None,
    ) -> None:
        self._resolver = resolver
        self._registry = registry
        self._timeout = timeout
        self._resolved: dict[str, PluginDescriptor] = {}
        self._inflight: dict[str, asyncio.Task[PluginDescriptor]] = {}

    async def resolve(self, plugin_id: str) -> PluginDescriptor:
        """Return the descriptor for *plugin_id*, loading it if needed.

        Raises:
            LoadError: the resolver failed, timed out or exported
                something that is not a matching descriptor.
        """
        cached = self._resolved.get(plugin_id)
        if cached is not None:
            return cached

        task = self._inflight.get(plugin_id)
        if task is None:
            task = asyncio.get_running_loop().create_task(
                self._load(plugin_id), name=f"zonekit-load-{plugin_id}"
            )
            task.add_done_callback(_consume_exception)
            self._inflight[plugin_id] = task
        return await asyncio.shield(task)

    def is_cached(self, plugin_id: str) -> bool:
        return plugin_id in self._resolved

    def is_loading(self, plugin_id: str) -> bool:
        return plugin_id in self._inflight

    def forget(self, plugin_id: str) -> None:
        """Drop the cached descriptor for *plugin_id*."""
        self._resolved.pop(plugin_id, None)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _load(self, plugin_id: str) -> PluginDescriptor:
        try:
            try:
                async with asyncio.timeout(self._timeout):
                    exported = await self._resolver(plugin_id)
                descriptor = as_descriptor(exported)
                if descriptor.id != plugin_id:
                    msg = f"Resolved descriptor has id {descriptor.id!r}"
                    raise LookupError(msg)
                self._materialize(descriptor)
            except Exception as exc:
                error = LoadError(plugin_id, exc)
                logger.error("%s", error, exc_info=exc)
                raise error from exc
            self._resolved[plugin_id] = descriptor
            logger.debug("Resolved plugin %s", plugin_id)
            return descriptor
        finally:
            self._inflight.pop(plugin_id, None)

    def _materialize(self, descriptor: PluginDescriptor) -> None:
        if self._registry is None or descriptor.id in self._registry:
            return
        try:
            self._registry.register(descriptor)
        except DuplicateIdError:
            logger.debug("Plugin %s registered concurrently", descriptor.id)


def _consume_exception(task: asyncio.Task[Any]) -> None:
    # Failures are logged in _load; mark them retrieved for abandoned loads.
    if not task.cancelled():
        task.exception()
