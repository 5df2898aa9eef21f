"""Descriptor discovery via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus local directory discovery of single-file plugins.

INVARIANT: Discovery failures are warnings, never errors.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path

import pluggy
from pydantic import ValidationError

from zonekit.domain.descriptor import PluginDescriptor
from zonekit.plugins.hookspecs import PROJECT_NAME, ZonekitHookSpec

ENTRY_POINT_GROUP = "zonekit.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages discovery of packages that contribute plugin descriptors."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(ZonekitHookSpec)
        self._loaded: bool = False

    def discover_and_load(
        self,
        *,
        local_dir: Path | None = None,
        entry_points: bool = True,
    ) -> list[str]:
        """Discover providers from entry points and an optional local directory.

        Returns a list of loaded provider names.
        """
        if entry_points:
            self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
            self._normalize_plugin_instances()
        if local_dir is not None:
            self._discover_local(local_dir)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a provider instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered descriptor provider: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        """Unregister a provider instance."""
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        """Return names of all registered providers."""
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    def collect_descriptors(self) -> dict[str, PluginDescriptor]:
        """Gather descriptors from every provider, keyed by id.

        Invalid entries are skipped with a warning. When two providers
        contribute the same id, the first one collected wins.
        """
        descriptors: dict[str, PluginDescriptor] = {}
        for plugin in self._pm.get_plugins():
            provider = self._pm.get_name(plugin) or plugin.__class__.__name__
            hook = getattr(plugin, "zonekit_plugin_descriptors", None)
            if hook is None:
                continue
            try:
                contributed = hook()
            except Exception:
                logger.warning(
                    "Failed to collect descriptors from provider %s", provider, exc_info=True
                )
                continue
            for item in contributed or ():
                try:
                    descriptor = (
                        item
                        if isinstance(item, PluginDescriptor)
                        else PluginDescriptor.model_validate(item)
                    )
                except ValidationError:
                    logger.warning(
                        "Skipping invalid descriptor from provider %s", provider, exc_info=True
                    )
                    continue
                if descriptor.id in descriptors:
                    logger.warning(
                        "Duplicate descriptor %s from provider %s ignored", descriptor.id, provider
                    )
                    continue
                descriptors[descriptor.id] = descriptor
        return descriptors

    # ------------------------------------------------------------------
    # Local directory discovery
    # ------------------------------------------------------------------

    def _discover_local(self, local_dir: Path) -> None:
        """Scan *local_dir* for single-file Python providers.

        Each ``*.py`` file (excluding ``_``-prefixed names) is loaded as a
        module. Classes inside the module that carry pluggy hookimpl-decorated
        methods are instantiated and registered.

        Errors are logged as warnings, never raised.
        """
        if not local_dir.is_dir():
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module_name = f"zonekit_local_plugin_{py_file.stem}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, py_file)
                if spec is None or spec.loader is None:
                    logger.warning("Could not create module spec for %s", py_file)
                    continue
                module = importlib.util.module_from_spec(spec)
                sys.modules[module_name] = module
                spec.loader.exec_module(module)
            except Exception:
                logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
                sys.modules.pop(module_name, None)
                continue

            for _attr_name, obj in inspect.getmembers(module, inspect.isclass):
                if obj.__module__ != module_name:
                    continue
                if not self._has_hook_impls(obj):
                    continue
                try:
                    self.register_plugin(obj(), name=module_name)
                    logger.debug("Loaded local plugin %s from %s", obj.__name__, py_file)
                except Exception:
                    logger.warning(
                        "Failed to instantiate plugin class %s from %s",
                        obj.__name__,
                        py_file,
                        exc_info=True,
                    )

    def _normalize_plugin_instances(self) -> None:
        """Replace registered provider classes with instantiated objects.

        Entry-point loading may register a class directly, which leaves
        ``self`` unbound when the hook is called.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            if not self._has_hook_impls(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)

            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s", plugin_name, exc_info=True
                )
                continue

            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Check whether *cls* has any methods decorated with ``@hookimpl``.

        Pluggy's ``HookimplMarker("zonekit")`` sets a ``zonekit_impl``
        attribute on decorated methods.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, f"{PROJECT_NAME}_impl", None):
                return True
        return False
