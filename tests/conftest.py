"""Shared pytest fixtures and test helpers for zonekit tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from zonekit.domain.descriptor import PluginConfig, PluginDescriptor, PluginLifecycle
from zonekit.infrastructure.database.engine import init_database
from zonekit.infrastructure.media import MemoryMedium
from zonekit.plugins.event_bus import EventBus
from zonekit.plugins.registry import PluginRegistry
from zonekit.plugins.runtime import PluginRuntime
from zonekit.plugins.state import StateStore


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Engine:
    """Initialized SQLite engine with the plugin_state table created."""
    engine = init_database(tmp_path / "state.db")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def registry(bus: EventBus) -> PluginRegistry:
    """Registry announcing cleanup events on the shared bus."""
    return PluginRegistry(bus)


@pytest.fixture
def medium() -> MemoryMedium:
    return MemoryMedium()


@pytest.fixture
def store(medium: MemoryMedium) -> StateStore:
    return StateStore(medium)


@pytest.fixture
def runtime(registry: PluginRegistry, bus: EventBus, store: StateStore) -> PluginRuntime:
    rt = PluginRuntime(registry=registry, bus=bus, store=store)
    try:
        yield rt
    finally:
        rt.teardown()


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


class Widget:
    """Stand-in for a rendered plugin instance."""

    def __init__(self, plugin_id: str, config: PluginConfig) -> None:
        self.plugin_id = plugin_id
        self.config = config
        self.restored: list[Any] = []


def widget_factory(plugin_id: str) -> Any:
    """Factory producing a :class:`Widget` tagged with *plugin_id*."""

    def factory(config: PluginConfig) -> Widget:
        return Widget(plugin_id, config)

    return factory


def make_descriptor(
    plugin_id: str,
    section: str = "content",
    *,
    order: int | None = None,
    enabled: bool = True,
    factory: Any = None,
    lifecycle: PluginLifecycle | dict[str, Any] | None = None,
    **kwargs: Any,
) -> PluginDescriptor:
    """Build a descriptor with sensible defaults for tests."""
    return PluginDescriptor(
        id=plugin_id,
        name=plugin_id.title(),
        section=section,
        factory=factory or widget_factory(plugin_id),
        config=PluginConfig(enabled=enabled),
        lifecycle=lifecycle,
        order=order,
        **kwargs,
    )


class HookRecorder:
    """Lifecycle callbacks that record what was called, in order."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    def lifecycle(self, plugin_id: str) -> PluginLifecycle:
        return PluginLifecycle(
            on_mount=lambda: self.calls.append(("mount", plugin_id)),
            on_unmount=lambda: self.calls.append(("unmount", plugin_id)),
            on_update=lambda prev: self.calls.append(("update", (plugin_id, prev))),
        )

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def restore_logging() -> Any:
    """Restore root and zonekit logger state changed by configure_logging."""
    import logging

    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    zk = logging.getLogger("zonekit")
    zk_level = zk.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    zk.setLevel(zk_level)


_PROJECT_PLUGIN_SRC = """\
import pluggy

hookimpl = pluggy.HookimplMarker("zonekit")


def _broken(config):
    raise RuntimeError("widget constructor failed")


class DemoProvider:
    @hookimpl
    def zonekit_plugin_descriptors(self):
        return [
            {"id": "clock", "name": "Clock", "section": "header", "order": 1, "factory": dict},
            {"id": "broken", "name": "Broken", "section": "header", "order": 2,
             "factory": _broken},
            {"id": "notes", "name": "Notes", "section": "sidebar", "factory": dict},
        ]
"""


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Project directory with a zonekit.toml and one local plugin provider.

    Returns the path of the config file; state lives in a SQLite
    database beside it.
    """
    plugin_dir = tmp_path / "plugins"
    plugin_dir.mkdir()
    (plugin_dir / "demo.py").write_text(_PROJECT_PLUGIN_SRC, encoding="utf-8")
    config = tmp_path / "zonekit.toml"
    config.write_text(
        '[loader]\nentry_points = false\nlocal_dir = "plugins"\n\n'
        '[state]\npath = "state.db"\n\n'
        "[plugins.notes]\nenabled = false\n",
        encoding="utf-8",
    )
    return config
