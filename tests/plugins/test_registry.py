"""Tests for PluginRegistry — uniqueness, section validity, ordering."""

from __future__ import annotations

import threading
from typing import Any

import pytest

from zonekit.domain.descriptor import PluginConfig
from zonekit.domain.errors import DuplicateIdError, InvalidSectionError, NotFoundError
from zonekit.domain.events import CONFIG_CHANGED, SECTION_CHANGED, UNREGISTERED
from zonekit.plugins.event_bus import EventBus
from zonekit.plugins.registry import PluginRegistry
from tests.conftest import make_descriptor


class TestRegister:
    def test_register_then_get_returns_same_descriptor(self, registry: PluginRegistry) -> None:
        d = make_descriptor("counter", dependencies=("clock",))
        registry.register(d)
        assert registry.get_by_id("counter") is d

    def test_duplicate_id_rejected_and_original_kept(self, registry: PluginRegistry) -> None:
        first = make_descriptor("counter", order=1)
        registry.register(first)
        with pytest.raises(DuplicateIdError) as exc_info:
            registry.register(make_descriptor("counter", section="footer"))
        assert exc_info.value.plugin_id == "counter"
        assert registry.get_by_id("counter") is first

    @pytest.mark.parametrize("section", ["main", "", "Header", "CONTENT "])
    def test_invalid_section_rejected(self, registry: PluginRegistry, section: str) -> None:
        with pytest.raises(InvalidSectionError):
            registry.register(make_descriptor("x", section=section))
        assert "x" not in registry

    def test_enabled_defaults_true(self, registry: PluginRegistry) -> None:
        from zonekit.domain.descriptor import PluginDescriptor

        d = PluginDescriptor(id="plain", name="Plain", section="footer", factory=lambda c: c)
        registry.register(d)
        assert registry.get_by_id("plain").config.enabled is True


class TestUnregister:
    def test_unregister_removes(self, registry: PluginRegistry) -> None:
        registry.register(make_descriptor("a"))
        registry.unregister("a")
        assert "a" not in registry
        with pytest.raises(NotFoundError):
            registry.get_by_id("a")

    def test_unregister_unknown_is_noop(self, registry: PluginRegistry) -> None:
        registry.unregister("ghost")
        assert len(registry) == 0

    def test_unregister_announces_cleanup(self, registry: PluginRegistry, bus: EventBus) -> None:
        seen: list[Any] = []
        bus.subscribe(UNREGISTERED, seen.append)
        registry.register(make_descriptor("a"))
        registry.unregister("a")
        registry.unregister("a")
        assert len(seen) == 1
        assert seen[0]["pluginId"] == "a"

    def test_id_can_be_reused_after_unregister(self, registry: PluginRegistry) -> None:
        registry.register(make_descriptor("a"))
        registry.unregister("a")
        again = make_descriptor("a", section="header")
        registry.register(again)
        assert registry.get_by_id("a") is again


class TestGetBySection:
    def test_order_then_registration_sequence(self, registry: PluginRegistry) -> None:
        registry.register(make_descriptor("A", order=2))
        registry.register(make_descriptor("B", order=1))
        assert [d.id for d in registry.get_by_section("content")] == ["B", "A"]

    def test_missing_order_sorts_last_stably(self, registry: PluginRegistry) -> None:
        registry.register(make_descriptor("n1"))
        registry.register(make_descriptor("o5", order=5))
        registry.register(make_descriptor("n2"))
        registry.register(make_descriptor("o0", order=0))
        registry.register(make_descriptor("o5b", order=5))
        ids = [d.id for d in registry.get_by_section("content")]
        assert ids == ["o0", "o5", "o5b", "n1", "n2"]

    def test_negative_order_comes_first(self, registry: PluginRegistry) -> None:
        registry.register(make_descriptor("zero", order=0))
        registry.register(make_descriptor("neg", order=-3))
        assert [d.id for d in registry.get_by_section("content")] == ["neg", "zero"]

    def test_filters_by_section(self, registry: PluginRegistry) -> None:
        registry.register(make_descriptor("h", section="header"))
        registry.register(make_descriptor("c", section="content"))
        registry.register(make_descriptor("s", section="sidebar"))
        assert [d.id for d in registry.get_by_section("header")] == ["h"]
        assert [d.id for d in registry.get_by_section("sidebar")] == ["s"]

    def test_empty_valid_section(self, registry: PluginRegistry) -> None:
        assert registry.get_by_section("footer") == []

    def test_invalid_section_query(self, registry: PluginRegistry) -> None:
        with pytest.raises(InvalidSectionError):
            registry.get_by_section("nowhere")

    def test_returns_snapshot(self, registry: PluginRegistry) -> None:
        registry.register(make_descriptor("a"))
        snapshot = registry.get_by_section("content")
        registry.register(make_descriptor("b"))
        assert [d.id for d in snapshot] == ["a"]


class TestMutations:
    def test_set_config_replaces_atomically(self, registry: PluginRegistry) -> None:
        original = make_descriptor("a")
        registry.register(original)
        new_config = PluginConfig(enabled=False, position="top", settings={"k": 1})
        updated = registry.set_config("a", new_config)
        assert updated is not original
        assert original.config.enabled is True
        assert registry.get_by_id("a").config == new_config

    def test_set_config_accepts_mapping(self, registry: PluginRegistry) -> None:
        registry.register(make_descriptor("a"))
        registry.set_config("a", {"enabled": False})
        assert registry.get_by_id("a").config.enabled is False

    def test_set_config_unknown(self, registry: PluginRegistry) -> None:
        with pytest.raises(NotFoundError):
            registry.set_config("ghost", PluginConfig())

    def test_set_config_announces_previous(self, registry: PluginRegistry, bus: EventBus) -> None:
        seen: list[Any] = []
        bus.subscribe(CONFIG_CHANGED, seen.append)
        registry.register(make_descriptor("a"))
        registry.set_config("a", PluginConfig(position="left"))
        assert seen[0]["previous"] == PluginConfig()
        assert seen[0]["current"] == PluginConfig(position="left")

    def test_set_section_moves_and_keeps_sequence(self, registry: PluginRegistry) -> None:
        registry.register(make_descriptor("a", section="header"))
        registry.register(make_descriptor("b"))
        registry.set_section("a", "content")
        assert [d.id for d in registry.get_by_section("content")] == ["a", "b"]
        assert registry.get_by_section("header") == []

    def test_set_section_revalidates(self, registry: PluginRegistry) -> None:
        registry.register(make_descriptor("a"))
        with pytest.raises(InvalidSectionError):
            registry.set_section("a", "basement")
        assert registry.get_by_id("a").section == "content"

    def test_set_section_unknown(self, registry: PluginRegistry) -> None:
        with pytest.raises(NotFoundError):
            registry.set_section("ghost", "footer")

    def test_set_section_announces(self, registry: PluginRegistry, bus: EventBus) -> None:
        seen: list[Any] = []
        bus.subscribe(SECTION_CHANGED, seen.append)
        registry.register(make_descriptor("a"))
        registry.set_section("a", "content")
        registry.set_section("a", "footer")
        assert seen == [{"pluginId": "a", "previous": "content", "current": "footer"}]


class TestWithoutBus:
    def test_registry_works_standalone(self) -> None:
        registry = PluginRegistry()
        registry.register(make_descriptor("a"))
        registry.set_config("a", PluginConfig(enabled=False))
        registry.unregister("a")
        assert len(registry) == 0


class TestConcurrency:
    def test_concurrent_register_and_query(self) -> None:
        registry = PluginRegistry()
        errors: list[BaseException] = []

        def writer(start: int) -> None:
            try:
                for i in range(start, start + 100):
                    registry.register(make_descriptor(f"p{i}", order=i % 7))
            except BaseException as exc:  # noqa: BLE001
                errors.append(exc)

        def reader() -> None:
            try:
                for _ in range(200):
                    listed = registry.get_by_section("content")
                    keys = [((d.order is None), d.order) for d in listed]
                    assert keys == sorted(keys)
            except BaseException as exc:  # noqa: BLE001
                errors.append(exc)

        threads = [threading.Thread(target=writer, args=(n * 100,)) for n in range(4)]
        threads += [threading.Thread(target=reader) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(registry) == 400
        assert len(registry.get_by_section("content")) == 400
