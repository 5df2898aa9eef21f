"""Tests for descriptor and slot renderings."""

from __future__ import annotations

import json

from zonekit.domain.errors import PluginRuntimeError
from zonekit.domain.result import Err, Ok, Slot
from zonekit.output.console import create_console, get_output, style_for_section
from zonekit.output.renderers import (
    descriptor_row,
    render_descriptors,
    render_json,
    render_slots,
    slot_row,
)
from tests.conftest import make_descriptor


def _failed(plugin_id: str) -> Slot:
    error = PluginRuntimeError(plugin_id, RuntimeError("boom"), "mount")
    return Slot(make_descriptor(plugin_id), Err(error))


class TestConsole:
    def test_renders_to_buffer(self) -> None:
        console = create_console()
        console.print("hello")
        assert get_output(console) == "hello\n"

    def test_section_style_defined(self) -> None:
        console = create_console()
        console.print(f"[{style_for_section('sidebar')}]x[/]")
        assert get_output(console) == "x\n"


class TestRows:
    def test_descriptor_row(self) -> None:
        row = descriptor_row(make_descriptor("a", order=2, dependencies=("b",)))
        assert row == {
            "id": "a",
            "name": "A",
            "section": "content",
            "order": 2,
            "enabled": True,
            "dependencies": ["b"],
        }

    def test_slot_row_mounted(self) -> None:
        assert slot_row(Slot(make_descriptor("a"), Ok(object()))) == {
            "id": "a",
            "status": "mounted",
        }

    def test_slot_row_failed(self) -> None:
        row = slot_row(_failed("a"))
        assert row["status"] == "failed"
        assert row["phase"] == "mount"
        assert row["error"] == "boom"

    def test_render_json_falls_back_to_str(self) -> None:
        assert json.loads(render_json({"when": object})) == {"when": str(object)}


class TestHumanOutput:
    def test_descriptor_table(self) -> None:
        out = render_descriptors([make_descriptor("clock", section="header")])
        assert "clock" in out
        assert "header" in out

    def test_no_descriptors(self) -> None:
        assert "No plugins found." in render_descriptors([])

    def test_slots(self) -> None:
        out = render_slots("content", [Slot(make_descriptor("a"), Ok(1)), _failed("b")])
        assert "content (2 slot(s))" in out
        assert "OK" in out
        assert "FAIL" in out
        assert "mount: boom" in out
