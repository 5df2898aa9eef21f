"""Tests for slot results and placeholders."""

from zonekit.domain.errors import PluginRuntimeError
from zonekit.domain.result import FAILURE_MESSAGE, Err, Ok, Placeholder, Slot
from tests.conftest import make_descriptor


class TestSlot:
    def test_ok_slot_exposes_instance(self) -> None:
        slot = Slot(make_descriptor("a"), Ok("widget"))
        assert slot.ok
        assert slot.plugin_id == "a"
        assert slot.widget == "widget"
        assert slot.error is None

    def test_err_slot_renders_placeholder(self) -> None:
        error = PluginRuntimeError("a", RuntimeError("boom"), "mount")
        slot = Slot(make_descriptor("a"), Err(error))
        assert not slot.ok
        assert slot.widget == Placeholder(plugin_id="a")
        assert slot.widget.message == FAILURE_MESSAGE
        assert slot.error is error

    def test_placeholder_hides_error_details(self) -> None:
        error = PluginRuntimeError("a", RuntimeError("secret stack detail"), "mount")
        slot = Slot(make_descriptor("a"), Err(error))
        assert "secret" not in slot.widget.message
