"""Tests for the exception taxonomy."""

import pytest

from zonekit.domain.errors import (
    DuplicateIdError,
    HandlerError,
    InvalidSectionError,
    LoadError,
    NotFoundError,
    PluginRuntimeError,
    ZonekitError,
)


class TestErrors:
    @pytest.mark.parametrize(
        "error",
        [
            DuplicateIdError("a"),
            InvalidSectionError("attic"),
            NotFoundError("a"),
            LoadError("a", RuntimeError("x")),
            HandlerError("evt", RuntimeError("x")),
            PluginRuntimeError("a", RuntimeError("x")),
        ],
    )
    def test_share_base_class(self, error: Exception) -> None:
        assert isinstance(error, ZonekitError)

    def test_invalid_section_is_value_error(self) -> None:
        assert isinstance(InvalidSectionError("attic"), ValueError)

    def test_not_found_message(self) -> None:
        error = NotFoundError("ghost")
        assert isinstance(error, KeyError)
        assert str(error) == "Plugin not found: 'ghost'"

    def test_load_error_keeps_cause(self) -> None:
        cause = ImportError("no module")
        error = LoadError("todo", cause)
        assert error.cause is cause
        assert str(error) == "Failed to load plugin 'todo': no module"

    def test_runtime_error_phase(self) -> None:
        error = PluginRuntimeError("x", ValueError("bad"), "update")
        assert error.phase == "update"
        assert str(error) == "Plugin 'x' failed during update: bad"
