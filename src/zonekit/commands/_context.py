"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. The runtime is built lazily so ``--help`` and
``--version`` never touch discovery or the state database.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from zonekit.output.renderers import render_json

if TYPE_CHECKING:
    from zonekit.config.settings import ZonekitSettings
    from zonekit.plugins.runtime import PluginRuntime


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: ZonekitSettings) -> None:
        self.settings = settings
        self._runtime: PluginRuntime | None = None

        from zonekit.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def runtime(self) -> PluginRuntime:
        """The plugin runtime (created lazily on first access)."""
        if self._runtime is None:
            from zonekit.plugins.runtime import PluginRuntime

            self._runtime = PluginRuntime.from_settings(self.settings)
        return self._runtime

    def emit(self, data: Any, human: str) -> None:
        """Write *data* as JSON in ``--json`` mode, else the *human* text."""
        if self.settings.json_output:
            click.echo(render_json(data))
        else:
            click.echo(human.rstrip("\n"))

    def fail(self, message: str) -> None:
        """Report an error on stderr and exit with code 1."""
        if self.settings.json_output:
            click.echo(render_json({"ok": False, "error": message}), err=True)
        else:
            click.echo(f"Error: {message}", err=True)
        raise SystemExit(1)

    def close(self) -> None:
        if self._runtime is not None:
            self._runtime.teardown()
            self._runtime = None
