"""Subcommand modules for the zonekit diagnostics CLI.

Provides register_commands() which uses deferred imports to keep
``zonekit --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    from zonekit.commands.plugins import plugins
    from zonekit.commands.render import render
    from zonekit.commands.state import state

    cli.add_command(plugins)
    cli.add_command(render)
    cli.add_command(state)
