"""Command group: inspect and clear persisted plugin state."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from zonekit.commands._context import AppContext


@click.group()
def state() -> None:
    """Inspect or clear saved plugin state records."""


@state.command("show")
@click.argument("plugin_id")
@click.pass_obj
def show(app: AppContext, plugin_id: str) -> None:
    """Print the saved state of PLUGIN_ID."""
    from zonekit.plugins.state import ABSENT

    store = app.runtime.store
    value = store.load(plugin_id)
    if value is ABSENT:
        app.fail(f"No saved state for plugin {plugin_id!r}")
    app.emit(
        {"id": plugin_id, "key": store.key_for(plugin_id), "state": value},
        json.dumps(value, indent=2),
    )


@state.command("list")
@click.pass_obj
def list_keys(app: AppContext) -> None:
    """List the keys of every saved state record."""
    keys = app.runtime.store.medium.keys()
    app.emit(keys, "\n".join(keys) if keys else "No saved state.")


@state.command("clear")
@click.argument("plugin_id")
@click.pass_obj
def clear(app: AppContext, plugin_id: str) -> None:
    """Delete the saved state of PLUGIN_ID (no-op if none exists)."""
    app.runtime.store.clear(plugin_id)
    app.emit({"id": plugin_id, "cleared": True}, f"Cleared state for {plugin_id}")
