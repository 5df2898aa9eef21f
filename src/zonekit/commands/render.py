"""Command: render one zone and report each slot's status."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from zonekit.domain.types import Section

if TYPE_CHECKING:
    from zonekit.commands._context import AppContext


@click.command()
@click.argument("section", type=click.Choice([s.value for s in Section]))
@click.option(
    "--lazy",
    "lazy_ids",
    multiple=True,
    help="Plugin id to resolve through the loader before rendering (repeatable).",
)
@click.pass_obj
def render(app: AppContext, section: str, lazy_ids: tuple[str, ...]) -> None:
    """Mount every plugin of SECTION and show which slots failed."""
    import asyncio

    from zonekit.output.renderers import render_slots, slot_row

    runtime = app.runtime
    runtime.register_discovered()
    slots = asyncio.run(runtime.render_zone_async(section, lazy_ids))
    app.emit(
        {"section": section, "slots": [slot_row(s) for s in slots]},
        render_slots(section, slots),
    )
