"""Command: list discovered plugin descriptors."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from zonekit.domain.types import Section

if TYPE_CHECKING:
    from zonekit.commands._context import AppContext


@click.command()
@click.option(
    "--section",
    type=click.Choice([s.value for s in Section]),
    default=None,
    help="Only list plugins placed in this section.",
)
@click.pass_obj
def plugins(app: AppContext, section: str | None) -> None:
    """List plugins contributed by entry points and the local plugin directory."""
    from zonekit.output.renderers import descriptor_row, render_descriptors

    runtime = app.runtime
    runtime.register_discovered()
    if section is None:
        descriptors = runtime.registry.all()
    else:
        descriptors = runtime.registry.get_by_section(section)
    app.emit([descriptor_row(d) for d in descriptors], render_descriptors(descriptors))
