"""Human and JSON renderings of descriptors, slots and state records."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table

from zonekit.output.console import create_console, get_output, style_for_section

if TYPE_CHECKING:
    from zonekit.domain.descriptor import PluginDescriptor
    from zonekit.domain.result import Slot


def descriptor_row(descriptor: PluginDescriptor) -> dict[str, Any]:
    return {
        "id": descriptor.id,
        "name": descriptor.name,
        "section": descriptor.section,
        "order": descriptor.order,
        "enabled": descriptor.config.enabled,
        "dependencies": list(descriptor.dependencies),
    }


def slot_row(slot: Slot) -> dict[str, Any]:
    row: dict[str, Any] = {"id": slot.plugin_id, "status": "mounted" if slot.ok else "failed"}
    if slot.error is not None:
        row["phase"] = slot.error.phase
        row["error"] = str(slot.error.cause)
    return row


def render_json(data: Any) -> str:
    return json.dumps(data, indent=2, default=str)


def render_descriptors(descriptors: list[PluginDescriptor]) -> str:
    """Table of descriptors, one row per plugin."""
    console = create_console()
    if not descriptors:
        console.print("No plugins found.", style="zk.muted")
        return get_output(console)

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="zk.id")
    table.add_column("Name")
    table.add_column("Section")
    table.add_column("Order", justify="right")
    table.add_column("Enabled")
    for d in descriptors:
        table.add_row(
            d.id,
            d.name,
            f"[{style_for_section(d.section)}]{d.section}[/]",
            "" if d.order is None else str(d.order),
            "yes" if d.config.enabled else "no",
        )
    console.print(table)
    return get_output(console)


def render_slots(section: str, slots: list[Slot]) -> str:
    """One line per slot: mounted or failed with the failing phase."""
    console = create_console()
    console.print(f"[{style_for_section(section)}]{section}[/] ({len(slots)} slot(s))")
    for slot in slots:
        if slot.ok:
            console.print(f"  [zk.ok]OK[/]    [zk.id]{slot.plugin_id}[/]")
        else:
            assert slot.error is not None
            console.print(
                f"  [zk.error]FAIL[/]  [zk.id]{slot.plugin_id}[/] "
                f"[zk.muted]({slot.error.phase}: {slot.error.cause})[/]"
            )
    return get_output(console)
