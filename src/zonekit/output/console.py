"""Rich Console factory and theme for zonekit output.

Creates Console instances that render to a StringIO buffer so commands
can hand a finished string to ``click.echo``. In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

ZONEKIT_THEME = Theme(
    {
        "zk.ok": "bold green",
        "zk.error": "bold red",
        "zk.muted": "dim",
        "zk.id": "bold blue",
        "zk.section.header": "magenta",
        "zk.section.sidebar": "cyan",
        "zk.section.content": "green",
        "zk.section.footer": "yellow",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=ZONEKIT_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_section(section: str) -> str:
    return f"zk.section.{section}"
