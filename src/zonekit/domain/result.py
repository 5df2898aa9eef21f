"""Per-slot render results.

Each plugin instantiation yields ``Ok(instance)`` or
``Err(PluginRuntimeError)``; the zone renders a :class:`Placeholder` for
the latter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from zonekit.domain.descriptor import PluginDescriptor
    from zonekit.domain.errors import PluginRuntimeError

FAILURE_MESSAGE = "Something went wrong with this plugin."


@dataclass(frozen=True)
class Ok:
    """Successfully mounted widget instance."""

    instance: Any

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Isolated failure of one plugin slot."""

    error: PluginRuntimeError

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True)
class Placeholder:
    """Generic failure indicator rendered in place of a broken plugin."""

    plugin_id: str
    message: str = FAILURE_MESSAGE


@dataclass(frozen=True)
class Slot:
    """One rendered position in a zone."""

    descriptor: PluginDescriptor
    outcome: Ok | Err

    @property
    def plugin_id(self) -> str:
        return self.descriptor.id

    @property
    def ok(self) -> bool:
        return self.outcome.ok

    @property
    def widget(self) -> Any:
        """The mounted instance, or a placeholder if the slot failed."""
        if isinstance(self.outcome, Ok):
            return self.outcome.instance
        return Placeholder(plugin_id=self.descriptor.id)

    @property
    def error(self) -> PluginRuntimeError | None:
        if isinstance(self.outcome, Err):
            return self.outcome.error
        return None
