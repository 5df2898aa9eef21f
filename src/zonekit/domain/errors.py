"""Exception taxonomy for the plugin runtime.

Structural errors (duplicate id, invalid section, not found) are raised
to the caller. Runtime faults inside plugin code are wrapped in
:class:`PluginRuntimeError` or :class:`HandlerError` and contained at the
slot or handler that produced them.
"""

from __future__ import annotations


class ZonekitError(Exception):
    """Base class for all runtime errors."""


class DuplicateIdError(ZonekitError):
    """A descriptor with the same id is already registered."""

    def __init__(self, plugin_id: str) -> None:
        super().__init__(f"Plugin already registered: {plugin_id!r}")
        self.plugin_id = plugin_id


class InvalidSectionError(ZonekitError, ValueError):
    """Section is not one of header, sidebar, content, footer."""

    def __init__(self, section: object) -> None:
        super().__init__(f"Invalid section: {section!r}")
        self.section = section


class NotFoundError(ZonekitError, KeyError):
    """No descriptor registered under the requested id."""

    def __init__(self, plugin_id: str) -> None:
        super().__init__(plugin_id)
        self.plugin_id = plugin_id

    def __str__(self) -> str:
        return f"Plugin not found: {self.plugin_id!r}"


class LoadError(ZonekitError):
    """Lazy resolution of a plugin failed."""

    def __init__(self, plugin_id: str, cause: BaseException) -> None:
        super().__init__(f"Failed to load plugin {plugin_id!r}: {cause}")
        self.plugin_id = plugin_id
        self.cause = cause


class SerializationError(ZonekitError):
    """Plugin state could not be serialized for persistence."""

    def __init__(self, plugin_id: str, cause: BaseException) -> None:
        super().__init__(f"Cannot serialize state for plugin {plugin_id!r}: {cause}")
        self.plugin_id = plugin_id
        self.cause = cause


class CorruptStateError(ZonekitError):
    """Stored state exists but cannot be decoded.

    Never propagated out of the state store; it is logged and the record
    is reported as absent.
    """

    def __init__(self, plugin_id: str, cause: BaseException) -> None:
        super().__init__(f"Corrupt state for plugin {plugin_id!r}: {cause}")
        self.plugin_id = plugin_id
        self.cause = cause


class HandlerError(ZonekitError):
    """An event handler raised during publish. Logged, never propagated."""

    def __init__(self, event: str, cause: BaseException) -> None:
        super().__init__(f"Error in event handler for {event!r}: {cause}")
        self.event = event
        self.cause = cause


class PluginRuntimeError(ZonekitError):
    """A plugin failed while mounting, updating or restoring.

    Attributes:
        plugin_id: The failing plugin.
        cause: The original exception.
        phase: Where it failed (``"mount"``, ``"restore"``, ``"update"``...).
    """

    def __init__(self, plugin_id: str, cause: BaseException, phase: str = "mount") -> None:
        super().__init__(f"Plugin {plugin_id!r} failed during {phase}: {cause}")
        self.plugin_id = plugin_id
        self.cause = cause
        self.phase = phase


class InvalidTransitionError(ZonekitError):
    """A zone was asked to move to a state its current state cannot reach."""

    def __init__(self, section: str, current: str, target: str) -> None:
        super().__init__(f"Zone {section!r} cannot go from {current} to {target}")
        self.section = section
        self.current = current
        self.target = target
