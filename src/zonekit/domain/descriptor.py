"""Plugin descriptor — the unit of registration.

Descriptors are frozen. Configuration or section changes produce a new
descriptor via :meth:`PluginDescriptor.with_config` /
:meth:`PluginDescriptor.with_section`, so a reader holding a descriptor
never observes a partial update.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class PluginConfig(BaseModel):
    """Per-plugin configuration handed to the widget factory."""

    model_config = {"frozen": True}

    enabled: bool = True
    position: str | None = None
    settings: dict[str, Any] = Field(default_factory=dict)


class PluginLifecycle(BaseModel):
    """Optional lifecycle callbacks.

    Accepts both snake_case (``on_mount``) and camelCase (``onMount``)
    keys so descriptors exported as plain mappings validate either way.
    """

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    on_mount: Callable[[], Any] | None = None
    on_unmount: Callable[[], Any] | None = None
    on_update: Callable[[PluginConfig], Any] | None = None


class PluginDescriptor(BaseModel):
    """Registered metadata plus the widget factory for one plugin.

    Attributes:
        id: Globally unique identifier, immutable once registered.
        name: Display name.
        description: Optional display description.
        section: Placement zone; validated by the registry, not here, so
            that an invalid value surfaces as ``InvalidSectionError``.
        factory: Opaque callable ``factory(config) -> widget``.
        config: Current configuration.
        lifecycle: Optional mount/unmount/update callbacks.
        order: Ascending position within the section; ``None`` sorts last.
        dependencies: Declared plugin ids. Recorded, never resolved.
    """

    model_config = {"frozen": True}

    id: str = Field(min_length=1)
    name: str
    description: str | None = None
    section: str
    factory: Callable[..., Any]
    config: PluginConfig = Field(default_factory=PluginConfig)
    lifecycle: PluginLifecycle | None = None
    order: int | None = None
    dependencies: tuple[str, ...] = ()

    def with_config(self, config: PluginConfig) -> PluginDescriptor:
        """Return a copy carrying *config*."""
        return self.model_copy(update={"config": config})

    def with_section(self, section: str) -> PluginDescriptor:
        """Return a copy placed in *section*."""
        return self.model_copy(update={"section": section})

    def hook(self, name: str) -> Callable[..., Any] | None:
        """Return the lifecycle callback *name*, or None if not supplied."""
        if self.lifecycle is None:
            return None
        return getattr(self.lifecycle, name, None)
