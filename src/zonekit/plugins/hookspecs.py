"""Pluggy hook specifications for contributing plugin descriptors.

Packages expose descriptors by implementing ``zonekit_plugin_descriptors``
in a class registered under the ``zonekit.plugins`` entry-point group, or
in a single-file plugin dropped into the configured local directory.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from collections.abc import Iterable

    from zonekit.domain.descriptor import PluginDescriptor

PROJECT_NAME = "zonekit"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class ZonekitHookSpec:
    """Hook specifications for the zonekit plugin system."""

    @hookspec
    def zonekit_plugin_descriptors(
        self,
    ) -> Iterable[PluginDescriptor | dict[str, Any]] | None:
        """Return descriptors (or descriptor mappings) this package provides."""
