"""zonekit — in-process extension runtime for zone-placed UI plugins.

Plugins register into one of four placement zones, communicate through a
name-keyed event bus, persist opaque state between sessions, and can be
resolved lazily on first use.
"""

from __future__ import annotations

__version__ = "0.1.0"
