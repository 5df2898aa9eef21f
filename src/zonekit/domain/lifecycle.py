"""Zone lifecycle states and transitions.

A zone moves ``idle -> loading -> ready``, bounces between ``ready`` and
``updating`` while its plugins publish state changes, and ends in
``torn_down``. Torn down is terminal: a host that wants the zone back
creates a new manager.
"""

from __future__ import annotations

from enum import StrEnum


class ZoneState(StrEnum):
    """Lifecycle state of a placement zone."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    UPDATING = "updating"
    TORN_DOWN = "torn_down"


ZONE_TRANSITIONS: dict[str, list[str]] = {
    "idle": ["loading", "torn_down"],
    "loading": ["ready", "torn_down"],
    "ready": ["updating", "torn_down"],
    "updating": ["ready", "torn_down"],
    "torn_down": [],
}


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]] = ZONE_TRANSITIONS,
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    allowed = transitions.get(current, [])
    return target in allowed
