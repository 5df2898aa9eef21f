"""Per-plugin state persistence.

Each plugin owns one opaque record stored under ``plugin_<id>_state``.
Records are JSON round-tripped; the store never looks inside them.

INVARIANT: Corrupt records read as absent, never as errors.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Final

from zonekit.domain.errors import CorruptStateError, SerializationError
from zonekit.infrastructure.media import MemoryMedium

if TYPE_CHECKING:
    from zonekit.infrastructure.media import StateMedium

logger = logging.getLogger(__name__)


class _Absent:
    """Marker for "no saved state"; distinct from a saved ``None``."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT: Final = _Absent()


class StateStore:
    """Save, load and clear plugin state records on a :class:`StateMedium`.

    Parameters:
        medium: Backing key/value surface. Defaults to a fresh
            :class:`~zonekit.infrastructure.media.MemoryMedium`.
    """

    def __init__(self, medium: StateMedium | None = None) -> None:
        self._medium = medium if medium is not None else MemoryMedium()

    @property
    def medium(self) -> StateMedium:
        return self._medium

    @staticmethod
    def key_for(plugin_id: str) -> str:
        """Storage key for *plugin_id*'s record."""
        return f"plugin_{plugin_id}_state"

    def save(self, plugin_id: str, state: Any) -> None:
        """Persist *state*, overwriting any earlier record.

        Raises:
            SerializationError: *state* is not JSON-serializable, or would
                load back as a different value (tuples, non-string keys).
        """
        try:
            blob = json.dumps(state, allow_nan=False)
            if json.loads(blob) != state:
                msg = "state does not survive a JSON round trip"
                raise ValueError(msg)
        except (TypeError, ValueError) as exc:
            logger.warning("Failed to save state for plugin %s: %s", plugin_id, exc)
            raise SerializationError(plugin_id, exc) from exc
        self._medium.set(self.key_for(plugin_id), blob)
        logger.debug("Saved state for plugin %s", plugin_id)

    def load(self, plugin_id: str) -> Any:
        """Return the last saved state, or :data:`ABSENT`."""
        blob = self._medium.get(self.key_for(plugin_id))
        if blob is None:
            return ABSENT
        try:
            return json.loads(blob)
        except ValueError as exc:
            error = CorruptStateError(plugin_id, exc)
            logger.warning("%s", error)
            return ABSENT

    def clear(self, plugin_id: str) -> None:
        """Remove *plugin_id*'s record. Missing records are a no-op."""
        self._medium.delete(self.key_for(plugin_id))

    def has(self, plugin_id: str) -> bool:
        return self._medium.get(self.key_for(plugin_id)) is not None
