"""Key/value media backing the plugin state store.

A medium only moves strings in and out under a key. Namespacing and
serialization belong to :class:`zonekit.plugins.state.StateStore`.
"""

from __future__ import annotations

import threading
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from sqlalchemy import delete, insert, select, update

from zonekit.infrastructure.database.schema import plugin_state

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


@runtime_checkable
class StateMedium(Protocol):
    """Durable string key/value surface."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class MemoryMedium:
    """Process-local medium. Share one instance to simulate a restart."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._lock = threading.Lock()
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)


class SqliteMedium:
    """Medium stored in the ``plugin_state`` table of a SQLite database."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get(self, key: str) -> str | None:
        with self._engine.connect() as conn:
            return conn.execute(
                select(plugin_state.c.value).where(plugin_state.c.key == key)
            ).scalar_one_or_none()

    def set(self, key: str, value: str) -> None:
        now = datetime.now(UTC).isoformat()
        with self._engine.begin() as conn:
            result = conn.execute(
                update(plugin_state)
                .where(plugin_state.c.key == key)
                .values(value=value, updated=now)
            )
            if result.rowcount == 0:
                conn.execute(insert(plugin_state).values(key=key, value=value, updated=now))

    def delete(self, key: str) -> None:
        with self._engine.begin() as conn:
            conn.execute(delete(plugin_state).where(plugin_state.c.key == key))

    def keys(self) -> list[str]:
        with self._engine.connect() as conn:
            rows = conn.execute(select(plugin_state.c.key).order_by(plugin_state.c.key))
            return [row.key for row in rows]

    def close(self) -> None:
        self._engine.dispose()
