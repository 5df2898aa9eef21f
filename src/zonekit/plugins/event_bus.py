"""In-process publish/subscribe channel keyed by event name.

Delivery is synchronous on the publisher's thread, in subscription order,
at most once per handler per publish, with no replay or buffering.

INVARIANT: Handler failures are warnings, never errors.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from zonekit.domain.errors import HandlerError

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], Any]


class Subscription:
    """Active ``(event, handler)`` pair; calling it unsubscribes.

    Unsubscribing is idempotent: the second call is a no-op.
    """

    __slots__ = ("_bus", "_active", "event", "handler")

    def __init__(self, bus: EventBus, event: str, handler: EventHandler) -> None:
        self._bus = bus
        self._active = True
        self.event = event
        self.handler = handler

    @property
    def active(self) -> bool:
        return self._active

    def __call__(self) -> None:
        self.unsubscribe()

    def unsubscribe(self) -> None:
        """Remove exactly this handler from its event."""
        if not self._active:
            return
        self._bus._remove(self)

    def __repr__(self) -> str:
        state = "active" if self._active else "released"
        return f"<Subscription {self.event!r} {self.handler!r} {state}>"


class EventBus:
    """Name-keyed pub/sub used by plugins and the lifecycle manager.

    Publishing iterates a snapshot of the handler list taken under the
    lock, so a concurrent ``subscribe`` or unsubscribe never corrupts an
    in-progress delivery.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handlers: dict[str, list[Subscription]] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def subscribe(self, event: str, handler: EventHandler) -> Subscription:
        """Register *handler* for *event* and return its unsubscribe token.

        A handler already subscribed to *event* is not added twice; the
        existing token is returned instead.
        """
        with self._lock:
            subs = self._handlers.setdefault(event, [])
            for sub in subs:
                if sub.handler == handler:
                    return sub
            sub = Subscription(self, event, handler)
            subs.append(sub)
        logger.debug("Subscribed %r to %s", handler, event)
        return sub

    def publish(self, event: str, payload: Any = None) -> int:
        """Deliver *payload* to every handler of *event*.

        Returns the number of handlers invoked. Handlers receive the same
        payload object, so mutations by one are visible to the next.
        """
        with self._lock:
            snapshot = list(self._handlers.get(event, ()))

        invoked = 0
        for sub in snapshot:
            if not sub.active:
                continue
            invoked += 1
            try:
                sub.handler(payload)
            except Exception as exc:
                error = HandlerError(event, exc)
                logger.warning("%s", error, exc_info=exc)
        return invoked

    def clear(self, event: str) -> None:
        """Drop every handler for *event*."""
        with self._lock:
            subs = self._handlers.pop(event, [])
            for sub in subs:
                sub._active = False

    def clear_all(self) -> None:
        """Drop every handler for every event (full teardown)."""
        with self._lock:
            for subs in self._handlers.values():
                for sub in subs:
                    sub._active = False
            self._handlers.clear()

    def handler_count(self, event: str) -> int:
        """Number of active handlers subscribed to *event*."""
        with self._lock:
            return len(self._handlers.get(event, ()))

    def events(self) -> list[str]:
        """Event names with at least one active handler."""
        with self._lock:
            return [name for name, subs in self._handlers.items() if subs]

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            if not sub._active:
                return
            sub._active = False
            subs = self._handlers.get(sub.event)
            if subs is None or sub not in subs:
                return
            subs.remove(sub)
            if not subs:
                del self._handlers[sub.event]
