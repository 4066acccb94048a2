"""Side-channel event emitter.

Carries ``log``, ``log:<level>``, ``error``, ``flush`` and ``close`` notifications.
Handler failures are reported to the stdlib ``logweave.events`` logger and
swallowed: the emitter is reached from ``log()`` and must never raise into it,
and it must never write through the transports whose failures it reports.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable

logger = logging.getLogger("logweave.events")

Handler = Callable[[object], object]
Unsubscribe = Callable[[], None]


class Emitter:
    """Minimal synchronous pub/sub keyed by event name.

    Example:
        >>> events = Emitter()
        >>> seen = []
        >>> off = events.on("error", seen.append)
        >>> events.emit("error", "boom")
        >>> off()
        >>> events.emit("error", "ignored")
        >>> seen
        ['boom']
    """

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: defaultdict[str, list[Handler]] = defaultdict(list)

    def on(self, event: str, handler: Handler) -> Unsubscribe:
        """Subscribe; returns a function that removes this subscription."""
        if not callable(handler):
            raise TypeError(f"Handler for {event!r} must be callable")
        self._handlers[event].append(handler)

        def unsubscribe() -> None:
            try:
                self._handlers[event].remove(handler)
            except ValueError:
                pass

        return unsubscribe

    def emit(self, event: str, payload: object = None) -> None:
        # Copy so handlers may unsubscribe while being called
        for handler in tuple(self._handlers.get(event, ())):
            try:
                handler(payload)
            except Exception:
                logger.exception("handler for %r event failed", event)

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, ()))

    def clear(self) -> None:
        self._handlers.clear()
