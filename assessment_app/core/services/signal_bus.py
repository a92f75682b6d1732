"""In-process signal source that hosts feed with integrity events."""

from __future__ import annotations

import logging

from assessment_app.core.models import IntegrityEvent
from assessment_app.core.services.integrity_monitor import SignalHandler

logger = logging.getLogger(__name__)


class SignalBus:
    """Dispatches emitted integrity events to the handlers subscribed per kind.

    Events emitted while nobody is subscribed (no running session) are
    dropped.
    """

    def __init__(self) -> None:
        self._handlers: dict[IntegrityEvent, list[SignalHandler]] = {
            kind: [] for kind in IntegrityEvent
        }

    def subscribe(self, kind: IntegrityEvent, handler: SignalHandler) -> None:
        handlers = self._handlers[kind]
        if handler not in handlers:
            handlers.append(handler)

    def unsubscribe(self, kind: IntegrityEvent, handler: SignalHandler) -> None:
        handlers = self._handlers[kind]
        if handler in handlers:
            handlers.remove(handler)

    def subscriber_count(self, kind: IntegrityEvent | None = None) -> int:
        if kind is not None:
            return len(self._handlers[kind])
        return sum(len(handlers) for handlers in self._handlers.values())

    def emit(self, kind: IntegrityEvent) -> int:
        """Deliver ``kind`` to its subscribers and return how many received it."""
        # Copy first: a handler may end the session and unsubscribe everyone.
        handlers = list(self._handlers[kind])
        if not handlers:
            logger.debug("Dropping %s signal; no active subscription", kind.value)
        for handler in handlers:
            handler()
        return len(handlers)
