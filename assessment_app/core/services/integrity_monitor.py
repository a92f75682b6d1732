"""Session integrity monitor: counts infractions and enforces a hard cap."""

from __future__ import annotations

from enum import Enum
import logging
from typing import Callable, Protocol

from assessment_app.core.models import IntegrityEvent

logger = logging.getLogger(__name__)

SignalHandler = Callable[[], None]


class SignalSource(Protocol):
    """Host-provided stream of integrity events, one subscription per kind."""

    def subscribe(self, kind: IntegrityEvent, handler: SignalHandler) -> None: ...

    def unsubscribe(self, kind: IntegrityEvent, handler: SignalHandler) -> None: ...


class PresentationError(Exception):
    """Raised by a presentation controller that cannot change full-screen mode."""


class PresentationController(Protocol):
    """Host capability for exclusive full-screen presentation.

    Both methods may raise ``PresentationError``; the session treats that as
    a recoverable failure.
    """

    def enter_fullscreen(self) -> None: ...

    def exit_fullscreen(self) -> None: ...


class NullPresentationController:
    """Presentation controller for headless hosts."""

    def enter_fullscreen(self) -> None:
        return None

    def exit_fullscreen(self) -> None:
        return None


class MonitorState(Enum):
    INACTIVE = "inactive"
    ARMED = "armed"
    TERMINATED = "terminated"


class IntegrityMonitor:
    """Observes integrity signals while a session is running.

    The monitor is signal-source agnostic: ``arm`` installs one handler per
    ``IntegrityEvent`` kind and ``disarm`` removes every one of them again.
    """

    def __init__(
        self,
        max_attempts: int,
        is_running: Callable[[], bool],
        on_cap_reached: Callable[[], None],
        on_infraction: Callable[[IntegrityEvent, int], None] | None = None,
    ) -> None:
        if max_attempts <= 0:
            raise ValueError("Max attempts must be a positive integer.")
        self._max_attempts = max_attempts
        self._is_running = is_running
        self._on_cap_reached = on_cap_reached
        self._on_infraction = on_infraction
        self._state = MonitorState.INACTIVE
        self._infraction_count = 0
        self._latest_reason: str | None = None
        self._source: SignalSource | None = None
        self._handlers: dict[IntegrityEvent, SignalHandler] = {}

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def infraction_count(self) -> int:
        return self._infraction_count

    @property
    def latest_reason(self) -> str | None:
        return self._latest_reason

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def arm(self, source: SignalSource) -> None:
        if self._state is not MonitorState.INACTIVE:
            raise RuntimeError(f"Cannot arm a monitor in state '{self._state.value}'.")
        self._source = source
        for kind in IntegrityEvent:
            handler = self._make_handler(kind)
            self._handlers[kind] = handler
            source.subscribe(kind, handler)
        self._state = MonitorState.ARMED

    def disarm(self) -> None:
        """Release every subscription. Safe to call repeatedly."""
        source, self._source = self._source, None
        handlers, self._handlers = self._handlers, {}
        if source is not None:
            for kind, handler in handlers.items():
                source.unsubscribe(kind, handler)
        if self._state is MonitorState.ARMED:
            self._state = MonitorState.TERMINATED

    def on_signal(self, kind: IntegrityEvent) -> None:
        if self._state is not MonitorState.ARMED or not self._is_running():
            return
        self._infraction_count += 1
        self._latest_reason = kind.reason
        logger.warning(
            "Integrity infraction %d/%d: %s",
            self._infraction_count,
            self._max_attempts,
            kind.reason,
        )
        if self._on_infraction is not None:
            self._on_infraction(kind, self._infraction_count)
        if self._infraction_count >= self._max_attempts:
            logger.warning("Infraction cap reached; terminating session")
            self._on_cap_reached()

    def _make_handler(self, kind: IntegrityEvent) -> SignalHandler:
        def handler() -> None:
            self.on_signal(kind)

        return handler
