"""Cooperative once-per-second countdown used by running sessions."""

from __future__ import annotations

import logging
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class TickHandle(Protocol):
    """Handle for a repeating tick. ``cancel`` must be idempotent."""

    def cancel(self) -> None: ...


class TickScheduler(Protocol):
    """Host-provided source of repeating ticks (QTimer, a thread, a test double)."""

    def schedule(self, interval_seconds: float, callback: Callable[[], None]) -> TickHandle: ...


def format_clock(seconds: int) -> str:
    """Format a number of seconds as ``MM:SS``."""
    seconds = max(0, int(seconds))
    minutes, remaining = divmod(seconds, 60)
    return f"{minutes:02d}:{remaining:02d}"


class CountdownClock:
    """Counts down from ``duration_seconds`` and reports expiry exactly once."""

    def __init__(
        self,
        duration_seconds: int,
        scheduler: TickScheduler,
        on_expired: Callable[[], None],
        interval_seconds: float = 1.0,
        on_tick: Callable[[int], None] | None = None,
    ) -> None:
        if duration_seconds <= 0:
            raise ValueError("Duration must be a positive integer number of seconds.")
        self._duration_seconds = duration_seconds
        self._remaining_seconds = duration_seconds
        self._scheduler = scheduler
        self._on_expired = on_expired
        self._on_tick = on_tick
        self._interval_seconds = interval_seconds
        self._handle: TickHandle | None = None
        self._expired = False

    @property
    def remaining_seconds(self) -> int:
        return self._remaining_seconds

    @property
    def elapsed_seconds(self) -> int:
        return self._duration_seconds - self._remaining_seconds

    def is_running(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        if self._handle is not None or self._expired:
            return
        self._handle = self._scheduler.schedule(self._interval_seconds, self.tick)

    def stop(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()

    def tick(self) -> None:
        """Advance the clock by one second."""
        if self._handle is None or self._expired:
            return
        self._remaining_seconds = max(0, self._remaining_seconds - 1)
        if self._on_tick is not None:
            self._on_tick(self._remaining_seconds)
        if self._remaining_seconds == 0:
            self._expired = True
            self.stop()
            logger.info("Countdown expired after %d second(s)", self._duration_seconds)
            self._on_expired()
