"""Thread-backed tick scheduler for the web host."""

from __future__ import annotations

import logging
from threading import Event, Thread
from typing import Callable

logger = logging.getLogger(__name__)


class ThreadTickHandle:
    """Repeating tick running on a daemon thread until cancelled."""

    def __init__(self, interval_seconds: float, callback: Callable[[], None]) -> None:
        self._interval_seconds = interval_seconds
        self._callback = callback
        self._cancelled = Event()
        self._thread = Thread(target=self._run, name="AssessmentClock", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        # Never joins: cancel may be called from inside the callback itself.
        self._cancelled.set()

    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def _run(self) -> None:
        while not self._cancelled.wait(self._interval_seconds):
            self._callback()


class ThreadTickScheduler:
    """Schedules each repeating tick on its own daemon thread."""

    def schedule(self, interval_seconds: float, callback: Callable[[], None]) -> ThreadTickHandle:
        handle = ThreadTickHandle(interval_seconds, callback)
        handle.start()
        logger.debug("Started clock thread (interval %.1fs)", interval_seconds)
        return handle
