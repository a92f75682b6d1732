"""Qt implementations of the host capabilities an assessment session needs."""

from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QEvent, QObject, Qt, QTimer
from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QWidget

from assessment_app.core.models import IntegrityEvent
from assessment_app.core.services.integrity_monitor import PresentationError

logger = logging.getLogger(__name__)

_FORBIDDEN_KEYS = {Qt.Key_C, Qt.Key_X, Qt.Key_V}
_HEADLESS_PLATFORMS = {"offscreen", "minimal"}


class QtTickHandle:
    """Wraps the QTimer driving one countdown."""

    def __init__(self, timer: QTimer) -> None:
        self._timer: QTimer | None = timer

    def cancel(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.stop()
            timer.deleteLater()

    def is_cancelled(self) -> bool:
        return self._timer is None


class QtTickScheduler:
    """Repeating ticks on the Qt event loop."""

    def __init__(self, parent: QObject | None = None) -> None:
        self._parent = parent

    def schedule(self, interval_seconds: float, callback: Callable[[], None]) -> QtTickHandle:
        timer = QTimer(self._parent)
        timer.setInterval(int(interval_seconds * 1000))
        timer.timeout.connect(callback)
        timer.start()
        return QtTickHandle(timer)


class IntegrityEventFilter(QObject):
    """Application-wide event filter translating Qt events into integrity signals.

    Focus loss of the whole application counts as a tab switch, Ctrl/Cmd with
    C, X or V as a forbidden shortcut, leaving full-screen on the watched
    window as a full-screen exit, and any clipboard change as a copy. Context
    menus are swallowed without counting.
    """

    def __init__(
        self,
        report: Callable[[IntegrityEvent], object],
        watched_window: QWidget | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._report = report
        self._watched_window = watched_window

    def install(self, app: QGuiApplication) -> None:
        app.installEventFilter(self)
        app.clipboard().dataChanged.connect(self._handle_clipboard_change)

    def uninstall(self, app: QGuiApplication) -> None:
        app.removeEventFilter(self)
        app.clipboard().dataChanged.disconnect(self._handle_clipboard_change)

    def set_watched_window(self, window: QWidget | None) -> None:
        self._watched_window = window

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # noqa: N802 - Qt override
        event_type = event.type()
        if event_type == QEvent.Type.ApplicationStateChange:
            if event.applicationState() != Qt.ApplicationState.ApplicationActive:
                self._report(IntegrityEvent.TAB_SWITCH)
            return False
        if event_type == QEvent.Type.KeyPress and self._is_forbidden_shortcut(event):
            self._report(IntegrityEvent.FORBIDDEN_SHORTCUT)
            return True
        if event_type == QEvent.Type.ContextMenu:
            return True
        if (
            event_type == QEvent.Type.WindowStateChange
            and watched is self._watched_window
            and event.oldState() & Qt.WindowState.WindowFullScreen
            and not self._watched_window.isFullScreen()
        ):
            self._report(IntegrityEvent.FULLSCREEN_EXIT)
            return False
        return super().eventFilter(watched, event)

    @staticmethod
    def _is_forbidden_shortcut(event: QEvent) -> bool:
        modifiers = event.modifiers()
        has_accelerator = bool(
            modifiers & (Qt.KeyboardModifier.ControlModifier | Qt.KeyboardModifier.MetaModifier)
        )
        return has_accelerator and event.key() in _FORBIDDEN_KEYS

    def _handle_clipboard_change(self) -> None:
        self._report(IntegrityEvent.CLIPBOARD_COPY)


class WidgetPresentationController:
    """Puts a top-level widget into full-screen while a session runs."""

    def __init__(self, window: QWidget | None = None) -> None:
        self._window = window

    def attach(self, window: QWidget) -> None:
        self._window = window

    def enter_fullscreen(self) -> None:
        if self._window is None:
            raise PresentationError("No window attached for full-screen presentation.")
        platform = QGuiApplication.platformName()
        if platform in _HEADLESS_PLATFORMS:
            raise PresentationError(f"Platform '{platform}' does not support full-screen.")
        self._window.showFullScreen()

    def exit_fullscreen(self) -> None:
        if self._window is not None and self._window.isFullScreen():
            self._window.showNormal()
