"""Qt implementations of the countdown ticker and the integrity watcher."""

from __future__ import annotations

import logging

from PySide6.QtCore import QEvent, QObject, Qt, QTimer
from PySide6.QtGui import QKeySequence
from PySide6.QtWidgets import QApplication

from quiz_proctor.core.services.countdown import TickCallback
from quiz_proctor.core.services.integrity import ViolationCallback, is_action_blocked

logger = logging.getLogger(__name__)


class QtTicker:
    """Drives session ticks from a ``QTimer`` on the GUI thread."""

    def __init__(self, parent: QObject | None = None) -> None:
        self._timer = QTimer(parent)
        self._callback: TickCallback | None = None
        self._timer.timeout.connect(self._handle_timeout)

    def start(self, callback: TickCallback, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._callback = callback
        self._timer.setInterval(int(interval_seconds * 1000))
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()
        self._callback = None

    def _handle_timeout(self) -> None:
        if self._callback is not None:
            self._callback()


class QtFocusWatcher(QObject):
    """Reports a violation when the application loses focus.

    While installed it also swallows context menus and the copy/paste
    shortcuts for every widget of the application.
    """

    def __init__(self, app: QApplication | None = None) -> None:
        super().__init__()
        self._app = app or QApplication.instance()
        self._callback: ViolationCallback | None = None

    def install(self, on_suspected_violation: ViolationCallback) -> None:
        if self._callback is not None:
            return
        self._callback = on_suspected_violation
        self._app.applicationStateChanged.connect(self._handle_state_changed)
        self._app.installEventFilter(self)

    def uninstall(self) -> None:
        if self._callback is None:
            return
        self._callback = None
        self._app.applicationStateChanged.disconnect(self._handle_state_changed)
        self._app.removeEventFilter(self)

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        if self._callback is None:
            return False
        action = _action_name(event)
        return action is not None and is_action_blocked(action, session_active=True)

    def _handle_state_changed(self, state: Qt.ApplicationState) -> None:
        callback = self._callback
        if callback is not None and state != Qt.ApplicationActive:
            logger.info("Application lost focus during a quiz")
            callback()


def _action_name(event: QEvent) -> str | None:
    if event.type() == QEvent.ContextMenu:
        return "contextmenu"
    if event.type() == QEvent.KeyPress:
        if event.matches(QKeySequence.Copy):
            return "copy"
        if event.matches(QKeySequence.Paste):
            return "paste"
    return None
