"""Integrity monitoring for running quiz attempts.

The hosting environment (a browser tab, a Qt window) decides what counts as a
suspected violation, typically losing foreground focus. It reports through an
EnvironmentWatcher that the session installs on start and uninstalls when it
terminates.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

ViolationCallback = Callable[[], None]

# Suppressed unconditionally while a session is active.
BLOCKED_ACTIONS: frozenset[str] = frozenset({"copy", "paste", "contextmenu"})


def is_action_blocked(action: str, session_active: bool) -> bool:
    return session_active and action.lower() in BLOCKED_ACTIONS


class EnvironmentWatcher(Protocol):
    def install(self, on_suspected_violation: ViolationCallback) -> None: ...

    def uninstall(self) -> None: ...


class NullWatcher:
    """Watcher for headless contexts: never reports anything."""

    def install(self, on_suspected_violation: ViolationCallback) -> None:
        return None

    def uninstall(self) -> None:
        return None


class CallbackWatcher:
    """Watcher fed by an adapter that observes the environment itself.

    The web adapter calls ``signal_violation`` when the taker page reports that
    it was hidden. Signals arriving while nothing is installed are dropped.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._callback: ViolationCallback | None = None

    @property
    def installed(self) -> bool:
        with self._lock:
            return self._callback is not None

    def install(self, on_suspected_violation: ViolationCallback) -> None:
        with self._lock:
            self._callback = on_suspected_violation

    def uninstall(self) -> None:
        with self._lock:
            self._callback = None

    def signal_violation(self) -> bool:
        """Forward a suspected violation. Returns False if no session was listening."""
        with self._lock:
            callback = self._callback
        if callback is None:
            logger.debug("Violation signal ignored; no session installed")
            return False
        callback()
        return True
