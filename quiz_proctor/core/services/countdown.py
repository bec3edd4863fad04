"""Periodic tick drivers for the session countdown.

A ticker calls a callback roughly once per interval until it is stopped. The
session engine owns the ticker: it starts it when the attempt starts and stops
it on every termination path.
"""

from __future__ import annotations

import logging
from threading import Event, Thread, current_thread
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class Ticker(Protocol):
    def start(self, callback: TickCallback, interval_seconds: float) -> None: ...

    def stop(self) -> None: ...


class NullTicker:
    """Ticker that never fires. Useful for headless use and tests that tick by hand."""

    def start(self, callback: TickCallback, interval_seconds: float) -> None:
        return None

    def stop(self) -> None:
        return None


class ThreadTicker:
    """Runs the callback on a daemon thread until stopped."""

    def __init__(self, name: str = "QuizCountdown") -> None:
        self._name = name
        self._stop_event = Event()
        self._thread: Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()

    def start(self, callback: TickCallback, interval_seconds: float) -> None:
        if self._thread is not None:
            raise RuntimeError("Ticker has already been started.")
        if interval_seconds <= 0:
            raise ValueError("Tick interval must be positive.")

        def run() -> None:
            while not self._stop_event.wait(interval_seconds):
                try:
                    callback()
                except Exception:
                    logger.exception("Countdown tick failed")

        self._thread = Thread(target=run, name=self._name, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        thread = self._thread
        # The session stops its ticker from inside a timeout tick; never join ourselves.
        if thread is not None and thread is not current_thread():
            thread.join(timeout=2.0)
