from __future__ import annotations

import threading

import pytest

from quiz_proctor.core.services.countdown import NullTicker, ThreadTicker
from quiz_proctor.core.services.integrity import CallbackWatcher, NullWatcher, is_action_blocked


class TestThreadTicker:
    def test_ticks_until_stopped(self):
        fired = threading.Event()
        calls = []

        def callback() -> None:
            calls.append(1)
            if len(calls) >= 3:
                fired.set()

        ticker = ThreadTicker()
        ticker.start(callback, 0.01)
        assert fired.wait(timeout=5)
        ticker.stop()
        count = len(calls)
        assert not ticker.running
        assert len(calls) == count

    def test_stop_from_inside_callback(self):
        stopped = threading.Event()
        ticker = ThreadTicker()

        def callback() -> None:
            ticker.stop()
            stopped.set()

        ticker.start(callback, 0.01)
        assert stopped.wait(timeout=5)
        assert not ticker.running

    def test_failing_callback_keeps_ticking(self):
        calls = []
        done = threading.Event()

        def callback() -> None:
            calls.append(1)
            if len(calls) >= 2:
                done.set()
            raise RuntimeError("tick failed")

        ticker = ThreadTicker()
        ticker.start(callback, 0.01)
        assert done.wait(timeout=5)
        ticker.stop()

    def test_cannot_start_twice(self):
        ticker = ThreadTicker()
        ticker.start(lambda: None, 10)
        with pytest.raises(RuntimeError):
            ticker.start(lambda: None, 10)
        ticker.stop()

    def test_interval_must_be_positive(self):
        with pytest.raises(ValueError):
            ThreadTicker().start(lambda: None, 0)

    def test_stop_before_start_is_harmless(self):
        ThreadTicker().stop()
        NullTicker().stop()


class TestWatchers:
    def test_callback_watcher_forwards_only_while_installed(self):
        watcher = CallbackWatcher()
        calls = []
        assert not watcher.signal_violation()
        watcher.install(lambda: calls.append("violation"))
        assert watcher.signal_violation()
        watcher.uninstall()
        assert not watcher.signal_violation()
        assert calls == ["violation"]

    def test_null_watcher_never_calls_back(self):
        calls = []
        watcher = NullWatcher()
        watcher.install(lambda: calls.append(1))
        watcher.uninstall()
        assert calls == []


@pytest.mark.parametrize(
    "action, active, expected",
    [
        ("copy", True, True),
        ("PASTE", True, True),
        ("contextmenu", True, True),
        ("copy", False, False),
        ("keydown", True, False),
    ],
)
def test_blocked_actions(action, active, expected):
    assert is_action_blocked(action, session_active=active) is expected
