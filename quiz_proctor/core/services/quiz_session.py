"""Service driving one timed quiz attempt from start to a scored result."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from threading import RLock
from typing import Callable

from quiz_proctor.constants.quiz_constants import TICK_INTERVAL_SECONDS
from quiz_proctor.core.models import (
    Answer,
    Quiz,
    Result,
    SessionPhase,
    SessionSnapshot,
    TakerIdentity,
    TerminationReason,
)
from quiz_proctor.core.scoring import score
from quiz_proctor.core.services.countdown import NullTicker, Ticker
from quiz_proctor.core.services.integrity import EnvironmentWatcher, NullWatcher

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
SnapshotListener = Callable[[SessionSnapshot], None]
FinishListener = Callable[[Result], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuizSession:
    """Manages the state of one taker's attempt at a quiz.

    Every operation is serialized on a re-entrant lock, so intents from the
    presentation layer, countdown ticks and integrity signals can arrive from
    different threads. Apart from construction nothing raises: requests that
    make no sense in the current state are ignored.

    Listeners run after the lock is released. Finish listeners are where
    collaborators persist the result.
    """

    def __init__(
        self,
        quiz: Quiz,
        taker: TakerIdentity,
        *,
        ticker: Ticker | None = None,
        watcher: EnvironmentWatcher | None = None,
        clock: Clock | None = None,
        tick_interval_seconds: float = TICK_INTERVAL_SECONDS,
    ) -> None:
        if not quiz.questions:
            raise ValueError("Cannot start a session for a quiz without questions.")

        self._lock = RLock()
        self._quiz = quiz
        self._taker = taker
        self._ticker: Ticker = ticker or NullTicker()
        self._watcher: EnvironmentWatcher = watcher or NullWatcher()
        self._clock: Clock = clock or _utcnow
        self._tick_interval_seconds = tick_interval_seconds

        self._answers: list[Answer] = [None] * len(quiz.questions)
        self._current_index: int = 0
        self._deadline: datetime | None = None
        self._pending_confirmation: bool = False
        self._termination_reason: TerminationReason | None = None
        self._result: Result | None = None

        self._snapshot_listeners: list[SnapshotListener] = []
        self._finish_listeners: list[FinishListener] = []

    # --- Lifecycle ---

    def begin(self) -> SessionSnapshot:
        """Fix the deadline and arm the countdown and the integrity watcher."""
        with self._lock:
            if self._deadline is not None:
                return self._snapshot_locked()
            self._deadline = self._clock() + timedelta(minutes=self._quiz.duration)
            snapshot = self._snapshot_locked()

        self._watcher.install(self.on_integrity_violation)
        self._ticker.start(self.tick, self._tick_interval_seconds)
        logger.info(
            "Session started for quiz %s (%d questions, %d min)",
            self._quiz.id,
            len(self._quiz.questions),
            self._quiz.duration,
        )
        return snapshot

    def add_snapshot_listener(self, listener: SnapshotListener) -> None:
        self._snapshot_listeners.append(listener)

    def add_finish_listener(self, listener: FinishListener) -> None:
        self._finish_listeners.append(listener)

    # --- Intents ---

    def select_answer(self, option: str) -> None:
        with self._lock:
            if not self._accepts_input():
                return
            question = self._quiz.questions[self._current_index]
            if option not in question.options:
                return
            if self._answers[self._current_index] == option:
                return
            self._answers[self._current_index] = option
            snapshot = self._snapshot_locked()
        self._notify_snapshot(snapshot)

    def navigate(self, delta: int) -> None:
        with self._lock:
            if not self._accepts_input() or delta not in (-1, 1):
                return
            new_index = self._current_index + delta
            if not 0 <= new_index < len(self._quiz.questions):
                return
            self._current_index = new_index
            snapshot = self._snapshot_locked()
        self._notify_snapshot(snapshot)

    def request_submit(self) -> None:
        with self._lock:
            if self._result is not None or self._pending_confirmation:
                return
            self._pending_confirmation = True
            snapshot = self._snapshot_locked()
        self._notify_snapshot(snapshot)

    def cancel_submit(self) -> None:
        with self._lock:
            if self._result is not None or not self._pending_confirmation:
                return
            self._pending_confirmation = False
            snapshot = self._snapshot_locked()
        self._notify_snapshot(snapshot)

    def confirm_submit(self) -> Result | None:
        """Finalize a pending manual submission.

        Returns None when no submission was requested. Once the session has
        terminated, returns the existing result whatever the reason was.
        """
        with self._lock:
            if self._result is not None:
                return self._result
            if not self._pending_confirmation:
                return None
        return self.force_submit(TerminationReason.MANUAL)

    def force_submit(self, reason: TerminationReason) -> Result:
        """Finalize the attempt. Only the first call has any effect."""
        with self._lock:
            if self._result is not None:
                return self._result

            raw_score = score(self._quiz, self._answers)
            final_score = 0 if reason is TerminationReason.INTEGRITY_VIOLATION else raw_score
            self._termination_reason = reason
            self._pending_confirmation = False
            self._result = Result(
                quiz_id=self._quiz.id,
                taker=self._taker,
                score=final_score,
                total=len(self._quiz.questions),
                answers=tuple(self._answers),
                termination_reason=reason,
                submitted_at=self._clock(),
            )
            result = self._result
            snapshot = self._snapshot_locked()

        self._ticker.stop()
        self._watcher.uninstall()
        logger.info(
            "Session for quiz %s ended (%s): %d/%d",
            result.quiz_id,
            reason.value,
            result.score,
            result.total,
        )
        for listener in list(self._finish_listeners):
            listener(result)
        self._notify_snapshot(snapshot)
        return result

    # --- Suspension points ---

    def tick(self) -> None:
        """Re-evaluate the countdown; time out once the deadline has passed."""
        with self._lock:
            if self._result is not None or self._deadline is None:
                return
            expired = self._clock() >= self._deadline
            snapshot = None if expired else self._snapshot_locked()

        if expired:
            self.force_submit(TerminationReason.TIMEOUT)
        elif snapshot is not None:
            self._notify_snapshot(snapshot)

    def on_integrity_violation(self) -> None:
        with self._lock:
            if self._result is not None:
                return
        logger.warning("Integrity violation reported for quiz %s", self._quiz.id)
        self.force_submit(TerminationReason.INTEGRITY_VIOLATION)

    # --- State ---

    @property
    def quiz(self) -> Quiz:
        return self._quiz

    @property
    def taker(self) -> TakerIdentity:
        return self._taker

    @property
    def answers(self) -> tuple[Answer, ...]:
        with self._lock:
            return tuple(self._answers)

    @property
    def current_index(self) -> int:
        with self._lock:
            return self._current_index

    @property
    def deadline(self) -> datetime | None:
        return self._deadline

    @property
    def terminated(self) -> bool:
        with self._lock:
            return self._result is not None

    @property
    def termination_reason(self) -> TerminationReason | None:
        with self._lock:
            return self._termination_reason

    @property
    def result(self) -> Result | None:
        with self._lock:
            return self._result

    @property
    def phase(self) -> SessionPhase:
        with self._lock:
            return self._phase_locked()

    def remaining_seconds(self) -> int:
        with self._lock:
            return self._remaining_seconds_locked()

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return self._snapshot_locked()

    # --- Internals ---

    def _accepts_input(self) -> bool:
        return self._result is None and not self._pending_confirmation

    def _phase_locked(self) -> SessionPhase:
        if self._result is not None:
            return SessionPhase.TERMINATED
        if self._pending_confirmation:
            return SessionPhase.PENDING_CONFIRMATION
        return SessionPhase.ACTIVE

    def _remaining_seconds_locked(self) -> int:
        if self._result is not None:
            return 0
        if self._deadline is None:
            return self._quiz.duration * 60
        remaining = (self._deadline - self._clock()).total_seconds()
        return max(0, int(remaining))

    def _snapshot_locked(self) -> SessionSnapshot:
        index = self._current_index
        question = self._quiz.questions[index]
        return SessionSnapshot(
            question=question.question,
            options=question.options,
            selected=self._answers[index],
            position=index + 1,
            total=len(self._quiz.questions),
            remaining_seconds=self._remaining_seconds_locked(),
            is_first=index == 0,
            is_last=index == len(self._quiz.questions) - 1,
            phase=self._phase_locked(),
            termination_reason=self._termination_reason,
        )

    def _notify_snapshot(self, snapshot: SessionSnapshot) -> None:
        for listener in list(self._snapshot_listeners):
            listener(snapshot)


def start_session(
    quiz: Quiz,
    taker: TakerIdentity,
    *,
    ticker: Ticker | None = None,
    watcher: EnvironmentWatcher | None = None,
    clock: Clock | None = None,
    finish_listeners: list[FinishListener] | None = None,
) -> QuizSession:
    """Create a session, attach finish listeners and arm it."""
    session = QuizSession(quiz, taker, ticker=ticker, watcher=watcher, clock=clock)
    for listener in finish_listeners or []:
        session.add_finish_listener(listener)
    session.begin()
    return session
