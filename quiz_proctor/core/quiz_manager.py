"""Application context shared by the desktop UI and the web API."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta, timezone
from pathlib import Path
from threading import Lock
from typing import Callable, Sequence
from uuid import uuid4

from quiz_proctor.constants.quiz_constants import FINISHED_SESSION_LIMIT, FINISHED_SESSION_TTL_SECONDS
from quiz_proctor.core.errors import InvalidQuizCode
from quiz_proctor.core.models import MCQ, Quiz, Result, TakerIdentity
from quiz_proctor.core.question_source import QuestionSource
from quiz_proctor.core.quiz_authoring import QuizAuthoring
from quiz_proctor.core.scoring import validate_taker
from quiz_proctor.core.services.countdown import ThreadTicker, Ticker
from quiz_proctor.core.services.integrity import CallbackWatcher, EnvironmentWatcher
from quiz_proctor.core.services.quiz_repository import QuizRepository
from quiz_proctor.core.services.quiz_session import Clock, QuizSession
from quiz_proctor.core.services.review_session import ReviewSession

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuizManager:
    """Facade over the repository, authoring and live quiz sessions.

    Data is loaded when the repository is constructed and saved on every
    mutation. Each live session is owned by one taker context, identified by
    the token returned from ``start_session``.

    Finished sessions are moved aside and kept only long enough for result and
    review requests; see ``FINISHED_SESSION_TTL_SECONDS``.
    """

    def __init__(
        self,
        repository: QuizRepository | None = None,
        question_source: QuestionSource | None = None,
        *,
        ticker_factory: Callable[[], Ticker] = ThreadTicker,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._lock = Lock()
        self._repository = repository or QuizRepository()
        self._authoring = QuizAuthoring(self._repository, question_source, rng=rng)
        self._ticker_factory = ticker_factory
        self._clock = clock
        self._now: Clock = clock or _utcnow

        self._sessions: dict[str, QuizSession] = {}
        self._watchers: dict[str, EnvironmentWatcher] = {}
        self._finished: dict[str, tuple[QuizSession, datetime]] = {}

        with self._lock:
            self._authoring.ensure_default_professor()

    # --- Authoring delegation ---

    def create_manual_quiz(self, title: str, duration: int, questions: Sequence[MCQ]) -> Quiz:
        with self._lock:
            return self._authoring.create_manual_quiz(title, duration, questions)

    def import_quiz_file(self, title: str, duration: int, file_path: Path) -> Quiz:
        with self._lock:
            return self._authoring.import_quiz_file(title, duration, file_path)

    def create_topic_quiz(
        self, title: str, duration: int, topic: str, difficulty: str, count: int
    ) -> Quiz:
        # Generation can take a while; only storing the quiz needs the lock.
        questions = self._authoring.generate_topic_questions(title, duration, topic, difficulty, count)
        with self._lock:
            return self._authoring.store_quiz(title, duration, questions)

    def create_text_quiz(self, title: str, duration: int, source_text: str, difficulty: str) -> Quiz:
        questions = self._authoring.generate_text_questions(title, duration, source_text, difficulty)
        with self._lock:
            return self._authoring.store_quiz(title, duration, questions)

    def register_professor(self, email: str, secret: str) -> str:
        with self._lock:
            return self._authoring.register_professor(email, secret)

    def authenticate_professor(self, email: str, secret: str) -> str:
        with self._lock:
            return self._authoring.authenticate_professor(email, secret)

    # --- Quiz lookup ---

    def list_quizzes(self) -> list[Quiz]:
        """All quizzes, most recently created first."""
        with self._lock:
            return list(reversed(list(self._repository.load_quizzes().values())))

    def get_quiz(self, code: str) -> Quiz:
        normalized = code.strip().upper()
        with self._lock:
            quiz = self._repository.get_quiz(normalized)
        if quiz is None:
            raise InvalidQuizCode(normalized)
        return quiz

    def results_for_quiz(self, quiz_id: str) -> list[Result]:
        with self._lock:
            return self._repository.results_for_quiz(quiz_id)

    # --- Sessions ---

    @property
    def active_session_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    @property
    def finished_session_count(self) -> int:
        with self._lock:
            return len(self._finished)

    def start_session(
        self,
        code: str,
        taker: TakerIdentity,
        *,
        ticker: Ticker | None = None,
        watcher: EnvironmentWatcher | None = None,
    ) -> tuple[str, QuizSession]:
        """Look up the quiz and arm a new session for one taker context."""
        validate_taker(taker)
        quiz = self.get_quiz(code)

        session_watcher = watcher or CallbackWatcher()
        session = QuizSession(
            quiz,
            taker,
            ticker=ticker or self._ticker_factory(),
            watcher=session_watcher,
            clock=self._clock,
        )
        token = uuid4().hex
        session.add_finish_listener(self._record_result)
        session.add_finish_listener(lambda result: self._retire_session(token, result))

        with self._lock:
            self._prune_finished_locked()
            self._sessions[token] = session
            self._watchers[token] = session_watcher
        session.begin()
        return token, session

    def get_session(self, token: str) -> QuizSession:
        """Running sessions, and finished ones until they expire."""
        with self._lock:
            self._prune_finished_locked()
            session = self._sessions.get(token)
            if session is None and token in self._finished:
                session = self._finished[token][0]
        if session is None:
            raise KeyError(token)
        return session

    def report_violation(self, token: str) -> QuizSession:
        """Forward a suspected violation observed by an adapter for this session."""
        session = self.get_session(token)
        with self._lock:
            watcher = self._watchers.get(token)
        if isinstance(watcher, CallbackWatcher):
            watcher.signal_violation()
        else:
            session.on_integrity_violation()
        return session

    def end_session(self, token: str) -> bool:
        """Forget a finished session. Running sessions are kept."""
        with self._lock:
            running = self._sessions.get(token)
            if running is not None and not running.terminated:
                return False
            removed = self._finished.pop(token, None) is not None
            if running is not None:
                del self._sessions[token]
                self._watchers.pop(token, None)
                removed = True
        if removed:
            logger.debug("Discarded finished session %s", token)
        return removed

    def begin_review(self, result: Result) -> ReviewSession:
        return ReviewSession(result, self.get_quiz(result.quiz_id))

    # --- Internals ---

    def _record_result(self, result: Result) -> None:
        with self._lock:
            self._repository.append_result(result)
        logger.info("Recorded result for quiz %s (%d/%d)", result.quiz_id, result.score, result.total)

    def _retire_session(self, token: str, result: Result) -> None:
        with self._lock:
            session = self._sessions.pop(token, None)
            self._watchers.pop(token, None)
            if session is None:
                return
            self._finished[token] = (session, result.submitted_at or self._now())
            self._prune_finished_locked()

    def _prune_finished_locked(self) -> None:
        cutoff = self._now() - timedelta(seconds=FINISHED_SESSION_TTL_SECONDS)
        # Insertion order is finish order, so the oldest entries come first.
        while self._finished:
            token, (_, finished_at) = next(iter(self._finished.items()))
            if finished_at > cutoff and len(self._finished) <= FINISHED_SESSION_LIMIT:
                break
            del self._finished[token]
