"""Shared fixtures for the quiz engine tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from quiz_proctor.core.errors import GenerationFailure
from quiz_proctor.core.models import MCQ, Quiz, TakerIdentity
from quiz_proctor.core.question_source import GenerationRequest
from quiz_proctor.core.quiz_manager import QuizManager
from quiz_proctor.core.services.countdown import NullTicker
from quiz_proctor.core.services.quiz_repository import QuizRepository


class FakeClock:
    """Manually advanced clock used in place of ``datetime.now``."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class RecordingTicker:
    """Ticker that remembers whether it was started and stopped."""

    def __init__(self) -> None:
        self.callback = None
        self.interval = None
        self.started = False
        self.stopped = False

    def start(self, callback, interval_seconds: float) -> None:
        self.callback = callback
        self.interval = interval_seconds
        self.started = True

    def stop(self) -> None:
        self.stopped = True


class FakeQuestionSource:
    """Question source returning canned questions, or failing on demand."""

    def __init__(self, questions: list[MCQ] | None = None, error: Exception | None = None) -> None:
        self.questions = questions or []
        self.error = error
        self.requests: list[GenerationRequest] = []

    def generate(self, request: GenerationRequest) -> list[MCQ]:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return list(self.questions[: request.count])


@pytest.fixture
def sample_questions() -> list[MCQ]:
    return [
        MCQ(
            question="What is the capital of France?",
            options=("Berlin", "Paris", "Madrid", "Rome"),
            correct_answer="Paris",
            explanation="Paris has been the capital since 987.",
        ),
        MCQ(
            question="What is 6 x 7?",
            options=("41", "42", "43", "44"),
            correct_answer="42",
        ),
    ]


@pytest.fixture
def sample_quiz(sample_questions) -> Quiz:
    return Quiz(id="ABC123", title="General Knowledge", questions=tuple(sample_questions), duration=10)


@pytest.fixture
def taker() -> TakerIdentity:
    return TakerIdentity(name="Ada Lovelace", roll_number="R-001", email="ada@example.com")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ticker() -> RecordingTicker:
    return RecordingTicker()


@pytest.fixture
def repository() -> QuizRepository:
    """In-memory repository; nothing touches the disk."""
    return QuizRepository()


@pytest.fixture
def question_source(sample_questions) -> FakeQuestionSource:
    return FakeQuestionSource(questions=sample_questions * 5)


@pytest.fixture
def failing_source() -> FakeQuestionSource:
    return FakeQuestionSource(error=GenerationFailure("model unavailable"))


@pytest.fixture
def manager(repository, question_source, clock) -> QuizManager:
    return QuizManager(repository, question_source, ticker_factory=NullTicker, clock=clock)


@pytest.fixture
def stored_quiz(manager, sample_questions) -> Quiz:
    return manager.create_manual_quiz("General Knowledge", 10, sample_questions)
