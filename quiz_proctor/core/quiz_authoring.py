"""Authoring flows that turn professor input into stored quizzes."""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Container, Sequence

from quiz_proctor.constants.quiz_constants import (
    DEFAULT_PROFESSOR_EMAIL,
    DEFAULT_PROFESSOR_SECRET,
    DIFFICULTIES,
    MAX_TOPIC_QUESTION_COUNT,
    MIN_TOPIC_QUESTION_COUNT,
    QUIZ_CODE_ALPHABET,
    QUIZ_CODE_LENGTH,
)
from quiz_proctor.core.errors import (
    AuthenticationError,
    GenerationFailure,
    QuizValidationError,
)
from quiz_proctor.core.models import MCQ, Quiz
from quiz_proctor.core.question_source import GenerationRequest, QuestionSource
from quiz_proctor.core.quiz_importer import load_questions_from_file
from quiz_proctor.core.scoring import validate_duration, validate_quiz_fields
from quiz_proctor.core.services.quiz_repository import QuizRepository

logger = logging.getLogger(__name__)


def generate_quiz_code(existing: Container[str], rng: random.Random | None = None) -> str:
    """Draw six-character codes until one is not already taken."""
    rng = rng or random.Random()
    while True:
        code = "".join(rng.choice(QUIZ_CODE_ALPHABET) for _ in range(QUIZ_CODE_LENGTH))
        if code not in existing:
            return code


class QuizAuthoring:
    """Validates authoring input, issues quiz codes and stores the result."""

    def __init__(
        self,
        repository: QuizRepository,
        question_source: QuestionSource | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._repository = repository
        self._question_source = question_source
        self._rng = rng or random.Random()

    # --- Quiz creation ---

    def create_manual_quiz(self, title: str, duration: int, questions: Sequence[MCQ]) -> Quiz:
        validate_quiz_fields(title, duration, questions)
        return self._store(title, duration, questions)

    def import_quiz_file(self, title: str, duration: int, file_path: Path) -> Quiz:
        imported = load_questions_from_file(file_path)
        return self.create_manual_quiz(title, duration, imported.questions)

    def create_topic_quiz(
        self, title: str, duration: int, topic: str, difficulty: str, count: int
    ) -> Quiz:
        questions = self.generate_topic_questions(title, duration, topic, difficulty, count)
        return self.store_quiz(title, duration, questions)

    def create_text_quiz(self, title: str, duration: int, source_text: str, difficulty: str) -> Quiz:
        questions = self.generate_text_questions(title, duration, source_text, difficulty)
        return self.store_quiz(title, duration, questions)

    def generate_topic_questions(
        self, title: str, duration: int, topic: str, difficulty: str, count: int
    ) -> list[MCQ]:
        """Validate a topic request and fetch its questions. Nothing is stored."""
        self._validate_generation_fields(title, duration, difficulty)
        if not topic or not topic.strip():
            raise QuizValidationError("Please provide a topic.")
        if isinstance(count, bool) or not isinstance(count, int) or not (
            MIN_TOPIC_QUESTION_COUNT <= count <= MAX_TOPIC_QUESTION_COUNT
        ):
            raise QuizValidationError(
                f"Number of questions must be between {MIN_TOPIC_QUESTION_COUNT} "
                f"and {MAX_TOPIC_QUESTION_COUNT}."
            )
        request = GenerationRequest.for_topic(topic.strip(), difficulty, count)
        return self._generate(title, duration, request)

    def generate_text_questions(
        self, title: str, duration: int, source_text: str, difficulty: str
    ) -> list[MCQ]:
        self._validate_generation_fields(title, duration, difficulty)
        if not source_text or not source_text.strip():
            raise QuizValidationError("The document does not contain any text.")
        request = GenerationRequest.for_text(source_text.strip(), difficulty)
        return self._generate(title, duration, request)

    def store_quiz(self, title: str, duration: int, questions: Sequence[MCQ]) -> Quiz:
        """Issue a code for already validated questions and save the quiz."""
        return self._store(title, duration, questions)

    # --- Professors ---

    def ensure_default_professor(self) -> None:
        if not self._repository.load_professors():
            self._repository.save_professors({DEFAULT_PROFESSOR_EMAIL: DEFAULT_PROFESSOR_SECRET})
            logger.info("Seeded default professor account %s", DEFAULT_PROFESSOR_EMAIL)

    def register_professor(self, email: str, secret: str) -> str:
        email = email.strip()
        if not email or not secret:
            raise QuizValidationError("Please enter both email and password.")
        professors = self._repository.load_professors()
        if email in professors:
            raise QuizValidationError("An account with this email already exists.")
        professors[email] = secret
        self._repository.save_professors(professors)
        logger.info("Registered professor %s", email)
        return email

    def authenticate_professor(self, email: str, secret: str) -> str:
        email = email.strip()
        stored = self._repository.load_professors().get(email)
        if stored is None or stored != secret:
            raise AuthenticationError("Invalid email or password.")
        return email

    # --- Internals ---

    def _validate_generation_fields(self, title: str, duration: int, difficulty: str) -> None:
        if not title or not title.strip():
            raise QuizValidationError("Please provide a quiz title.")
        validate_duration(duration)
        if difficulty not in DIFFICULTIES:
            raise QuizValidationError(f"Difficulty must be one of {', '.join(DIFFICULTIES)}.")
        if self._question_source is None:
            raise GenerationFailure("No question generation service is configured.")

    def _generate(self, title: str, duration: int, request: GenerationRequest) -> list[MCQ]:
        assert self._question_source is not None
        questions = self._question_source.generate(request)
        if not questions:
            raise GenerationFailure("The generation service returned no questions.")
        try:
            validate_quiz_fields(title, duration, questions)
        except QuizValidationError as exc:
            logger.warning("Generated questions failed validation: %s", exc)
            raise GenerationFailure(f"Generated questions were invalid: {exc}") from exc
        return list(questions)

    def _store(self, title: str, duration: int, questions: Sequence[MCQ]) -> Quiz:
        existing = self._repository.load_quizzes()
        quiz = Quiz(
            id=generate_quiz_code(existing, self._rng),
            title=title.strip(),
            questions=tuple(questions),
            duration=duration,
        )
        self._repository.upsert_quiz(quiz)
        logger.info("Created quiz %s (%r, %d questions)", quiz.id, quiz.title, len(quiz.questions))
        return quiz
