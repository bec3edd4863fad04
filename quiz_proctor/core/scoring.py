"""Scoring and the validation rules applied when quizzes and takers enter the system."""

from __future__ import annotations

from typing import Sequence

from quiz_proctor.constants.quiz_constants import MIN_OPTIONS_PER_QUESTION
from quiz_proctor.core.errors import QuizValidationError
from quiz_proctor.core.models import MCQ, Answer, Quiz, TakerIdentity


def score(quiz: Quiz, answers: Sequence[Answer]) -> int:
    """Count the positions where the answer text equals the correct answer exactly."""
    return sum(
        1
        for question, answer in zip(quiz.questions, answers)
        if answer is not None and answer == question.correct_answer
    )


def validate_mcq(mcq: MCQ, number: int | None = None) -> None:
    label = f"Question {number}" if number is not None else "Question"
    if not mcq.question.strip():
        raise QuizValidationError(f"{label}: question text must not be empty.")
    if len(mcq.options) < MIN_OPTIONS_PER_QUESTION:
        raise QuizValidationError(
            f"{label}: at least {MIN_OPTIONS_PER_QUESTION} options are required."
        )
    if any(not option.strip() for option in mcq.options):
        raise QuizValidationError(f"{label}: option text cannot be empty.")
    if mcq.correct_answer not in mcq.options:
        raise QuizValidationError(f"{label}: the correct answer must be one of the options.")


def validate_quiz_fields(title: str, duration: object, questions: Sequence[MCQ]) -> None:
    """Validate everything an authoring flow supplies before a quiz code is issued."""
    if not title or not title.strip():
        raise QuizValidationError("Please provide a quiz title.")
    validate_duration(duration)
    if not questions:
        raise QuizValidationError("A quiz needs at least one question.")
    for number, mcq in enumerate(questions, start=1):
        validate_mcq(mcq, number)


def validate_duration(duration: object) -> None:
    # bool is an int subclass; reject it explicitly
    if isinstance(duration, bool) or not isinstance(duration, int):
        raise QuizValidationError("Duration must be a whole number of minutes.")
    if duration < 1:
        raise QuizValidationError("Duration must be at least one minute.")


def validate_taker(taker: TakerIdentity) -> None:
    if not all(value.strip() for value in (taker.name, taker.roll_number, taker.email)):
        raise QuizValidationError("Please fill in all fields.")
