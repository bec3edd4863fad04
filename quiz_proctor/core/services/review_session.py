"""Read-only replay of finished attempts."""

from __future__ import annotations

from quiz_proctor.core.models import (
    Answer,
    MCQ,
    Quiz,
    Result,
    ReviewOption,
    ReviewQuestionView,
    TerminationReason,
    answers_match_quiz,
)

VIOLATION_MESSAGE = (
    "Your quiz was automatically submitted with a score of 0 because you switched "
    "away from the quiz window."
)
TIMEOUT_MESSAGE = "Time's up! Your quiz has been automatically submitted."


class ReviewSession:
    """Walks a result question by question without any way to change it."""

    def __init__(self, result: Result, quiz: Quiz) -> None:
        if result.quiz_id != quiz.id:
            raise ValueError(f"Result belongs to quiz {result.quiz_id}, not {quiz.id}.")
        if not answers_match_quiz(quiz, result.answers):
            raise ValueError("Result answers do not line up with the quiz questions.")
        self._result = result
        self._quiz = quiz
        self._current_index = 0

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def quiz(self) -> Quiz:
        return self._quiz

    def navigate(self, delta: int) -> None:
        if delta not in (-1, 1):
            return
        new_index = self._current_index + delta
        if 0 <= new_index < len(self._quiz.questions):
            self._current_index = new_index

    def go_to(self, index: int) -> None:
        if 0 <= index < len(self._quiz.questions):
            self._current_index = index

    def current_view(self) -> ReviewQuestionView:
        index = self._current_index
        return _build_view(
            self._quiz.questions[index],
            index,
            len(self._quiz.questions),
            self._result.answers[index],
        )

    def end_review(self) -> Result:
        return self._result


def begin_review(result: Result, quiz: Quiz) -> ReviewSession:
    return ReviewSession(result, quiz)


def answer_key_views(quiz: Quiz) -> list[ReviewQuestionView]:
    """Every question of a quiz with only the correct option marked."""
    total = len(quiz.questions)
    return [_build_view(mcq, index, total, None) for index, mcq in enumerate(quiz.questions)]


def outcome_message(result: Result) -> str | None:
    if result.termination_reason is TerminationReason.INTEGRITY_VIOLATION:
        return VIOLATION_MESSAGE
    if result.termination_reason is TerminationReason.TIMEOUT:
        return TIMEOUT_MESSAGE
    return None


def _build_view(mcq: MCQ, index: int, total: int, selected: Answer) -> ReviewQuestionView:
    # Classification is by text, so duplicate options are marked identically.
    options = tuple(
        ReviewOption(
            text=option,
            is_correct=option == mcq.correct_answer,
            is_selected=selected is not None and option == selected,
        )
        for option in mcq.options
    )
    return ReviewQuestionView(
        question=mcq.question,
        options=options,
        position=index + 1,
        total=total,
        is_first=index == 0,
        is_last=index == total - 1,
        explanation=mcq.explanation,
        selected=selected,
    )
