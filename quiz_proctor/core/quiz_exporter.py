"""Utilities for exporting quizzes to the plain-text format used for imports."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from quiz_proctor.core.models import MCQ
from quiz_proctor.core.quiz_importer import CONTINUATION_INDENT, OPTION_LETTERS


def save_questions_to_file(file_path: Path, questions: Sequence[MCQ]) -> None:
    """Persist the provided questions to disk in the text import format."""

    if not questions:
        raise ValueError("Cannot export an empty quiz.")

    file_path = file_path.resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(serialize_questions(questions), encoding="utf-8")


def serialize_questions(questions: Sequence[MCQ]) -> str:
    blocks = [_serialize_question(question) for question in questions]
    return "\n\n---\n\n".join(blocks) + "\n"


def _serialize_question(question: MCQ) -> str:
    if len(question.options) > len(OPTION_LETTERS):
        raise ValueError(f"At most {len(OPTION_LETTERS)} options can be exported.")

    lines: list[str] = []
    question_lines = question.question.splitlines() or [question.question]
    lines.append(f"Q: {question_lines[0]}")
    lines.extend(_continuation(question_lines[1:]))

    for letter, option_text in zip(OPTION_LETTERS, question.options):
        option_lines = option_text.splitlines() or [option_text]
        lines.append(f"{letter}: {option_lines[0]}")
        lines.extend(_continuation(option_lines[1:]))

    # First match wins when options repeat, which reimports to the same text.
    correct_index = question.options.index(question.correct_answer)
    lines.append(f"CORRECT: {OPTION_LETTERS[correct_index]}")

    if question.explanation:
        explanation_lines = question.explanation.splitlines()
        lines.append(f"EXPLANATION: {explanation_lines[0]}")
        lines.extend(_continuation(explanation_lines[1:]))

    return "\n".join(lines)


def _continuation(lines: Sequence[str]) -> list[str]:
    # Indented so that text such as "B: ..." or "---" is not read back as a marker.
    return [f"{CONTINUATION_INDENT}{line}" if line.strip() else "" for line in lines]
