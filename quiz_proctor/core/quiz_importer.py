"""Utilities for importing quiz questions from a human-friendly text file.

File format (one block per question, each starting with Q: and optionally
separated by '---' lines):

    Q: Question text. Additional lines until the next marker are treated as
       part of the question, blank lines included. Indented lines are never
       read as markers.
    A: First option text
    B: Second option text
    ...            (at least two options, lettered from A without gaps)
    CORRECT: B     (required)
    EXPLANATION: Optional explanation shown during review.

Example:

    Q: What is 6 x 7?
    A: 41
    B: 42
    C: 43
    CORRECT: B
    EXPLANATION: Six sevens are forty-two.

The title and duration of a quiz are not part of the file; the authoring flow
asks for them separately.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from quiz_proctor.core.errors import QuizImportError
from quiz_proctor.core.models import MCQ

OPTION_LETTERS = tuple("ABCDEFGHIJ")
# Continuation lines written with this indent are never read as markers.
CONTINUATION_INDENT = "    "


@dataclass(slots=True)
class ImportedQuestions:
    """Container for imported questions and where they came from."""

    source_path: Path | None
    questions: list[MCQ]


def load_questions_from_file(file_path: Path) -> ImportedQuestions:
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise QuizImportError(f"Could not read {file_path}: {exc}") from exc
    return ImportedQuestions(source_path=file_path, questions=parse_questions(text))


def parse_questions(text: str) -> list[MCQ]:
    questions = [_parse_block(block) for block in _split_blocks(text)]
    if not questions:
        raise QuizImportError("Quiz file did not contain any questions.")
    return questions


def _is_marker_line(raw_line: str) -> bool:
    return bool(raw_line) and not raw_line[0].isspace()


def _split_blocks(text: str) -> list[str]:
    """Split on '---' lines and on every unindented 'Q:' line.

    Blank lines stay inside their block so questions and explanations can hold
    several paragraphs.
    """
    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in text.splitlines():
        starts_question = _is_marker_line(raw_line) and raw_line.upper().startswith("Q:")
        if raw_line.rstrip() == "---" or starts_question:
            if current_block:
                blocks.append("\n".join(current_block).strip())
                current_block = []
            if not starts_question:
                continue
        current_block.append(raw_line)
    if current_block:
        blocks.append("\n".join(current_block).strip())
    return [block for block in blocks if block]


def _parse_block(block: str) -> MCQ:
    question_lines: list[str] = []
    options: dict[str, str] = {}
    correct_letter: str | None = None
    explanation_lines: list[str] = []
    current_section: str | None = None

    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line:
            if current_section == "Q":
                question_lines.append("")
            elif current_section == "EXPLANATION":
                explanation_lines.append("")
            elif current_section in OPTION_LETTERS:
                options[current_section] += "\n"
            continue

        if _is_marker_line(raw_line):
            upper = line.upper()
            if upper.startswith("Q:"):
                question_lines = [line[2:].strip()]
                current_section = "Q"
                continue

            if upper.startswith("CORRECT:"):
                correct_letter = line.split(":", 1)[1].strip().upper()
                current_section = None
                continue

            if upper.startswith("EXPLANATION:"):
                explanation_lines = [line.split(":", 1)[1].strip()]
                current_section = "EXPLANATION"
                continue

            if len(line) > 2 and upper[0] in OPTION_LETTERS and line[1] == ":":
                letter = upper[0]
                if letter in options:
                    raise QuizImportError(f"Option {letter} is defined twice.")
                options[letter] = line[2:].strip()
                current_section = letter
                continue
        elif raw_line.startswith(CONTINUATION_INDENT):
            line = raw_line[len(CONTINUATION_INDENT):].rstrip()

        if current_section == "Q":
            question_lines.append(line)
        elif current_section == "EXPLANATION":
            explanation_lines.append(line)
        elif current_section in OPTION_LETTERS:
            options[current_section] = options[current_section] + f"\n{line}"
        else:
            raise QuizImportError(f"Encountered text outside of a known section: '{line}'.")

    question_text = "\n".join(question_lines).strip()
    if not question_text:
        raise QuizImportError("Question text missing (Q: ...)")

    expected_letters = list(OPTION_LETTERS[: len(options)])
    if len(options) < 2:
        raise QuizImportError("Each question must define at least two options (A, B, ...).")
    if sorted(options) != expected_letters:
        raise QuizImportError("Options must be lettered from A without gaps.")

    option_list = [options[letter].strip() for letter in expected_letters]
    if any(not option for option in option_list):
        raise QuizImportError("Option text cannot be empty.")

    if correct_letter is None:
        raise QuizImportError("CORRECT is required for every question.")
    if correct_letter not in expected_letters:
        raise QuizImportError(f"CORRECT must be one of {', '.join(expected_letters)}.")

    explanation = "\n".join(explanation_lines).strip() or None
    return MCQ(
        question=question_text,
        options=tuple(option_list),
        correct_answer=option_list[expected_letters.index(correct_letter)],
        explanation=explanation,
    )
