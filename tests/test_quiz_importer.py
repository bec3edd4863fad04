from __future__ import annotations

import pytest

from quiz_proctor.core.errors import QuizImportError, QuizValidationError
from quiz_proctor.core.models import MCQ
from quiz_proctor.core.quiz_exporter import save_questions_to_file, serialize_questions
from quiz_proctor.core.quiz_importer import load_questions_from_file, parse_questions

SAMPLE_FILE = """\
Q: What is the capital of France?
A: Berlin
B: Paris
C: Madrid
CORRECT: B
EXPLANATION: Paris has been the capital since 987.

---

Q: What is 6 x 7?
Write your answer carefully.
A: 41
B: 42
CORRECT: b
"""


class TestParse:
    def test_parses_blocks(self):
        questions = parse_questions(SAMPLE_FILE)
        assert len(questions) == 2
        assert questions[0].correct_answer == "Paris"
        assert questions[0].explanation == "Paris has been the capital since 987."
        assert questions[1].question == "What is 6 x 7?\nWrite your answer carefully."
        assert questions[1].options == ("41", "42")
        assert questions[1].explanation is None

    def test_empty_file(self):
        with pytest.raises(QuizImportError):
            parse_questions("\n\n---\n")

    @pytest.mark.parametrize(
        "block",
        [
            "Q: Only one option\nA: yes\nCORRECT: A",
            "Q: Gap\nA: one\nC: three\nCORRECT: A",
            "Q: No answer\nA: one\nB: two",
            "Q: Bad letter\nA: one\nB: two\nCORRECT: D",
            "A: one\nB: two\nCORRECT: A",
            "stray text\nQ: Q\nA: one\nB: two\nCORRECT: A",
        ],
    )
    def test_invalid_blocks(self, block):
        with pytest.raises(QuizImportError):
            parse_questions(block)

    def test_import_errors_are_validation_errors(self):
        assert issubclass(QuizImportError, QuizValidationError)

    def test_missing_file(self, tmp_path):
        with pytest.raises(QuizImportError):
            load_questions_from_file(tmp_path / "missing.txt")


class TestExport:
    def test_export_then_import_preserves_questions(self, tmp_path, sample_questions):
        path = tmp_path / "nested" / "quiz.txt"
        save_questions_to_file(path, sample_questions)
        imported = load_questions_from_file(path)
        assert imported.questions == sample_questions
        assert imported.source_path == path

    def test_correct_letter_is_written(self, sample_questions):
        text = serialize_questions(sample_questions)
        assert "CORRECT: B" in text
        assert "\n---\n" in text

    def test_empty_export_is_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            save_questions_to_file(tmp_path / "quiz.txt", [])

    def test_multi_paragraph_text_survives_export(self):
        question = MCQ(
            question="Consider:\n\n$$x^2$$\n\nA: not an option\n---",
            options=("a", "b"),
            correct_answer="a",
            explanation="First.\n\nSecond.\nCORRECT: B",
        )
        follow_up = MCQ(question="Next?", options=("yes", "no"), correct_answer="no")
        assert parse_questions(serialize_questions([question, follow_up])) == [question, follow_up]

    def test_indented_code_keeps_its_indent(self):
        question = MCQ(
            question="What does this print?\n\n    print(1)",
            options=("1", "nothing"),
            correct_answer="1",
        )
        assert parse_questions(serialize_questions([question])) == [question]


class TestParagraphs:
    def test_blank_lines_stay_inside_a_question(self):
        questions = parse_questions(
            "Q: First paragraph.\n\nSecond paragraph.\nA: yes\nB: no\nCORRECT: A\n"
            "\nQ: Another\nA: one\nB: two\nCORRECT: B\n"
        )
        assert [question.question for question in questions] == [
            "First paragraph.\n\nSecond paragraph.",
            "Another",
        ]

    def test_indented_lines_are_not_markers(self):
        (question,) = parse_questions("Q: Pick one\n    B: is quoted text\nA: yes\nB: no\nCORRECT: B")
        assert question.question == "Pick one\nB: is quoted text"
        assert question.correct_answer == "no"
