from __future__ import annotations

import random

import pytest

from quiz_proctor.constants.quiz_constants import QUIZ_CODE_ALPHABET, SOURCE_TEXT_MAX_CHARS
from quiz_proctor.core.errors import AuthenticationError, GenerationFailure, QuizValidationError
from quiz_proctor.core.models import MCQ
from quiz_proctor.core.quiz_authoring import QuizAuthoring, generate_quiz_code

from conftest import FakeQuestionSource


class TestQuizCodes:
    def test_code_shape(self):
        code = generate_quiz_code(set(), random.Random(1))
        assert len(code) == 6
        assert all(char in QUIZ_CODE_ALPHABET for char in code)

    def test_collisions_are_redrawn(self):
        taken = generate_quiz_code(set(), random.Random(7))
        fresh = generate_quiz_code({taken}, random.Random(7))
        assert fresh != taken


class TestManualAuthoring:
    def test_creates_and_stores_quiz(self, repository, sample_questions):
        quiz = QuizAuthoring(repository).create_manual_quiz("  History  ", 15, sample_questions)
        assert quiz.title == "History"
        assert quiz.duration == 15
        assert repository.get_quiz(quiz.id) == quiz

    def test_invalid_input_stores_nothing(self, repository, sample_questions):
        with pytest.raises(QuizValidationError):
            QuizAuthoring(repository).create_manual_quiz("History", 0, sample_questions)
        assert repository.load_quizzes() == {}

    def test_import_from_file(self, repository, tmp_path):
        path = tmp_path / "quiz.txt"
        path.write_text("Q: 2 + 2?\nA: 3\nB: 4\nCORRECT: B\n", encoding="utf-8")
        quiz = QuizAuthoring(repository).import_quiz_file("Maths", 5, path)
        assert quiz.questions[0].correct_answer == "4"


class TestGeneratedAuthoring:
    def test_topic_quiz_uses_requested_count(self, repository, question_source):
        authoring = QuizAuthoring(repository, question_source)
        quiz = authoring.create_topic_quiz("Geo", 5, "Capitals", "Easy", 3)
        request = question_source.requests[0]
        assert (request.topic, request.difficulty, request.count) == ("Capitals", "Easy", 3)
        assert quiz.question_count == 3
        assert repository.has_quiz(quiz.id)

    def test_text_quiz_truncates_source(self, repository, question_source):
        authoring = QuizAuthoring(repository, question_source)
        authoring.create_text_quiz("Doc", 5, "x" * (SOURCE_TEXT_MAX_CHARS + 500), "Hard")
        request = question_source.requests[0]
        assert request.count == 5
        assert len(request.source_text) == SOURCE_TEXT_MAX_CHARS

    @pytest.mark.parametrize("count", [0, 11, True])
    def test_topic_count_bounds(self, repository, question_source, count):
        with pytest.raises(QuizValidationError):
            QuizAuthoring(repository, question_source).create_topic_quiz("Geo", 5, "Capitals", "Easy", count)
        assert question_source.requests == []

    def test_unknown_difficulty_is_rejected(self, repository, question_source):
        with pytest.raises(QuizValidationError):
            QuizAuthoring(repository, question_source).create_topic_quiz("Geo", 5, "Capitals", "Brutal", 3)

    def test_blank_topic_is_rejected(self, repository, question_source):
        with pytest.raises(QuizValidationError):
            QuizAuthoring(repository, question_source).create_topic_quiz("Geo", 5, "  ", "Easy", 3)

    def test_generation_failure_persists_nothing(self, repository, failing_source):
        with pytest.raises(GenerationFailure):
            QuizAuthoring(repository, failing_source).create_topic_quiz("Geo", 5, "Capitals", "Easy", 3)
        assert repository.load_quizzes() == {}

    def test_invalid_generated_questions_become_generation_failure(self, repository):
        source = FakeQuestionSource(
            questions=[MCQ(question="Q", options=("a", "b"), correct_answer="z")]
        )
        with pytest.raises(GenerationFailure):
            QuizAuthoring(repository, source).create_topic_quiz("Geo", 5, "Capitals", "Easy", 1)
        assert repository.load_quizzes() == {}

    def test_missing_source_is_a_generation_failure(self, repository):
        with pytest.raises(GenerationFailure):
            QuizAuthoring(repository).create_text_quiz("Doc", 5, "Some text", "Easy")


class TestProfessors:
    def test_default_professor_is_seeded_once(self, repository):
        authoring = QuizAuthoring(repository)
        authoring.ensure_default_professor()
        repository.save_professors({"other@example.com": "pw"})
        authoring.ensure_default_professor()
        assert repository.load_professors() == {"other@example.com": "pw"}

    def test_register_then_authenticate(self, repository):
        authoring = QuizAuthoring(repository)
        assert authoring.register_professor(" prof@example.com ", "pw") == "prof@example.com"
        assert authoring.authenticate_professor("prof@example.com", "pw") == "prof@example.com"

    def test_duplicate_registration_is_rejected(self, repository):
        authoring = QuizAuthoring(repository)
        authoring.register_professor("prof@example.com", "pw")
        with pytest.raises(QuizValidationError):
            authoring.register_professor("prof@example.com", "other")

    def test_wrong_secret_is_rejected(self, repository):
        authoring = QuizAuthoring(repository)
        authoring.register_professor("prof@example.com", "pw")
        with pytest.raises(AuthenticationError):
            authoring.authenticate_professor("prof@example.com", "PW")
