from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from quiz_proctor.core.errors import RepositoryError
from quiz_proctor.core.models import Result, TerminationReason
from quiz_proctor.core.services.quiz_repository import QuizRepository


@pytest.fixture
def result(sample_quiz, taker) -> Result:
    return Result(
        quiz_id=sample_quiz.id,
        taker=taker,
        score=1,
        total=2,
        answers=("Paris", None),
        termination_reason=TerminationReason.TIMEOUT,
        submitted_at=datetime(2024, 1, 1, 9, 10, tzinfo=timezone.utc),
    )


class TestInMemory:
    def test_starts_empty(self, repository):
        assert repository.load_quizzes() == {}
        assert repository.load_results() == []
        assert repository.load_professors() == {}
        assert repository.storage_dir is None

    def test_upsert_replaces_by_id(self, repository, sample_quiz):
        repository.upsert_quiz(sample_quiz)
        renamed = type(sample_quiz)(
            id=sample_quiz.id, title="Renamed", questions=sample_quiz.questions, duration=5
        )
        repository.upsert_quiz(renamed)
        assert list(repository.load_quizzes()) == [sample_quiz.id]
        assert repository.get_quiz(sample_quiz.id).title == "Renamed"

    def test_results_are_appended(self, repository, result):
        repository.append_result(result)
        repository.append_result(result)
        assert len(repository.load_results()) == 2
        assert repository.results_for_quiz(result.quiz_id) == [result, result]
        assert repository.results_for_quiz("NOPE00") == []

    def test_loaded_mappings_are_copies(self, repository, sample_quiz):
        repository.upsert_quiz(sample_quiz)
        repository.load_quizzes().clear()
        assert repository.has_quiz(sample_quiz.id)


class TestOnDisk:
    def test_round_trip(self, tmp_path, sample_quiz, result):
        repository = QuizRepository(tmp_path)
        repository.save_professors({"prof@example.com": "secret"})
        repository.upsert_quiz(sample_quiz)
        repository.append_result(result)

        reloaded = QuizRepository(tmp_path)
        assert reloaded.load_professors() == {"prof@example.com": "secret"}
        assert reloaded.get_quiz(sample_quiz.id) == sample_quiz
        assert reloaded.load_results() == [result]

    def test_files_use_camel_case_keys(self, tmp_path, sample_quiz, result):
        repository = QuizRepository(tmp_path)
        repository.upsert_quiz(sample_quiz)
        repository.append_result(result)
        quizzes = json.loads((tmp_path / "quizzes.json").read_text(encoding="utf-8"))
        results = json.loads((tmp_path / "results.json").read_text(encoding="utf-8"))
        assert quizzes[sample_quiz.id]["questions"][0]["correctAnswer"] == "Paris"
        assert results[0]["quizId"] == sample_quiz.id
        assert results[0]["studentRoll"] == "R-001"
        assert results[0]["answers"] == ["Paris", None]
        assert results[0]["terminationReason"] == "timeout"

    def test_missing_files_mean_empty_store(self, tmp_path):
        repository = QuizRepository(tmp_path / "fresh")
        assert repository.load_quizzes() == {}

    def test_corrupt_file_raises_repository_error(self, tmp_path):
        (tmp_path / "quizzes.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(RepositoryError):
            QuizRepository(tmp_path)

    def test_malformed_record_raises_repository_error(self, tmp_path):
        (tmp_path / "results.json").write_text(json.dumps([{"quizId": "X"}]), encoding="utf-8")
        with pytest.raises(RepositoryError):
            QuizRepository(tmp_path)

    def test_failed_write_leaves_memory_unchanged(self, tmp_path, sample_quiz):
        blocker = tmp_path / "blocked"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        repository = QuizRepository(tmp_path)
        repository._storage_dir = blocker
        with pytest.raises(RepositoryError):
            repository.upsert_quiz(sample_quiz)
        assert not repository.has_quiz(sample_quiz.id)
