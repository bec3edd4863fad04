"""Service for storing professors, quizzes and results."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from quiz_proctor.constants.storage_constants import PROFESSORS_FILE, QUIZZES_FILE, RESULTS_FILE
from quiz_proctor.core.errors import RepositoryError
from quiz_proctor.core.models import Quiz, Result

logger = logging.getLogger(__name__)


class QuizRepository:
    """Keyed storage for the three persisted records.

    With a storage directory every save writes ``professors.json``,
    ``quizzes.json`` or ``results.json`` there. Without one the records only
    live in memory. Quizzes are upserted by id and results are append-only.
    """

    def __init__(self, storage_dir: Path | None = None) -> None:
        self._storage_dir = storage_dir
        self._professors: dict[str, str] = {}
        self._quizzes: dict[str, Quiz] = {}
        self._results: list[Result] = []
        if storage_dir is not None:
            self._professors = self._read(PROFESSORS_FILE, {})
            try:
                self._quizzes = {
                    quiz_id: Quiz.from_dict(data)
                    for quiz_id, data in self._read(QUIZZES_FILE, {}).items()
                }
                self._results = [Result.from_dict(data) for data in self._read(RESULTS_FILE, [])]
            except (KeyError, TypeError, ValueError) as exc:
                raise RepositoryError(f"Malformed record in {storage_dir}: {exc}") from exc
            logger.info(
                "Loaded %d quizzes and %d results from %s",
                len(self._quizzes),
                len(self._results),
                storage_dir,
            )

    @property
    def storage_dir(self) -> Path | None:
        return self._storage_dir

    # --- Professors ---

    def load_professors(self) -> dict[str, str]:
        return dict(self._professors)

    def save_professors(self, professors: Mapping[str, str]) -> None:
        self._write(PROFESSORS_FILE, dict(professors))
        self._professors = dict(professors)

    # --- Quizzes ---

    def load_quizzes(self) -> dict[str, Quiz]:
        return dict(self._quizzes)

    def get_quiz(self, quiz_id: str) -> Quiz | None:
        return self._quizzes.get(quiz_id)

    def has_quiz(self, quiz_id: str) -> bool:
        return quiz_id in self._quizzes

    def save_quizzes(self, quizzes: Mapping[str, Quiz]) -> None:
        self._write(QUIZZES_FILE, {quiz_id: quiz.to_dict() for quiz_id, quiz in quizzes.items()})
        self._quizzes = dict(quizzes)

    def upsert_quiz(self, quiz: Quiz) -> None:
        updated = dict(self._quizzes)
        updated[quiz.id] = quiz
        self.save_quizzes(updated)

    # --- Results ---

    def load_results(self) -> list[Result]:
        return list(self._results)

    def results_for_quiz(self, quiz_id: str) -> list[Result]:
        return [result for result in self._results if result.quiz_id == quiz_id]

    def save_results(self, results: Iterable[Result]) -> None:
        snapshot = list(results)
        self._write(RESULTS_FILE, [result.to_dict() for result in snapshot])
        self._results = snapshot

    def append_result(self, result: Result) -> None:
        self.save_results([*self._results, result])

    # --- File access ---

    def _read(self, file_name: str, default: Any) -> Any:
        assert self._storage_dir is not None
        path = self._storage_dir / file_name
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Failed to read %s", path, exc_info=True)
            raise RepositoryError(f"Could not read {path}: {exc}") from exc

    def _write(self, file_name: str, payload: Any) -> None:
        if self._storage_dir is None:
            return
        path = self._storage_dir / file_name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            logger.error("Failed to write %s", path, exc_info=True)
            raise RepositoryError(f"Could not write {path}: {exc}") from exc
