"""Domain models for the quiz application."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Sequence

Answer = Optional[str]


class TerminationReason(Enum):
    """Why a quiz attempt ended."""

    MANUAL = "manual"
    TIMEOUT = "timeout"
    INTEGRITY_VIOLATION = "integrity_violation"


class SessionPhase(Enum):
    ACTIVE = "active"
    PENDING_CONFIRMATION = "pending_confirmation"
    TERMINATED = "terminated"


class OptionMark(Enum):
    """Review classification of a single option."""

    NEITHER = "neither"
    CORRECT = "correct"
    SELECTED = "selected"  # chosen by the taker but wrong
    SELECTED_CORRECT = "selected_correct"


@dataclass(frozen=True, slots=True)
class MCQ:
    """Multiple-choice question. The correct answer is stored as option text."""

    question: str
    options: tuple[str, ...]
    correct_answer: str
    explanation: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", tuple(self.options))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "question": self.question,
            "options": list(self.options),
            "correctAnswer": self.correct_answer,
        }
        if self.explanation is not None:
            data["explanation"] = self.explanation
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MCQ":
        return cls(
            question=data["question"],
            options=tuple(data["options"]),
            correct_answer=data["correctAnswer"],
            explanation=data.get("explanation"),
        )


@dataclass(frozen=True, slots=True)
class Quiz:
    """A published quiz. Never mutated after creation."""

    id: str
    title: str
    questions: tuple[MCQ, ...]
    duration: int  # minutes

    def __post_init__(self) -> None:
        object.__setattr__(self, "questions", tuple(self.questions))

    @property
    def question_count(self) -> int:
        return len(self.questions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "questions": [question.to_dict() for question in self.questions],
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Quiz":
        return cls(
            id=data["id"],
            title=data["title"],
            questions=tuple(MCQ.from_dict(item) for item in data["questions"]),
            duration=int(data["duration"]),
        )


@dataclass(frozen=True, slots=True)
class TakerIdentity:
    """Who is taking the quiz. All fields are opaque strings."""

    name: str
    roll_number: str
    email: str


@dataclass(frozen=True, slots=True)
class Result:
    """Scored outcome of one finished attempt."""

    quiz_id: str
    taker: TakerIdentity
    score: int
    total: int
    answers: tuple[Answer, ...]
    termination_reason: TerminationReason | None = None
    submitted_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "answers", tuple(self.answers))

    def to_dict(self) -> dict[str, Any]:
        return {
            "quizId": self.quiz_id,
            "studentName": self.taker.name,
            "studentRoll": self.taker.roll_number,
            "studentEmail": self.taker.email,
            "score": self.score,
            "total": self.total,
            "answers": list(self.answers),
            "terminationReason": (
                self.termination_reason.value if self.termination_reason else None
            ),
            "submittedAt": self.submitted_at.isoformat() if self.submitted_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Result":
        reason = data.get("terminationReason")
        submitted_at = data.get("submittedAt")
        return cls(
            quiz_id=data["quizId"],
            taker=TakerIdentity(
                name=data["studentName"],
                roll_number=data["studentRoll"],
                email=data["studentEmail"],
            ),
            score=int(data["score"]),
            total=int(data["total"]),
            answers=tuple(data["answers"]),
            termination_reason=TerminationReason(reason) if reason else None,
            submitted_at=datetime.fromisoformat(submitted_at) if submitted_at else None,
        )


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Render-ready view of a running (or finished) attempt."""

    question: str
    options: tuple[str, ...]
    selected: Answer
    position: int  # 1-based
    total: int
    remaining_seconds: int
    is_first: bool
    is_last: bool
    phase: SessionPhase
    termination_reason: TerminationReason | None = None

    @property
    def is_terminated(self) -> bool:
        return self.phase is SessionPhase.TERMINATED

    def to_dict(self) -> dict[str, Any]:
        return {
            "question": self.question,
            "options": list(self.options),
            "selected": self.selected,
            "position": self.position,
            "total": self.total,
            "remainingSeconds": self.remaining_seconds,
            "isFirst": self.is_first,
            "isLast": self.is_last,
            "phase": self.phase.value,
            "terminationReason": (
                self.termination_reason.value if self.termination_reason else None
            ),
        }


@dataclass(frozen=True, slots=True)
class ReviewOption:
    text: str
    is_correct: bool
    is_selected: bool

    @property
    def mark(self) -> OptionMark:
        if self.is_selected and self.is_correct:
            return OptionMark.SELECTED_CORRECT
        if self.is_selected:
            return OptionMark.SELECTED
        if self.is_correct:
            return OptionMark.CORRECT
        return OptionMark.NEITHER


@dataclass(frozen=True, slots=True)
class ReviewQuestionView:
    """One question of a finished attempt as shown during review."""

    question: str
    options: tuple[ReviewOption, ...]
    position: int  # 1-based
    total: int
    is_first: bool
    is_last: bool
    explanation: str | None = None
    selected: Answer = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "question": self.question,
            "options": [
                {
                    "text": option.text,
                    "isCorrect": option.is_correct,
                    "isSelected": option.is_selected,
                    "mark": option.mark.value,
                }
                for option in self.options
            ],
            "position": self.position,
            "total": self.total,
            "isFirst": self.is_first,
            "isLast": self.is_last,
            "explanation": self.explanation,
            "selected": self.selected,
        }


def answers_match_quiz(quiz: Quiz, answers: Sequence[Answer]) -> bool:
    return len(answers) == len(quiz.questions)
