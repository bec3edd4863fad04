"""Exception types raised outside of an active quiz session.

Nothing in here is raised by a running session: invalid navigation or answer
selection is absorbed by the session itself. These errors belong to the
boundaries around it (authoring, code lookup, generation and storage).
"""

from __future__ import annotations


class QuizProctorError(Exception):
    """Base class for all application errors."""


class QuizValidationError(QuizProctorError):
    """Authoring or taker input is missing or invalid."""


class QuizImportError(QuizValidationError):
    """Raised when a quiz text file cannot be parsed."""


class GenerationFailure(QuizProctorError):
    """The question source returned nothing usable."""


class InvalidQuizCode(QuizProctorError):
    """A taker supplied a quiz code that does not exist."""

    def __init__(self, code: str) -> None:
        super().__init__(f"Invalid quiz code: {code!r}")
        self.code = code


class AuthenticationError(QuizProctorError):
    """Professor credentials did not match."""


class RepositoryError(QuizProctorError):
    """Reading or writing the quiz store failed."""
