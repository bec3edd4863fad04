"""Quiz-related constants shared across UI, server and core layers."""

import string

TICK_INTERVAL_SECONDS: float = 1.0

QUIZ_CODE_LENGTH: int = 6
QUIZ_CODE_ALPHABET: str = string.ascii_uppercase + string.digits

MIN_OPTIONS_PER_QUESTION: int = 2
DIFFICULTIES: tuple[str, ...] = ("Easy", "Medium", "Hard")
DEFAULT_DIFFICULTY: str = "Medium"
MIN_TOPIC_QUESTION_COUNT: int = 1
MAX_TOPIC_QUESTION_COUNT: int = 10
SOURCE_TEXT_QUESTION_COUNT: int = 5
SOURCE_TEXT_MAX_CHARS: int = 15000

DEFAULT_PROFESSOR_EMAIL: str = "professor@test.com"
DEFAULT_PROFESSOR_SECRET: str = "password"

# Finished sessions stay reachable for result and review requests, then go.
FINISHED_SESSION_TTL_SECONDS: int = 30 * 60
FINISHED_SESSION_LIMIT: int = 500
