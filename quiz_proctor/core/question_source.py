"""Question generation through a large language model.

The rest of the application only sees ``QuestionSource.generate``: a request
goes in, a validated list of MCQ comes out, or ``GenerationFailure`` is
raised. The shipped implementation talks to an Ollama-compatible
``/api/generate`` endpoint in JSON mode and validates the reply with pydantic
before anything reaches the authoring flow.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Protocol

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from quiz_proctor.constants.generation_constants import (
    LLM_MODEL_NAME,
    LLM_TIMEOUT_SECONDS,
    LLM_URL,
)
from quiz_proctor.constants.quiz_constants import (
    MIN_OPTIONS_PER_QUESTION,
    SOURCE_TEXT_MAX_CHARS,
    SOURCE_TEXT_QUESTION_COUNT,
)
from quiz_proctor.core.errors import GenerationFailure
from quiz_proctor.core.models import MCQ

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    """Either a topic request or a source-text request."""

    difficulty: str
    count: int
    topic: str | None = None
    source_text: str | None = None

    @classmethod
    def for_topic(cls, topic: str, difficulty: str, count: int) -> "GenerationRequest":
        return cls(difficulty=difficulty, count=count, topic=topic)

    @classmethod
    def for_text(cls, source_text: str, difficulty: str) -> "GenerationRequest":
        return cls(
            difficulty=difficulty,
            count=SOURCE_TEXT_QUESTION_COUNT,
            source_text=source_text[:SOURCE_TEXT_MAX_CHARS],
        )

    def build_prompt(self) -> str:
        if self.source_text is not None:
            return (
                f"Based on the following text from a document, please generate {self.count} "
                f"multiple-choice questions (MCQs) with a {self.difficulty} difficulty level. "
                "Each question should have 4 options, one correct answer, and a brief "
                "explanation for the correct answer. Provide the output in a structured JSON "
                "format.\nDocument Text:\n---\n"
                f"{self.source_text}\n---\n"
            )
        return (
            f"Generate {self.count} multiple-choice questions (MCQs) on the topic of "
            f'"{self.topic}" with {self.difficulty} difficulty. Each question must have 4 '
            "options, one correct answer, and a brief explanation for the correct answer. "
            "Provide the output in a structured JSON format."
        )


class QuestionSource(Protocol):
    def generate(self, request: GenerationRequest) -> list[MCQ]: ...


class GeneratedQuestion(BaseModel):
    """One question as returned by the model."""

    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(min_length=1)
    options: list[str] = Field(min_length=MIN_OPTIONS_PER_QUESTION)
    correct_answer: str = Field(alias="correctAnswer")
    explanation: str | None = None

    @model_validator(mode="after")
    def _correct_answer_is_an_option(self) -> "GeneratedQuestion":
        if self.correct_answer not in self.options:
            raise ValueError("correctAnswer must be one of the options")
        if any(not option.strip() for option in self.options):
            raise ValueError("options must not be blank")
        return self

    def to_mcq(self) -> MCQ:
        return MCQ(
            question=self.question,
            options=tuple(self.options),
            correct_answer=self.correct_answer,
            explanation=self.explanation,
        )


class GeneratedQuestionSet(BaseModel):
    mcqs: list[GeneratedQuestion]


_SYSTEM_PROMPT = """
You are an expert quiz generator. Reply with a single JSON object and nothing else:
{
  "mcqs": [
    {
      "question": "string",
      "options": ["string", "string", "string", "string"],
      "correctAnswer": "string (exactly one of the options)",
      "explanation": "string (why the correct answer is correct)"
    }
  ]
}
Do NOT include any commentary or markdown fences.
"""


def parse_question_set(raw_text: str) -> list[MCQ]:
    """Validate a JSON document of the form ``{"mcqs": [...]}`` into MCQ."""
    cleaned = raw_text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
    try:
        question_set = GeneratedQuestionSet.model_validate_json(cleaned)
    except ValidationError as exc:
        raise GenerationFailure(f"Generated questions were malformed: {exc}") from exc
    if not question_set.mcqs:
        raise GenerationFailure("The generation service returned no questions.")
    return [item.to_mcq() for item in question_set.mcqs]


class OllamaQuestionSource:
    """Question source backed by an Ollama ``/api/generate`` endpoint."""

    def __init__(
        self,
        base_url: str = LLM_URL,
        model_name: str = LLM_MODEL_NAME,
        timeout: float = LLM_TIMEOUT_SECONDS,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._model_name = model_name
        self._client = client or httpx.Client(timeout=timeout)

    def generate(self, request: GenerationRequest) -> list[MCQ]:
        payload = {
            "model": self._model_name,
            "prompt": request.build_prompt(),
            "system": _SYSTEM_PROMPT,
            "stream": False,
            "format": "json",
        }
        url = f"{self._base_url}/api/generate"
        logger.info("Requesting %d questions from %s (%s)", request.count, url, self._model_name)
        try:
            response = self._client.post(url, json=payload)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, json.JSONDecodeError) as exc:
            logger.warning("Question generation request failed", exc_info=True)
            raise GenerationFailure(f"Question generation failed: {exc}") from exc

        raw_text = body.get("response") if isinstance(body, dict) else None
        if isinstance(raw_text, dict):
            raw_text = json.dumps(raw_text)
        if not isinstance(raw_text, str) or not raw_text.strip():
            raise GenerationFailure("The generation service returned an empty response.")

        questions = parse_question_set(raw_text)
        logger.info("Generated %d questions", len(questions))
        return questions

    def close(self) -> None:
        self._client.close()
