from __future__ import annotations

import json

import httpx
import pytest

from quiz_proctor.core.errors import GenerationFailure
from quiz_proctor.core.question_source import (
    GenerationRequest,
    OllamaQuestionSource,
    parse_question_set,
)

VALID_PAYLOAD = {
    "mcqs": [
        {
            "question": "What is the capital of France?",
            "options": ["Berlin", "Paris", "Madrid", "Rome"],
            "correctAnswer": "Paris",
            "explanation": "Paris is the capital.",
        }
    ]
}


def _source(handler) -> OllamaQuestionSource:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return OllamaQuestionSource(base_url="http://llm.test/", model_name="test-model", client=client)


class TestParseQuestionSet:
    def test_valid_payload(self):
        questions = parse_question_set(json.dumps(VALID_PAYLOAD))
        assert questions[0].correct_answer == "Paris"
        assert questions[0].options == ("Berlin", "Paris", "Madrid", "Rome")

    def test_markdown_fences_are_stripped(self):
        text = "```json\n" + json.dumps(VALID_PAYLOAD) + "\n```"
        assert len(parse_question_set(text)) == 1

    def test_answer_outside_options_is_rejected(self):
        payload = {"mcqs": [dict(VALID_PAYLOAD["mcqs"][0], correctAnswer="Lyon")]}
        with pytest.raises(GenerationFailure):
            parse_question_set(json.dumps(payload))

    @pytest.mark.parametrize("text", ["", "not json", '{"mcqs": []}', '{"questions": []}'])
    def test_malformed_or_empty(self, text):
        with pytest.raises(GenerationFailure):
            parse_question_set(text)


class TestGenerationRequest:
    def test_topic_prompt(self):
        prompt = GenerationRequest.for_topic("Photosynthesis", "Hard", 4).build_prompt()
        assert '"Photosynthesis"' in prompt
        assert "Generate 4" in prompt
        assert "Hard" in prompt

    def test_text_prompt_embeds_document(self):
        request = GenerationRequest.for_text("Mitochondria make ATP.", "Easy")
        assert request.count == 5
        assert "Mitochondria make ATP." in request.build_prompt()


class TestOllamaQuestionSource:
    def test_posts_json_mode_request(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"response": json.dumps(VALID_PAYLOAD)})

        questions = _source(handler).generate(GenerationRequest.for_topic("France", "Easy", 1))
        assert captured["url"] == "http://llm.test/api/generate"
        assert captured["body"]["model"] == "test-model"
        assert captured["body"]["format"] == "json"
        assert captured["body"]["stream"] is False
        assert questions[0].question == "What is the capital of France?"

    def test_http_error_becomes_generation_failure(self):
        source = _source(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(GenerationFailure):
            source.generate(GenerationRequest.for_topic("France", "Easy", 1))

    def test_connection_error_becomes_generation_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(GenerationFailure):
            _source(handler).generate(GenerationRequest.for_topic("France", "Easy", 1))

    def test_empty_response_becomes_generation_failure(self):
        source = _source(lambda request: httpx.Response(200, json={"response": ""}))
        with pytest.raises(GenerationFailure):
            source.generate(GenerationRequest.for_topic("France", "Easy", 1))
