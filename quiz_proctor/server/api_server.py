"""FastAPI server that exposes the taker page and the quiz JSON API."""

from __future__ import annotations

import json
import logging
from threading import Thread
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field
import uvicorn

from quiz_proctor.constants.about import APP_NAME, APP_VERSION
from quiz_proctor.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from quiz_proctor.constants.quiz_constants import DEFAULT_DIFFICULTY, MAX_TOPIC_QUESTION_COUNT
from quiz_proctor.core.errors import (
    AuthenticationError,
    GenerationFailure,
    InvalidQuizCode,
    QuizProctorError,
    QuizValidationError,
)
from quiz_proctor.core.intents import dispatch_intent, intent_from_payload
from quiz_proctor.core.markdown_math_renderer import renderer
from quiz_proctor.core.models import MCQ, Quiz, Result, SessionSnapshot, TakerIdentity
from quiz_proctor.core.quiz_manager import QuizManager
from quiz_proctor.core.services.integrity import BLOCKED_ACTIONS
from quiz_proctor.core.services.quiz_session import QuizSession
from quiz_proctor.core.services.review_session import outcome_message

logger = logging.getLogger(__name__)

_STUDENT_PAGE_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>QuizProctor</title>
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <style>
      :root { font-family: 'Inter', system-ui, sans-serif; background: #0b1120; color: #f5f7ff; }
      body { margin: 0; padding: 1.5rem; display: flex; flex-direction: column; gap: 1rem; }
      .card { background: #111a30; border-radius: 0.75rem; padding: 1.5rem; box-shadow: 0 0.5rem 1.5rem rgba(0, 0, 0, 0.4); }
      .hidden { display: none; }
      input { display: block; width: 100%; max-width: 24rem; margin: 0.4rem 0; padding: 0.6rem; border-radius: 0.5rem; border: none; font-size: 1rem; }
      .primary-button { border: none; border-radius: 0.75rem; padding: 0.85rem 1.5rem; font-size: 1rem; background: #1f9aa5; color: #fff; cursor: pointer; }
      .primary-button:disabled { opacity: 0.5; cursor: not-allowed; }
      #question-container { min-height: 4rem; font-size: 1.1rem; line-height: 1.6; }
      .options-grid { display: grid; gap: 0.75rem; margin: 1rem 0; }
      .option-button { border: 2px solid transparent; border-radius: 0.75rem; padding: 1rem; font-size: 1rem; text-align: left; background: #1e293b; color: #fff; cursor: pointer; }
      .option-button.selected { border-color: #facc15; background: #334155; }
      .nav-row { display: flex; gap: 0.75rem; flex-wrap: wrap; }
      #timer-label { color: #facc15; font-weight: bold; }
      #status { min-height: 1.25rem; color: #f87171; }
      .options { list-style: none; padding: 0; }
      .option { padding: 0.5rem 0.75rem; margin: 0.3rem 0; border-radius: 0.5rem; background: #1e293b; }
      .correct, .selected-correct { background: #14532d; }
      .selected-wrong { background: #7f1d1d; }
    </style>
    <script>
      window.MathJax = { tex: { inlineMath: [['$','$']], displayMath: [['$$','$$']] }, svg: { fontCache: 'global' } };
    </script>
    <script defer src="https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-mml-chtml.js"></script>
  </head>
  <body>
    <section class="card" id="join-card">
      <h1>Join a Quiz</h1>
      <input id="code" placeholder="Quiz code" autocomplete="off" />
      <input id="name" placeholder="Full name" />
      <input id="roll" placeholder="Roll number" />
      <input id="email" placeholder="Email" type="email" />
      <button id="join-button" class="primary-button">Start Quiz</button>
      <p id="join-status"></p>
    </section>
    <section class="card hidden" id="quiz-card">
      <h2 id="quiz-title"></h2>
      <p><span id="position"></span> | <span id="timer-label"></span></p>
      <div id="question-container"></div>
      <div id="options-container" class="options-grid"></div>
      <div class="nav-row">
        <button id="prev-button" class="primary-button">Previous</button>
        <button id="next-button" class="primary-button">Next</button>
        <button id="submit-button" class="primary-button">Submit Quiz</button>
      </div>
      <p id="status"></p>
    </section>
    <section class="card hidden" id="result-card">
      <h2>Quiz finished</h2>
      <p id="result-message"></p>
      <p id="result-score"></p>
      <button id="review-button" class="primary-button">Review Answers</button>
    </section>
    <section class="card hidden" id="review-card">
      <div id="review-container"></div>
      <div class="nav-row">
        <button id="review-prev" class="primary-button">Previous</button>
        <button id="review-next" class="primary-button">Next</button>
        <button id="review-exit" class="primary-button">Back to Result</button>
      </div>
    </section>
    <script>
      const byId = (id) => document.getElementById(id);
      let token = null;
      let active = false;
      let pollHandle = null;
      let reviewIndex = 0;
      let reviewTotal = 0;

      function show(card) {
        ['join-card', 'quiz-card', 'result-card', 'review-card'].forEach(id => {
          byId(id).classList.toggle('hidden', id !== card);
        });
      }

      async function typesetMath(targets) {
        if (window.MathJax && window.MathJax.typesetPromise) {
          try { await window.MathJax.typesetPromise(targets); } catch (err) { console.warn(err); }
        }
      }

      async function api(path, options = {}) {
        const response = await fetch(path, {
          headers: { 'Content-Type': 'application/json' },
          ...options,
        });
        const body = await response.json().catch(() => ({}));
        if (!response.ok) {
          throw new Error(body.detail || `Request failed (${response.status})`);
        }
        return body;
      }

      function formatTime(seconds) {
        const minutes = Math.floor(seconds / 60);
        const rest = seconds % 60;
        return `${String(minutes).padStart(2, '0')}:${String(rest).padStart(2, '0')}`;
      }

      let lastQuestionKey = null;

      function render(snapshot) {
        if (snapshot.phase === 'terminated') {
          finish();
          return;
        }
        byId('position').textContent = `Question ${snapshot.position} of ${snapshot.total}`;
        byId('timer-label').textContent = `Time left: ${formatTime(snapshot.remainingSeconds)}`;
        const questionKey = `${snapshot.position}|${snapshot.selected}`;
        if (questionKey !== lastQuestionKey) {
          lastQuestionKey = questionKey;
          byId('question-container').innerHTML = snapshot.questionHtml;
          const container = byId('options-container');
          container.innerHTML = '';
          snapshot.options.forEach((option, index) => {
            const button = document.createElement('button');
            button.className = 'option-button' + (option === snapshot.selected ? ' selected' : '');
            button.textContent = `${String.fromCharCode(65 + index)}. ${option}`;
            button.addEventListener('click', () => sendIntent({ type: 'select', option }));
            container.appendChild(button);
          });
          typesetMath([byId('question-container'), container]);
        }
        byId('prev-button').disabled = snapshot.isFirst;
        byId('next-button').disabled = snapshot.isLast;
      }

      async function sendIntent(intent) {
        if (!token || !active) return;
        try {
          render(await api(`/sessions/${token}/intents`, { method: 'POST', body: JSON.stringify(intent) }));
        } catch (error) {
          byId('status').textContent = error.message;
        }
      }

      async function submitQuiz() {
        await sendIntent({ type: 'request_submit' });
        const confirmed = window.confirm('Are you sure you want to submit? You cannot change your answers afterwards.');
        await sendIntent({ type: confirmed ? 'confirm_submit' : 'cancel_submit' });
      }

      async function poll() {
        if (!token || !active) return;
        try {
          render(await api(`/sessions/${token}`));
        } catch (error) {
          byId('status').textContent = error.message;
        }
      }

      async function reportViolation() {
        if (!token || !active) return;
        try {
          await api(`/sessions/${token}/violation`, { method: 'POST' });
        } finally {
          finish();
        }
      }

      async function finish() {
        if (!active) return;
        active = false;
        if (pollHandle) {
          clearInterval(pollHandle);
          pollHandle = null;
        }
        const result = await api(`/sessions/${token}/result`);
        reviewTotal = result.total;
        if (result.message) {
          window.alert(result.message);
        }
        byId('result-message').textContent = result.message || 'Your answers have been submitted.';
        byId('result-score').textContent = `You scored ${result.score} out of ${result.total}.`;
        show('result-card');
      }

      async function showReview(index) {
        const view = await api(`/sessions/${token}/review/${index}`);
        reviewIndex = index;
        byId('review-container').innerHTML = view.html;
        byId('review-prev').disabled = view.isFirst;
        byId('review-next').disabled = view.isLast;
        typesetMath([byId('review-container')]);
        show('review-card');
      }

      byId('join-button').addEventListener('click', async () => {
        byId('join-status').textContent = '';
        try {
          const body = await api('/sessions', {
            method: 'POST',
            body: JSON.stringify({
              code: byId('code').value,
              name: byId('name').value,
              rollNumber: byId('roll').value,
              email: byId('email').value,
            }),
          });
          token = body.token;
          active = true;
          byId('quiz-title').textContent = body.quiz.title;
          show('quiz-card');
          render(body.snapshot);
          pollHandle = setInterval(poll, 1000);
        } catch (error) {
          byId('join-status').textContent = error.message;
        }
      });
      byId('prev-button').addEventListener('click', () => sendIntent({ type: 'navigate', delta: -1 }));
      byId('next-button').addEventListener('click', () => sendIntent({ type: 'navigate', delta: 1 }));
      byId('submit-button').addEventListener('click', submitQuiz);
      byId('review-button').addEventListener('click', () => showReview(0));
      byId('review-prev').addEventListener('click', () => showReview(Math.max(0, reviewIndex - 1)));
      byId('review-next').addEventListener('click', () => showReview(Math.min(reviewTotal - 1, reviewIndex + 1)));
      byId('review-exit').addEventListener('click', () => show('result-card'));

      document.addEventListener('visibilitychange', () => {
        if (document.visibilityState === 'hidden') reportViolation();
      });
      window.addEventListener('pagehide', () => {
        if (token && !active) {
          fetch(`/sessions/${token}`, { method: 'DELETE', keepalive: true });
        }
      });
      __BLOCKED_ACTIONS__.forEach(name => {
        document.addEventListener(name, (event) => {
          if (active) event.preventDefault();
        });
      });
    </script>
  </body>
</html>
"""

_STUDENT_PAGE = _STUDENT_PAGE_HTML.replace("__BLOCKED_ACTIONS__", json.dumps(sorted(BLOCKED_ACTIONS)))


class StartSessionPayload(BaseModel):
    """Payload schema for joining a quiz."""

    model_config = ConfigDict(populate_by_name=True)

    code: str
    name: str
    roll_number: str = Field(alias="rollNumber")
    email: str


class IntentPayload(BaseModel):
    type: str
    option: str | None = None
    delta: int | None = None


class QuestionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str
    options: list[str]
    correct_answer: str = Field(alias="correctAnswer")
    explanation: str | None = None

    def to_mcq(self) -> MCQ:
        return MCQ(
            question=self.question,
            options=tuple(self.options),
            correct_answer=self.correct_answer,
            explanation=self.explanation,
        )


class ManualQuizPayload(BaseModel):
    title: str
    duration: int
    questions: list[QuestionPayload]


class GenerateQuizPayload(BaseModel):
    """Either ``topic`` (with ``count``) or ``sourceText`` must be given."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    duration: int
    difficulty: str = DEFAULT_DIFFICULTY
    topic: str | None = None
    count: int = Field(default=5, ge=1, le=MAX_TOPIC_QUESTION_COUNT)
    source_text: str | None = Field(default=None, alias="sourceText")


class ProfessorPayload(BaseModel):
    email: str
    secret: str


def _get_quiz_manager_dependency(quiz_manager: QuizManager):
    def dependency() -> QuizManager:
        return quiz_manager

    return dependency


def _http_error(exc: QuizProctorError) -> HTTPException:
    if isinstance(exc, InvalidQuizCode):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, AuthenticationError):
        return HTTPException(status_code=401, detail=str(exc))
    if isinstance(exc, QuizValidationError):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, GenerationFailure):
        return HTTPException(status_code=502, detail=str(exc))
    logger.error("Request failed: %s", exc)
    return HTTPException(status_code=500, detail=str(exc))


def _snapshot_payload(snapshot: SessionSnapshot) -> dict[str, Any]:
    payload = snapshot.to_dict()
    payload["questionHtml"] = renderer.render_fragment(snapshot.question)
    return payload


def _quiz_summary(quiz: Quiz) -> dict[str, Any]:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "duration": quiz.duration,
        "questionCount": quiz.question_count,
    }


def _result_payload(result: Result) -> dict[str, Any]:
    payload = result.to_dict()
    payload["message"] = outcome_message(result)
    return payload


def _lookup_session(manager: QuizManager, token: str) -> QuizSession:
    try:
        return manager.get_session(token)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Unknown session.") from exc


def _review_payload(manager: QuizManager, result: Result, index: int) -> dict[str, Any]:
    if not 0 <= index < result.total:
        raise HTTPException(status_code=404, detail="No such question.")
    try:
        review = manager.begin_review(result)
    except QuizProctorError as exc:
        raise _http_error(exc) from exc
    review.go_to(index)
    view = review.current_view()
    payload = view.to_dict()
    payload["html"] = renderer.render_review(view)
    return payload


def create_api_app(quiz_manager: QuizManager) -> FastAPI:
    """Create a FastAPI application wired to the provided quiz manager."""
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION)
    quiz_manager_dep = _get_quiz_manager_dependency(quiz_manager)

    @app.get("/", response_class=HTMLResponse)
    def serve_student_page() -> str:
        return _STUDENT_PAGE

    # --- Taker endpoints ---

    @app.post("/sessions", status_code=201)
    def start_session(
        payload: StartSessionPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        taker = TakerIdentity(
            name=payload.name.strip(),
            roll_number=payload.roll_number.strip(),
            email=payload.email.strip(),
        )
        try:
            token, session = manager.start_session(payload.code, taker)
        except QuizProctorError as exc:
            raise _http_error(exc) from exc
        return {
            "token": token,
            "quiz": _quiz_summary(session.quiz),
            "snapshot": _snapshot_payload(session.snapshot()),
        }

    @app.get("/sessions/{token}")
    def get_snapshot(token: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        return _snapshot_payload(_lookup_session(manager, token).snapshot())

    @app.post("/sessions/{token}/intents")
    def post_intent(
        token: str,
        payload: IntentPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        session = _lookup_session(manager, token)
        try:
            intent = intent_from_payload(payload.model_dump(exclude_none=True))
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return _snapshot_payload(dispatch_intent(session, intent))

    @app.post("/sessions/{token}/violation")
    def post_violation(token: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        _lookup_session(manager, token)
        session = manager.report_violation(token)
        return _snapshot_payload(session.snapshot())

    @app.get("/sessions/{token}/result")
    def get_result(token: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        result = _lookup_session(manager, token).result
        if result is None:
            raise HTTPException(status_code=409, detail="The quiz is still in progress.")
        return _result_payload(result)

    @app.get("/sessions/{token}/review/{index}")
    def get_review(
        token: str,
        index: int,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        result = _lookup_session(manager, token).result
        if result is None:
            raise HTTPException(status_code=409, detail="The quiz is still in progress.")
        return _review_payload(manager, result, index)

    @app.delete("/sessions/{token}")
    def end_session(token: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        _lookup_session(manager, token)
        if not manager.end_session(token):
            raise HTTPException(status_code=409, detail="The quiz is still in progress.")
        return {"ended": True}

    # --- Professor endpoints ---

    @app.post("/professors", status_code=201)
    def register_professor(
        payload: ProfessorPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            email = manager.register_professor(payload.email, payload.secret)
        except QuizProctorError as exc:
            raise _http_error(exc) from exc
        return {"email": email}

    @app.post("/professors/login")
    def login_professor(
        payload: ProfessorPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            email = manager.authenticate_professor(payload.email, payload.secret)
        except QuizProctorError as exc:
            raise _http_error(exc) from exc
        return {"email": email}

    @app.get("/quizzes")
    def list_quizzes(manager: QuizManager = Depends(quiz_manager_dep)) -> list[dict[str, object]]:
        return [_quiz_summary(quiz) for quiz in manager.list_quizzes()]

    @app.get("/quizzes/{quiz_id}/results")
    def list_results(quiz_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> list[dict[str, object]]:
        try:
            quiz = manager.get_quiz(quiz_id)
        except QuizProctorError as exc:
            raise _http_error(exc) from exc
        return [_result_payload(result) for result in manager.results_for_quiz(quiz.id)]

    @app.get("/quizzes/{quiz_id}/results/{result_index}/review/{index}")
    def review_recorded_result(
        quiz_id: str,
        result_index: int,
        index: int,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        """Re-walk any recorded attempt; ``result_index`` follows the results listing."""
        try:
            quiz = manager.get_quiz(quiz_id)
        except QuizProctorError as exc:
            raise _http_error(exc) from exc
        results = manager.results_for_quiz(quiz.id)
        if not 0 <= result_index < len(results):
            raise HTTPException(status_code=404, detail="No such result.")
        return _review_payload(manager, results[result_index], index)

    @app.post("/quizzes", status_code=201)
    def create_quiz(
        payload: ManualQuizPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            quiz = manager.create_manual_quiz(
                payload.title,
                payload.duration,
                [question.to_mcq() for question in payload.questions],
            )
        except QuizProctorError as exc:
            raise _http_error(exc) from exc
        return _quiz_summary(quiz)

    @app.post("/quizzes/generate", status_code=201)
    def generate_quiz(
        payload: GenerateQuizPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            if payload.topic is not None:
                quiz = manager.create_topic_quiz(
                    payload.title, payload.duration, payload.topic, payload.difficulty, payload.count
                )
            elif payload.source_text is not None:
                quiz = manager.create_text_quiz(
                    payload.title, payload.duration, payload.source_text, payload.difficulty
                )
            else:
                raise HTTPException(status_code=422, detail="Provide either a topic or source text.")
        except QuizProctorError as exc:
            raise _http_error(exc) from exc
        return _quiz_summary(quiz)

    return app


def start_api_server(
    quiz_manager: QuizManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(quiz_manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="QuizApiServer", daemon=True)
    thread.start()
    return thread
