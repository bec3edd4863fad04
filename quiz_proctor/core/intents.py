"""Taker intents and their dispatch onto a quiz session.

Presentation adapters translate whatever the user did (a button press, a JSON
payload) into one of these objects and hand it to ``dispatch_intent``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from quiz_proctor.core.models import SessionSnapshot
from quiz_proctor.core.services.quiz_session import QuizSession


@dataclass(frozen=True, slots=True)
class SelectAnswer:
    option: str


@dataclass(frozen=True, slots=True)
class Navigate:
    delta: int


@dataclass(frozen=True, slots=True)
class RequestSubmit:
    pass


@dataclass(frozen=True, slots=True)
class ConfirmSubmit:
    pass


@dataclass(frozen=True, slots=True)
class CancelSubmit:
    pass


Intent = Union[SelectAnswer, Navigate, RequestSubmit, ConfirmSubmit, CancelSubmit]


def dispatch_intent(session: QuizSession, intent: Intent) -> SessionSnapshot:
    """Apply an intent to the session and return the resulting snapshot."""
    if isinstance(intent, SelectAnswer):
        session.select_answer(intent.option)
    elif isinstance(intent, Navigate):
        session.navigate(intent.delta)
    elif isinstance(intent, RequestSubmit):
        session.request_submit()
    elif isinstance(intent, ConfirmSubmit):
        session.confirm_submit()
    elif isinstance(intent, CancelSubmit):
        session.cancel_submit()
    else:
        raise TypeError(f"Unsupported intent: {intent!r}")
    return session.snapshot()


def intent_from_payload(payload: dict[str, Any]) -> Intent:
    """Build an intent from a wire payload such as ``{"type": "navigate", "delta": 1}``."""
    kind = str(payload.get("type", "")).strip().lower()
    if kind == "select":
        option = payload.get("option")
        if not isinstance(option, str):
            raise ValueError("A select intent needs an option string.")
        return SelectAnswer(option)
    if kind == "navigate":
        delta = payload.get("delta")
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise ValueError("A navigate intent needs an integer delta.")
        return Navigate(delta)
    if kind == "request_submit":
        return RequestSubmit()
    if kind == "confirm_submit":
        return ConfirmSubmit()
    if kind == "cancel_submit":
        return CancelSubmit()
    raise ValueError(f"Unknown intent type: {kind!r}")
