"""Components shown once an attempt has been scored."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import Qt
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget

from quiz_proctor.constants.ui_constants import (
    RESULT_DONE_BUTTON,
    RESULT_REVIEW_BUTTON,
    RESULT_SCORE_TEMPLATE,
    REVIEW_EXIT_BUTTON,
    SESSION_NEXT_BUTTON,
    SESSION_PREV_BUTTON,
)
from quiz_proctor.core.markdown_math_renderer import renderer
from quiz_proctor.core.models import Result
from quiz_proctor.core.services.review_session import ReviewSession, outcome_message


class ResultPanel(QWidget):
    """Score summary with entry points into review."""

    def __init__(
        self,
        on_review: Callable[[Result], None],
        on_done: Callable[[], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.on_review = on_review
        self.on_done = on_done
        self._result: Result | None = None
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.message_label = QLabel("", self)
        self.message_label.setWordWrap(True)
        layout.addWidget(self.message_label)

        self.score_label = QLabel("", self)
        self.score_label.setAlignment(Qt.AlignCenter)
        self.score_label.setStyleSheet("font-size: 20pt; font-weight: bold;")
        layout.addWidget(self.score_label, stretch=1)

        button_row = QHBoxLayout()
        self.review_button = QPushButton(RESULT_REVIEW_BUTTON, self)
        self.review_button.clicked.connect(self._handle_review)
        button_row.addWidget(self.review_button)
        self.done_button = QPushButton(RESULT_DONE_BUTTON, self)
        self.done_button.clicked.connect(self.on_done)
        button_row.addWidget(self.done_button)
        layout.addLayout(button_row)

    def show_result(self, result: Result) -> None:
        self._result = result
        self.message_label.setText(outcome_message(result) or "Your answers have been submitted.")
        self.score_label.setText(RESULT_SCORE_TEMPLATE.format(score=result.score, total=result.total))

    def _handle_review(self) -> None:
        if self._result is not None:
            self.on_review(self._result)


class ReviewPanel(QWidget):
    """Read-only walk through a finished attempt."""

    def __init__(self, on_exit: Callable[[], None], parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.on_exit = on_exit
        self._review: ReviewSession | None = None
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.review_view = QWebEngineView(self)
        layout.addWidget(self.review_view, stretch=1)

        nav_row = QHBoxLayout()
        self.prev_button = QPushButton(SESSION_PREV_BUTTON, self)
        self.prev_button.clicked.connect(lambda: self._navigate(-1))
        nav_row.addWidget(self.prev_button)
        self.next_button = QPushButton(SESSION_NEXT_BUTTON, self)
        self.next_button.clicked.connect(lambda: self._navigate(1))
        nav_row.addWidget(self.next_button)
        nav_row.addStretch()
        self.exit_button = QPushButton(REVIEW_EXIT_BUTTON, self)
        self.exit_button.clicked.connect(self._handle_exit)
        nav_row.addWidget(self.exit_button)
        layout.addLayout(nav_row)

    def start(self, review: ReviewSession) -> None:
        self._review = review
        self._refresh()

    def _navigate(self, delta: int) -> None:
        if self._review is None:
            return
        self._review.navigate(delta)
        self._refresh()

    def _refresh(self) -> None:
        if self._review is None:
            return
        view = self._review.current_view()
        self.review_view.setHtml(renderer.wrap_with_mathjax(renderer.render_review(view)))
        self.prev_button.setEnabled(not view.is_first)
        self.next_button.setEnabled(not view.is_last)

    def _handle_exit(self) -> None:
        if self._review is not None:
            self._review.end_review()
        self._review = None
        self.on_exit()
