"""Component for answering a running quiz."""

from __future__ import annotations

from typing import Callable

from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QButtonGroup,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from quiz_proctor.constants.ui_constants import (
    SESSION_NEXT_BUTTON,
    SESSION_POSITION_TEMPLATE,
    SESSION_PREV_BUTTON,
    SESSION_SUBMIT_BUTTON,
    SESSION_TIMER_TEMPLATE,
)
from quiz_proctor.core.intents import (
    CancelSubmit,
    ConfirmSubmit,
    Intent,
    Navigate,
    RequestSubmit,
    SelectAnswer,
    dispatch_intent,
)
from quiz_proctor.core.markdown_math_renderer import option_letter, renderer
from quiz_proctor.core.models import Result, SessionPhase, SessionSnapshot
from quiz_proctor.core.services.quiz_session import QuizSession
from quiz_proctor.ui.dialog_helpers import confirm_submit


class SessionPanel(QWidget):
    """Renders session snapshots and turns button presses into intents."""

    def __init__(
        self,
        on_finished: Callable[[Result], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.on_finished = on_finished
        self._session: QuizSession | None = None
        self._rendered_key: tuple[int, str | None] | None = None
        self._option_buttons: list[QPushButton] = []
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        header_row = QHBoxLayout()
        self.title_label = QLabel("", self)
        header_row.addWidget(self.title_label)
        header_row.addStretch()
        self.position_label = QLabel("", self)
        header_row.addWidget(self.position_label)
        self.timer_label = QLabel("", self)
        self.timer_label.setStyleSheet("font-weight: bold; padding: 2px 6px;")
        header_row.addWidget(self.timer_label)
        layout.addLayout(header_row)

        self.question_view = QWebEngineView(self)
        layout.addWidget(self.question_view, stretch=1)

        self.options_layout = QVBoxLayout()
        layout.addLayout(self.options_layout)
        self.option_group = QButtonGroup(self)
        self.option_group.setExclusive(True)

        nav_row = QHBoxLayout()
        self.prev_button = QPushButton(SESSION_PREV_BUTTON, self)
        self.prev_button.clicked.connect(lambda: self._dispatch(Navigate(-1)))
        nav_row.addWidget(self.prev_button)
        self.next_button = QPushButton(SESSION_NEXT_BUTTON, self)
        self.next_button.clicked.connect(lambda: self._dispatch(Navigate(1)))
        nav_row.addWidget(self.next_button)
        nav_row.addStretch()
        self.submit_button = QPushButton(SESSION_SUBMIT_BUTTON, self)
        self.submit_button.clicked.connect(self._handle_submit)
        nav_row.addWidget(self.submit_button)
        layout.addLayout(nav_row)

    def attach(self, session: QuizSession) -> None:
        self._session = session
        self._rendered_key = None
        self.title_label.setText(session.quiz.title)
        session.add_snapshot_listener(self.render)
        session.add_finish_listener(self.on_finished)
        self.render(session.snapshot())

    def detach(self) -> None:
        self._session = None
        self._clear_options()

    def render(self, snapshot: SessionSnapshot) -> None:
        minutes, seconds = divmod(snapshot.remaining_seconds, 60)
        self.timer_label.setText(SESSION_TIMER_TEMPLATE.format(minutes=minutes, seconds=seconds))
        self.position_label.setText(
            SESSION_POSITION_TEMPLATE.format(position=snapshot.position, total=snapshot.total)
        )

        active = snapshot.phase is SessionPhase.ACTIVE
        self.prev_button.setEnabled(active and not snapshot.is_first)
        self.next_button.setEnabled(active and not snapshot.is_last)
        self.submit_button.setEnabled(active)

        # Ticks only change the timer; rebuild the page when the question or selection moves.
        key = (snapshot.position, snapshot.selected)
        if key != self._rendered_key:
            self._rendered_key = key
            self.question_view.setHtml(renderer.render_full_document(snapshot.question))
            self._rebuild_options(snapshot)
        for button in self._option_buttons:
            button.setEnabled(active)

    def _rebuild_options(self, snapshot: SessionSnapshot) -> None:
        self._clear_options()
        for index, option in enumerate(snapshot.options):
            button = QPushButton(f"{option_letter(index)}. {option}", self)
            button.setCheckable(True)
            button.setChecked(option == snapshot.selected)
            button.clicked.connect(lambda _checked=False, text=option: self._dispatch(SelectAnswer(text)))
            self.option_group.addButton(button)
            self.options_layout.addWidget(button)
            self._option_buttons.append(button)

    def _clear_options(self) -> None:
        for button in self._option_buttons:
            self.option_group.removeButton(button)
            self.options_layout.removeWidget(button)
            button.deleteLater()
        self._option_buttons = []

    def _handle_submit(self) -> None:
        self._dispatch(RequestSubmit())
        if self._session is None or self._session.phase is not SessionPhase.PENDING_CONFIRMATION:
            return
        if confirm_submit(self):
            self._dispatch(ConfirmSubmit())
        else:
            self._dispatch(CancelSubmit())

    def _dispatch(self, intent: Intent) -> None:
        if self._session is not None:
            dispatch_intent(self._session, intent)
