"""Qt main window switching between the taker flow and the professor dashboard."""

from __future__ import annotations

from enum import Enum, auto

from PySide6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from quiz_proctor.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION, HELP_TEXT
from quiz_proctor.constants.ui_constants import (
    MODE_BUTTON_PROFESSOR,
    MODE_BUTTON_TAKE,
    STUDENT_URL_PLACEHOLDER,
    WINDOW_TITLE,
)
from quiz_proctor.core.errors import QuizProctorError
from quiz_proctor.core.models import Result, TakerIdentity, TerminationReason
from quiz_proctor.core.quiz_manager import QuizManager
from quiz_proctor.core.services.review_session import outcome_message
from quiz_proctor.ui.components.join_panel import JoinPanel
from quiz_proctor.ui.components.professor_panel import ProfessorPanel
from quiz_proctor.ui.components.result_panel import ResultPanel, ReviewPanel
from quiz_proctor.ui.components.session_panel import SessionPanel
from quiz_proctor.ui.dialog_helpers import show_error, show_info, show_warning
from quiz_proctor.ui.qt_adapters import QtFocusWatcher, QtTicker


class AppMode(Enum):
    """Which page of the main window is visible."""

    JOIN = auto()
    SESSION = auto()
    RESULT = auto()
    REVIEW = auto()
    PROFESSOR = auto()


class QuizProctorMainWindow(QMainWindow):
    """Main Qt window orchestrating the taker and professor flows."""

    def __init__(self, quiz_manager: QuizManager, student_url: str | None = None) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)

        self.quiz_manager = quiz_manager
        self.student_url = student_url or STUDENT_URL_PLACEHOLDER
        self._session_token: str | None = None
        self._mode = AppMode.JOIN

        self._build_ui()

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        self._build_mode_buttons(root_layout)

        self.mode_stack = QStackedWidget(self)
        self.join_panel = JoinPanel(self._handle_join, self.student_url, self)
        self.session_panel = SessionPanel(self._handle_session_finished, self)
        self.result_panel = ResultPanel(self._handle_review, self._handle_result_done, self)
        self.review_panel = ReviewPanel(lambda: self._set_mode(AppMode.RESULT), self)
        self.professor_panel = ProfessorPanel(self.quiz_manager, self)

        self._panel_for_mode = {
            AppMode.JOIN: self.join_panel,
            AppMode.SESSION: self.session_panel,
            AppMode.RESULT: self.result_panel,
            AppMode.REVIEW: self.review_panel,
            AppMode.PROFESSOR: self.professor_panel,
        }
        for panel in self._panel_for_mode.values():
            self.mode_stack.addWidget(panel)
        root_layout.addWidget(self.mode_stack)

        self._set_mode(AppMode.JOIN)

    def _build_mode_buttons(self, layout: QVBoxLayout) -> None:
        button_row = QHBoxLayout()

        self.take_mode_button = QPushButton(MODE_BUTTON_TAKE, self)
        self.take_mode_button.setCheckable(True)
        self.take_mode_button.clicked.connect(lambda: self._set_mode(AppMode.JOIN))
        button_row.addWidget(self.take_mode_button)

        self.professor_mode_button = QPushButton(MODE_BUTTON_PROFESSOR, self)
        self.professor_mode_button.setCheckable(True)
        self.professor_mode_button.clicked.connect(lambda: self._set_mode(AppMode.PROFESSOR))
        button_row.addWidget(self.professor_mode_button)

        button_row.addStretch()

        self.about_button = QPushButton(f"About {APP_NAME}", self)
        self.about_button.clicked.connect(self._handle_about)
        button_row.addWidget(self.about_button)

        self.help_button = QPushButton("Help", self)
        self.help_button.clicked.connect(self._handle_help)
        button_row.addWidget(self.help_button)

        layout.addLayout(button_row)

    def _set_mode(self, mode: AppMode) -> None:
        self._mode = mode
        in_session = mode == AppMode.SESSION
        self.take_mode_button.setChecked(mode != AppMode.PROFESSOR)
        self.professor_mode_button.setChecked(mode == AppMode.PROFESSOR)
        for button in (self.take_mode_button, self.professor_mode_button, self.about_button, self.help_button):
            button.setEnabled(not in_session)
        self.mode_stack.setCurrentWidget(self._panel_for_mode[mode])

    # --- Taker flow ---

    def _handle_join(self, code: str, taker: TakerIdentity) -> None:
        try:
            token, session = self.quiz_manager.start_session(
                code,
                taker,
                ticker=QtTicker(self),
                watcher=QtFocusWatcher(QApplication.instance()),
            )
        except QuizProctorError as exc:
            show_error(self, "Cannot start quiz", str(exc))
            return
        self._session_token = token
        self.session_panel.attach(session)
        self._set_mode(AppMode.SESSION)

    def _handle_session_finished(self, result: Result) -> None:
        self.session_panel.detach()
        if self._session_token is not None:
            self.quiz_manager.end_session(self._session_token)
            self._session_token = None
        self.result_panel.show_result(result)
        self._set_mode(AppMode.RESULT)

        message = outcome_message(result)
        if result.termination_reason is TerminationReason.INTEGRITY_VIOLATION:
            show_warning(self, "Quiz submitted", message)
        elif message:
            show_info(self, "Quiz submitted", message)

    def _handle_review(self, result: Result) -> None:
        try:
            review = self.quiz_manager.begin_review(result)
        except (QuizProctorError, ValueError) as exc:
            show_error(self, "Review unavailable", str(exc))
            return
        self.review_panel.start(review)
        self._set_mode(AppMode.REVIEW)

    def _handle_result_done(self) -> None:
        self.join_panel.reset_state()
        self._set_mode(AppMode.JOIN)

    # --- Info dialogs ---

    def _handle_about(self) -> None:
        details = (
            f"{APP_NAME} v{APP_VERSION}\n"
            f"License: {APP_LICENSE}\n\n"
            f"{APP_ABOUT_TEXT}\n\n"
            f"Students on other devices connect to: {self.student_url}"
        )
        show_info(self, f"About {APP_NAME}", details)

    def _handle_help(self) -> None:
        show_info(self, f"{APP_NAME} Help", HELP_TEXT)
