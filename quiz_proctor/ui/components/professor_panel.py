"""Component for professors: log in, author quizzes and inspect results."""

from __future__ import annotations

from html import escape
from pathlib import Path
from typing import Callable

from PySide6.QtCore import Qt
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QApplication,
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from quiz_proctor.constants.quiz_constants import (
    DEFAULT_DIFFICULTY,
    DIFFICULTIES,
    MAX_TOPIC_QUESTION_COUNT,
    MIN_TOPIC_QUESTION_COUNT,
)
from quiz_proctor.constants.ui_constants import (
    DASHBOARD_ANSWER_KEY_BUTTON,
    DASHBOARD_EMPTY_STATE,
    DASHBOARD_EXPORT_BUTTON,
    DASHBOARD_IMPORT_BUTTON,
    DASHBOARD_LOGOUT_BUTTON,
    DASHBOARD_QUIZ_TEMPLATE,
    DASHBOARD_REFRESH_BUTTON,
    DASHBOARD_RESULT_TEMPLATE,
    DASHBOARD_RESULTS_BUTTON,
    DASHBOARD_REVIEW_ATTEMPT_BUTTON,
    DASHBOARD_TEXT_BUTTON,
    DASHBOARD_TOPIC_BUTTON,
    EXPORT_DIALOG_TITLE,
    EXPORT_FILE_FILTER,
    IMPORT_DIALOG_TITLE,
    IMPORT_FILE_FILTER,
    LOGIN_BUTTON,
    LOGIN_EMAIL_PLACEHOLDER,
    LOGIN_SECRET_PLACEHOLDER,
    NO_QUIZ_SELECTED_MESSAGE,
    REGISTER_BUTTON,
    TEXT_SOURCE_DIALOG_TITLE,
    TEXT_SOURCE_FILE_FILTER,
)
from quiz_proctor.core.errors import GenerationFailure, QuizProctorError
from quiz_proctor.core.markdown_math_renderer import renderer
from quiz_proctor.core.models import Quiz, Result
from quiz_proctor.core.quiz_exporter import save_questions_to_file
from quiz_proctor.core.quiz_manager import QuizManager
from quiz_proctor.core.services.review_session import answer_key_views
from quiz_proctor.ui.dialog_helpers import (
    ask_choice,
    ask_int,
    ask_text,
    show_error,
    show_info,
    show_warning,
)


class ProfessorPanel(QWidget):
    """Login page followed by the quiz dashboard."""

    def __init__(self, quiz_manager: QuizManager, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.quiz_manager = quiz_manager
        self._professor: str | None = None
        self._quizzes: list[Quiz] = []
        self._last_export_path: Path | None = None
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)
        self.stack = QStackedWidget(self)
        self.stack.addWidget(self._build_login_page())
        self.stack.addWidget(self._build_dashboard_page())
        layout.addWidget(self.stack)

    def _build_login_page(self) -> QWidget:
        page = QWidget(self)
        layout = QVBoxLayout()
        page.setLayout(layout)

        form = QFormLayout()
        self.email_input = QLineEdit(page)
        self.email_input.setPlaceholderText(LOGIN_EMAIL_PLACEHOLDER)
        form.addRow("Email", self.email_input)
        self.secret_input = QLineEdit(page)
        self.secret_input.setPlaceholderText(LOGIN_SECRET_PLACEHOLDER)
        self.secret_input.setEchoMode(QLineEdit.Password)
        form.addRow("Password", self.secret_input)
        layout.addLayout(form)

        button_row = QHBoxLayout()
        login_button = QPushButton(LOGIN_BUTTON, page)
        login_button.clicked.connect(self._handle_login)
        button_row.addWidget(login_button)
        register_button = QPushButton(REGISTER_BUTTON, page)
        register_button.clicked.connect(self._handle_register)
        button_row.addWidget(register_button)
        layout.addLayout(button_row)
        layout.addStretch()
        return page

    def _build_dashboard_page(self) -> QWidget:
        page = QWidget(self)
        layout = QVBoxLayout()
        page.setLayout(layout)

        header_row = QHBoxLayout()
        self.welcome_label = QLabel("", page)
        header_row.addWidget(self.welcome_label, stretch=1)
        logout_button = QPushButton(DASHBOARD_LOGOUT_BUTTON, page)
        logout_button.clicked.connect(self.log_out)
        header_row.addWidget(logout_button)
        layout.addLayout(header_row)

        button_row = QHBoxLayout()
        for text, handler in (
            (DASHBOARD_IMPORT_BUTTON, self._handle_import),
            (DASHBOARD_TOPIC_BUTTON, self._handle_generate_topic),
            (DASHBOARD_TEXT_BUTTON, self._handle_generate_text),
            (DASHBOARD_EXPORT_BUTTON, self._handle_export),
            (DASHBOARD_REFRESH_BUTTON, self.refresh_quizzes),
        ):
            button = QPushButton(text, page)
            button.clicked.connect(handler)
            button_row.addWidget(button)
        layout.addLayout(button_row)

        content_row = QHBoxLayout()
        list_column = QVBoxLayout()
        self.quiz_list = QListWidget(page)
        self.quiz_list.setAlternatingRowColors(True)
        list_column.addWidget(self.quiz_list, stretch=1)
        self.empty_label = QLabel(DASHBOARD_EMPTY_STATE, page)
        self.empty_label.setAlignment(Qt.AlignCenter)
        list_column.addWidget(self.empty_label)

        detail_buttons = QHBoxLayout()
        results_button = QPushButton(DASHBOARD_RESULTS_BUTTON, page)
        results_button.clicked.connect(self._handle_show_results)
        detail_buttons.addWidget(results_button)
        review_button = QPushButton(DASHBOARD_REVIEW_ATTEMPT_BUTTON, page)
        review_button.clicked.connect(self._handle_review_attempt)
        detail_buttons.addWidget(review_button)
        key_button = QPushButton(DASHBOARD_ANSWER_KEY_BUTTON, page)
        key_button.clicked.connect(self._handle_show_answer_key)
        detail_buttons.addWidget(key_button)
        list_column.addLayout(detail_buttons)
        content_row.addLayout(list_column, stretch=1)

        self.detail_view = QWebEngineView(page)
        content_row.addWidget(self.detail_view, stretch=2)
        layout.addLayout(content_row, stretch=1)
        return page

    # --- Login ---

    def _handle_login(self) -> None:
        try:
            email = self.quiz_manager.authenticate_professor(
                self.email_input.text(), self.secret_input.text()
            )
        except QuizProctorError as exc:
            show_error(self, "Login failed", str(exc))
            return
        self._enter_dashboard(email)

    def _handle_register(self) -> None:
        try:
            email = self.quiz_manager.register_professor(
                self.email_input.text(), self.secret_input.text()
            )
        except QuizProctorError as exc:
            show_error(self, "Registration failed", str(exc))
            return
        show_info(self, "Account created", f"Registered {email}.")
        self._enter_dashboard(email)

    def _enter_dashboard(self, email: str) -> None:
        self._professor = email
        self.secret_input.clear()
        self.welcome_label.setText(f"Logged in as {email}")
        self.stack.setCurrentIndex(1)
        self.refresh_quizzes()

    def log_out(self) -> None:
        self._professor = None
        self._quizzes = []
        self.quiz_list.clear()
        self.detail_view.setHtml("")
        self.stack.setCurrentIndex(0)

    # --- Dashboard ---

    def refresh_quizzes(self) -> None:
        self._quizzes = self.quiz_manager.list_quizzes()
        self.quiz_list.clear()
        for quiz in self._quizzes:
            QListWidgetItem(
                DASHBOARD_QUIZ_TEMPLATE.format(
                    code=quiz.id,
                    title=quiz.title,
                    count=quiz.question_count,
                    duration=quiz.duration,
                ),
                self.quiz_list,
            )
        self.empty_label.setVisible(not self._quizzes)

    def _selected_quiz(self) -> Quiz | None:
        row = self.quiz_list.currentRow()
        if 0 <= row < len(self._quizzes):
            return self._quizzes[row]
        show_warning(self, "No quiz", NO_QUIZ_SELECTED_MESSAGE)
        return None

    def _ask_title_and_duration(self) -> tuple[str, int] | None:
        title = ask_text(self, "Quiz title", "Title:")
        if title is None:
            return None
        duration = ask_int(self, "Quiz duration", "Duration (minutes):", 10, 1, 600)
        if duration is None:
            return None
        return title, duration

    def _ask_difficulty(self) -> str | None:
        return ask_choice(
            self,
            "Difficulty",
            "Difficulty:",
            list(DIFFICULTIES),
            DIFFICULTIES.index(DEFAULT_DIFFICULTY),
        )

    def _handle_import(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self, IMPORT_DIALOG_TITLE, str(Path.home()), IMPORT_FILE_FILTER
        )
        if not file_path:
            return
        details = self._ask_title_and_duration()
        if details is None:
            return
        try:
            quiz = self.quiz_manager.import_quiz_file(details[0], details[1], Path(file_path))
        except QuizProctorError as exc:
            show_error(self, "Import failed", str(exc))
            return
        self._announce_quiz(quiz)

    def _handle_generate_topic(self) -> None:
        details = self._ask_title_and_duration()
        if details is None:
            return
        topic = ask_text(self, "Topic", "Topic:")
        if topic is None:
            return
        difficulty = self._ask_difficulty()
        if difficulty is None:
            return
        count = ask_int(
            self,
            "Questions",
            "Number of questions:",
            5,
            MIN_TOPIC_QUESTION_COUNT,
            MAX_TOPIC_QUESTION_COUNT,
        )
        if count is None:
            return
        self._run_generation(
            lambda: self.quiz_manager.create_topic_quiz(
                details[0], details[1], topic, difficulty, count
            )
        )

    def _handle_generate_text(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self, TEXT_SOURCE_DIALOG_TITLE, str(Path.home()), TEXT_SOURCE_FILE_FILTER
        )
        if not file_path:
            return
        try:
            source_text = Path(file_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            show_error(self, "Could not read document", str(exc))
            return
        details = self._ask_title_and_duration()
        if details is None:
            return
        difficulty = self._ask_difficulty()
        if difficulty is None:
            return
        self._run_generation(
            lambda: self.quiz_manager.create_text_quiz(
                details[0], details[1], source_text, difficulty
            )
        )

    def _run_generation(self, create: Callable[[], Quiz]) -> None:
        QApplication.setOverrideCursor(Qt.WaitCursor)
        try:
            quiz = create()
        except GenerationFailure as exc:
            show_error(self, "Generation failed", f"Failed to generate quiz. {exc}")
            return
        except QuizProctorError as exc:
            show_error(self, "Quiz rejected", str(exc))
            return
        finally:
            QApplication.restoreOverrideCursor()
        self._announce_quiz(quiz)

    def _announce_quiz(self, quiz: Quiz) -> None:
        self.refresh_quizzes()
        show_info(self, "Quiz created", f"Quiz created! The code is: {quiz.id}")

    def _handle_export(self) -> None:
        quiz = self._selected_quiz()
        if quiz is None:
            return
        default_path = self._last_export_path or (Path.cwd() / f"{quiz.id}.txt")
        file_path, _ = QFileDialog.getSaveFileName(
            self, EXPORT_DIALOG_TITLE, str(default_path), EXPORT_FILE_FILTER
        )
        if not file_path:
            return
        try:
            save_questions_to_file(Path(file_path), quiz.questions)
        except (OSError, ValueError) as exc:
            show_error(self, "Export failed", str(exc))
            return
        self._last_export_path = Path(file_path)
        show_info(self, "Quiz saved", f"Quiz exported to {file_path}.")

    def _handle_show_results(self) -> None:
        quiz = self._selected_quiz()
        if quiz is None:
            return
        results = self.quiz_manager.results_for_quiz(quiz.id)
        lines = [f"# Results for {quiz.title} ({quiz.id})", ""]
        if not results:
            lines.append("_No submissions yet._")
        for result in results:
            lines.append("- " + _result_label(result))
        self.detail_view.setHtml(renderer.render_full_document("\n".join(lines), title=quiz.title))

    def _handle_show_answer_key(self) -> None:
        quiz = self._selected_quiz()
        if quiz is None:
            return
        body = "<hr />".join(
            renderer.render_review(view, show_unanswered=False) for view in answer_key_views(quiz)
        )
        self.detail_view.setHtml(renderer.wrap_with_mathjax(body, title=quiz.title))

    def _handle_review_attempt(self) -> None:
        quiz = self._selected_quiz()
        if quiz is None:
            return
        results = self.quiz_manager.results_for_quiz(quiz.id)
        if not results:
            show_info(self, "No submissions", "Nobody has taken this quiz yet.")
            return
        labels = [f"{index + 1}. {_result_label(result)}" for index, result in enumerate(results)]
        choice = ask_choice(self, "Review attempt", "Attempt:", labels)
        if choice is None:
            return
        result = results[labels.index(choice)]
        try:
            review = self.quiz_manager.begin_review(result)
        except (QuizProctorError, ValueError) as exc:
            show_error(self, "Cannot review attempt", str(exc))
            return

        sections = [f"<h2>{escape(_result_label(result))}</h2>"]
        for index in range(quiz.question_count):
            review.go_to(index)
            sections.append(renderer.render_review(review.current_view()))
        self.detail_view.setHtml(renderer.wrap_with_mathjax("<hr />".join(sections), title=quiz.title))


def _result_label(result: Result) -> str:
    suffix = f" [{result.termination_reason.value}]" if result.termination_reason else ""
    return DASHBOARD_RESULT_TEMPLATE.format(
        name=result.taker.name,
        roll=result.taker.roll_number,
        email=result.taker.email,
        score=result.score,
        total=result.total,
        suffix=suffix,
    )
