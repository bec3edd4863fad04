"""Application entry point for QuizProctor."""

from __future__ import annotations

import socket
import sys

from PySide6.QtWidgets import QApplication

from quiz_proctor.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from quiz_proctor.constants.storage_constants import DATA_DIR
from quiz_proctor.core.question_source import OllamaQuestionSource
from quiz_proctor.core.quiz_manager import QuizManager
from quiz_proctor.core.services.quiz_repository import QuizRepository
from quiz_proctor.server.api_server import start_api_server
from quiz_proctor.ui.main_window import QuizProctorMainWindow
from quiz_proctor.utils.logging_config import configure_logging


def _determine_student_url(port: int) -> str:
    """Best-effort determination of the local IP for the student-facing URL."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            ip_address = sock.getsockname()[0]
    except OSError:
        ip_address = "127.0.0.1"
    return f"http://{ip_address}:{port}/"


def main() -> None:
    """Initialize logging, load the store, start the API server, and launch the Qt UI."""
    logger = configure_logging()
    logger.info("Starting QuizProctor (data in %s)", DATA_DIR)

    repository = QuizRepository(DATA_DIR)
    question_source = OllamaQuestionSource()
    quiz_manager = QuizManager(repository, question_source)
    start_api_server(quiz_manager=quiz_manager, host=DEFAULT_HOST, port=DEFAULT_PORT)
    student_url = _determine_student_url(DEFAULT_PORT)
    logger.info("Student page available at %s", student_url)

    app = QApplication(sys.argv)
    window = QuizProctorMainWindow(quiz_manager=quiz_manager, student_url=student_url)
    window.show()
    exit_code = app.exec()
    question_source.close()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
