"""Component where a taker enters a quiz code and their details."""

from __future__ import annotations

from typing import Callable

from PySide6.QtWidgets import QFormLayout, QLabel, QLineEdit, QPushButton, QVBoxLayout, QWidget

from quiz_proctor.constants.ui_constants import (
    JOIN_BUTTON,
    JOIN_CODE_PLACEHOLDER,
    JOIN_EMAIL_PLACEHOLDER,
    JOIN_NAME_PLACEHOLDER,
    JOIN_ROLL_PLACEHOLDER,
    STUDENT_URL_PLACEHOLDER,
)
from quiz_proctor.core.models import TakerIdentity


class JoinPanel(QWidget):
    """Collects the quiz code and taker identity, then hands them to ``on_join``."""

    def __init__(
        self,
        on_join: Callable[[str, TakerIdentity], None],
        student_url: str | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.on_join = on_join
        self._build_ui(student_url or STUDENT_URL_PLACEHOLDER)

    def _build_ui(self, student_url: str) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        form = QFormLayout()
        self.code_input = QLineEdit(self)
        self.code_input.setPlaceholderText(JOIN_CODE_PLACEHOLDER)
        form.addRow("Quiz code", self.code_input)

        self.name_input = QLineEdit(self)
        self.name_input.setPlaceholderText(JOIN_NAME_PLACEHOLDER)
        form.addRow("Name", self.name_input)

        self.roll_input = QLineEdit(self)
        self.roll_input.setPlaceholderText(JOIN_ROLL_PLACEHOLDER)
        form.addRow("Roll number", self.roll_input)

        self.email_input = QLineEdit(self)
        self.email_input.setPlaceholderText(JOIN_EMAIL_PLACEHOLDER)
        form.addRow("Email", self.email_input)
        layout.addLayout(form)

        self.join_button = QPushButton(JOIN_BUTTON, self)
        self.join_button.clicked.connect(self._handle_join)
        layout.addWidget(self.join_button)

        self.network_label = QLabel(f"Students on other devices connect to: {student_url}", self)
        self.network_label.setWordWrap(True)
        layout.addWidget(self.network_label)
        layout.addStretch()

    def _handle_join(self) -> None:
        taker = TakerIdentity(
            name=self.name_input.text().strip(),
            roll_number=self.roll_input.text().strip(),
            email=self.email_input.text().strip(),
        )
        self.on_join(self.code_input.text(), taker)

    def reset_state(self) -> None:
        self.code_input.clear()
