"""Helper functions for common dialog patterns in the desktop UI."""

from __future__ import annotations

from PySide6.QtWidgets import QInputDialog, QMessageBox, QWidget

from quiz_proctor.constants.ui_constants import CONFIRM_SUBMIT_MESSAGE, CONFIRM_SUBMIT_TITLE


def confirm_submit(parent: QWidget) -> bool:
    """Ask the taker to confirm a manual submission.

    Returns:
        True if the taker confirmed, False otherwise
    """
    reply = QMessageBox.question(
        parent,
        CONFIRM_SUBMIT_TITLE,
        CONFIRM_SUBMIT_MESSAGE,
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return reply == QMessageBox.Yes


def ask_text(parent: QWidget, title: str, label: str, default: str = "") -> str | None:
    """Prompt for a single line of text. Returns None when cancelled."""
    text, accepted = QInputDialog.getText(parent, title, label, text=default)
    if not accepted:
        return None
    return text


def ask_int(
    parent: QWidget, title: str, label: str, value: int, minimum: int, maximum: int
) -> int | None:
    number, accepted = QInputDialog.getInt(parent, title, label, value, minimum, maximum)
    return number if accepted else None


def ask_choice(parent: QWidget, title: str, label: str, choices: list[str], current: int = 0) -> str | None:
    choice, accepted = QInputDialog.getItem(parent, title, label, choices, current, False)
    return choice if accepted else None


def show_error(parent: QWidget, title: str, message: str) -> None:
    """Show error dialog."""
    QMessageBox.critical(parent, title, message)


def show_info(parent: QWidget, title: str, message: str) -> None:
    """Show information dialog."""
    QMessageBox.information(parent, title, message)


def show_warning(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.warning(parent, title, message)
