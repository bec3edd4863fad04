"""Qt UI components for the desktop application."""

from .dialog_helpers import confirm_submit, show_error, show_info, show_warning
from .main_window import QuizProctorMainWindow
from .qt_adapters import QtFocusWatcher, QtTicker

__all__ = [
    "QuizProctorMainWindow",
    "QtFocusWatcher",
    "QtTicker",
    "confirm_submit",
    "show_error",
    "show_info",
    "show_warning",
]
