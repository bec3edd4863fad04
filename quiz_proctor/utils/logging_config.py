"""Logging configuration helpers for the quiz application."""

from __future__ import annotations

import logging
import os
from logging import Logger


def configure_logging() -> Logger:
    """Configure basic logging for the application and return the package logger."""
    level_name = os.environ.get("QUIZ_PROCTOR_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger("quiz_proctor")
