"""
Logging configuration for the event editor.
"""

import logging
import sys
from typing import Union


class ColoredFormatter(logging.Formatter):
    """Formatter that colours the level name for console output"""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]

        formatted = super().format(record)
        if record.levelname in formatted:
            formatted = formatted.replace(record.levelname, f"{color}{record.levelname}{reset}", 1)
        return formatted


def setup_logging(level: Union[int, str] = logging.INFO, use_colors: bool = True) -> None:
    """Install a console handler on the package logger"""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    fmt = "%(asctime)s : %(levelname)-8s : %(name)s : %(message)s"
    if use_colors and sys.stderr.isatty():
        formatter = ColoredFormatter(fmt=fmt, datefmt="%H:%M:%S")
    else:
        formatter = logging.Formatter(fmt=fmt, datefmt="%H:%M:%S")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    package_logger = logging.getLogger("spine_event_editor")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False
