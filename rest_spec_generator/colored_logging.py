"""
Colored console logging for the rest-spec-gen CLI.

The library modules only create loggers; handlers are installed here, by the
CLI, so embedding applications keep control of their own logging.
"""

import logging
import sys
from typing import Optional


class ColoredFormatter(logging.Formatter):
    """
    Logging formatter that adds ANSI colors by level and message kind.
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '',
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }

    SUCCESS = '\033[92m'          # Bright Green
    PROGRESS = '\033[94m'         # Bright Blue
    SECTION = '\033[96m'          # Bright Cyan

    RESET = '\033[0m'
    BOLD = '\033[1m'

    def __init__(self, fmt: Optional[str] = None, use_colors: bool = True):
        """
        Args:
            fmt: Log format string (uses default if None)
            use_colors: Whether to use colors; ignored when stderr is not a TTY
        """
        super().__init__(fmt or "%(levelname)s: %(message)s")
        self.use_colors = use_colors and hasattr(sys.stderr, 'isatty') and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        if not self.use_colors:
            return formatted

        message = record.getMessage()
        if record.levelno >= logging.WARNING:
            color = self.COLORS.get(record.levelname, '')
        elif message.startswith("✓"):
            color = self.SUCCESS + self.BOLD
        elif message.startswith("→"):
            color = self.PROGRESS
        elif message.startswith("=") or (message.startswith("  ") and message.isupper()):
            color = self.SECTION + self.BOLD
        else:
            color = self.COLORS.get(record.levelname, '')

        return f"{color}{formatted}{self.RESET}" if color else formatted


def setup_colored_logging(level: int = logging.INFO, use_colors: bool = True) -> None:
    """Replace the root logger's handlers with a single colored stderr handler."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ColoredFormatter(use_colors=use_colors))
    console_handler.setLevel(level)

    root_logger.addHandler(console_handler)
    root_logger.setLevel(level)


def log_success(logger: logging.Logger, message: str) -> None:
    logger.info(f"✓ {message}")


def log_progress(logger: logging.Logger, message: str) -> None:
    logger.info(f"→ {message}")


def log_section(logger: logging.Logger, section_name: str) -> None:
    separator = "=" * 60
    logger.info(separator)
    logger.info(f"  {section_name.upper()}")
    logger.info(separator)
