"""Logging setup for tagmarshal.

Adds a TRACE level below DEBUG (used for per-field engine steps) and a
console formatter that colors its output on a terminal.
"""

import logging
import sys
from typing import Any

# Add TRACE log level (below DEBUG)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")


def trace(self: logging.Logger, message: str, *args, **kwargs) -> None:  # type: ignore
    """Log a message with severity 'TRACE'."""
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kwargs)


# Add trace method to Logger class
logging.Logger.trace = trace  # type: ignore


# ANSI SGR parameters per level; levels not listed are printed plain
LEVEL_STYLES = {
    TRACE: "90",
    logging.DEBUG: "94",
    logging.INFO: "92",
    logging.WARNING: "93",
    logging.ERROR: "91",
    logging.CRITICAL: "1;91",
}
TIMESTAMP_STYLE = "90"


def colorize(text: str, style: str | None) -> str:
    """Wrap text in an ANSI escape sequence."""
    if not style:
        return text
    return f"\033[{style}m{text}\033[0m"


class ColorFormatter(logging.Formatter):
    """Formatter exposing colored %(levelname_color)s and %(asctime_color)s.

    With color=False both fields are filled in plain, so the same format
    string works when the output is not a terminal.
    """

    def __init__(self, *args: Any, color: bool = True, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        level_style = LEVEL_STYLES.get(record.levelno) if self.color else None
        record.levelname_color = colorize(f"{record.levelname:5}", level_style)  # type: ignore

        if not hasattr(record, "asctime"):
            record.asctime = self.formatTime(record, self.datefmt)
        timestamp_style = TIMESTAMP_STYLE if self.color else None
        record.asctime_color = colorize(record.asctime, timestamp_style)  # type: ignore

        return super().format(record)


def setup_logging(verbosity: int = 0) -> int:
    """Configure the root logger with a console handler, colored on a terminal.

    Args:
        verbosity: 0 for INFO, 1 for DEBUG, 2 or more for TRACE

    Returns:
        The selected log level
    """
    log_levels = [logging.INFO, logging.DEBUG, TRACE]
    log_level = log_levels[min(max(verbosity, 0), 2)]

    formatter = ColorFormatter(
        "%(asctime_color)s %(levelname_color)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        color=sys.stderr.isatty(),
    )
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
    return log_level
