# bcachefs_exporter/utils/logger.py - Logging setup
"""
Root logger setup shared by `serve`, `dump` and `check`.

Console output goes to stderr so `dump` keeps stdout for metrics. Level
names are colored only when stderr is a terminal.
"""

import logging
import sys
from typing import Optional
from colorama import Fore, Style


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

LEVEL_COLORS = {
    logging.DEBUG: Fore.CYAN,
    logging.INFO: Fore.GREEN,
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}


class LevelColorFormatter(logging.Formatter):
    """Wraps the level name in the color of its level."""

    def formatMessage(self, record):
        color = LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().formatMessage(record)
        # Format a copy; other handlers share the record
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{Style.RESET_ALL}"
        return super().formatMessage(colored)


def _console_handler(stream) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    isatty = getattr(stream, 'isatty', None)
    if isatty is not None and isatty():
        handler.setFormatter(LevelColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(level: str = 'INFO', log_file: Optional[str] = None, stream=None):
    """
    Replace the root logger's handlers with a console and optional file handler.

    Args:
        level: Level name, unknown names fall back to INFO
        log_file: Optional path of a plain-text log file
        stream: Console stream (default: sys.stderr)
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handlers = [_console_handler(sys.stderr if stream is None else stream)]
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers = handlers

    logging.getLogger(__name__).debug(f"Logging to stderr{f' and {log_file}' if log_file else ''} at {level}")
