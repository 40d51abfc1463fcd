"""
Logging for the MS diagnosis service.

Console lines carry a UTC timestamp, the padded level and the logger name.
Handlers installed here are tagged so repeated setup (app reloads, tests)
replaces them instead of stacking duplicates.
"""
import logging
import sys
from typing import Optional
from datetime import datetime, timezone

# Marker attribute on handlers owned by setup_logging
HANDLER_TAG = "_msdiag"

FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class StructuredFormatter(logging.Formatter):
    """Console formatter: ISO timestamp, padded level, logger name."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'
    }

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds")

        if self.use_color:
            color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
            reset = self.COLORS['RESET']
        else:
            color = reset = ""

        line = f"{color}[{stamp}] {record.levelname:8} [{record.name}] {record.getMessage()}{reset}"
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def _owned(handler: logging.Handler) -> bool:
    return getattr(handler, HANDLER_TAG, False)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Install the service's console (and optional file) handlers on the root logger.

    Args:
        level: Logging level name; unknown names fall back to INFO
        log_file: Optional file path; empty means console only
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Foreign handlers (pytest capture, uvicorn) are left alone
    for handler in [h for h in root_logger.handlers if _owned(h)]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter(use_color=sys.stdout.isatty()))
    setattr(console_handler, HANDLER_TAG, True)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        setattr(file_handler, HANDLER_TAG, True)
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Module logger; use `__name__`."""
    return logging.getLogger(name)
