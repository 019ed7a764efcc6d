"""
Structured Logging Configuration

One line per event: UTC timestamp, level, logger name, message, then any
pipeline context passed as ``extra={"context": {...}}`` rendered as
``key=value`` pairs, e.g.

    [2026-10-19T09:12:03+00:00] INFO     [bonescan.core.clinical.engine] Specialist corrected ... | rule=FX-GENERIC policy=fracture_only
"""
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Marks handlers owned by setup_logging so repeat calls replace only those
_HANDLER_FLAG = "_bonescan_handler"


def _render_context(context: Optional[Dict[str, Any]]) -> str:
    if not context:
        return ""
    pairs = " ".join(f"{key}={value}" for key, value in context.items() if value is not None)
    return f" | {pairs}" if pairs else ""


class StructuredFormatter(logging.Formatter):
    """Single-line formatter with optional ANSI level colours."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="seconds")
        line = (
            f"[{timestamp}] {record.levelname:8} [{record.name}] "
            f"{record.getMessage()}{_render_context(getattr(record, 'context', None))}"
        )

        if self.use_color:
            line = f"{self.LEVEL_COLORS.get(record.levelname, '')}{line}{self.RESET}"

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Logging level name (unknown names fall back to INFO)
        log_file: Optional file path; file output is never coloured
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            root_logger.removeHandler(handler)
            handler.close()

    handlers = [logging.StreamHandler(sys.stdout)]
    handlers[0].setFormatter(StructuredFormatter(use_color=sys.stdout.isatty()))

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter(use_color=False))
        handlers.append(file_handler)

    for handler in handlers:
        setattr(handler, _HANDLER_FLAG, True)
        root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Module logger (pass ``__name__``)."""
    return logging.getLogger(name)
