"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    BoneScanError,
    InputError,
    UpstreamTransientError,
    UpstreamQuotaError,
    UpstreamProtocolError,
    ParseError,
    ValidationError,
    ReportGenerationError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "BoneScanError",
    "InputError",
    "UpstreamTransientError",
    "UpstreamQuotaError",
    "UpstreamProtocolError",
    "ParseError",
    "ValidationError",
    "ReportGenerationError",
]
