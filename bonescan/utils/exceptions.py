"""
Custom Exception Hierarchy

One exception type per failure class of the analysis boundary. Every error
carries a short user-facing message, a stable code, and the HTTP status the
API layer answers with.
"""
from typing import Optional, Dict, Any


class BoneScanError(Exception):
    """Base exception for all scan analysis errors."""

    http_status: int = 500

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.message,
            "code": self.code,
        }


class InputError(BoneScanError):
    """No image supplied, or the upload is not an image."""

    http_status = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INPUT_ERROR", details=details)


class UpstreamTransientError(BoneScanError):
    """The vision model rate-limited us; the caller may retry after a delay."""

    http_status = 429

    def __init__(
        self,
        message: str = "Rate limit exceeded. Please try again shortly.",
        retry_after: Optional[float] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="UPSTREAM_RATE_LIMITED",
            details={"retry_after": retry_after, **(details or {})}
        )
        self.retry_after = retry_after


class UpstreamQuotaError(BoneScanError):
    """Credits or quota exhausted; not retryable until the account is topped up."""

    http_status = 402

    def __init__(
        self,
        message: str = "AI credits exhausted. Please add credits.",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, code="UPSTREAM_QUOTA_EXHAUSTED", details=details)


class UpstreamProtocolError(BoneScanError):
    """The vision model answered with an unexpected non-success status."""

    http_status = 502

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="UPSTREAM_ERROR",
            details={"status_code": status_code, **(details or {})}
        )
        self.status_code = status_code


class ParseError(BoneScanError):
    """Model reply could not be decoded into structured data."""

    http_status = 502

    def __init__(
        self,
        message: str = "Failed to parse analysis",
        raw_text: str = "",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, code="PARSE_ERROR", details=details)
        self.raw_text = raw_text


class ValidationError(BoneScanError):
    """Decoded structure is missing a required field or has a misshaped one."""

    http_status = 502

    def __init__(
        self,
        message: str,
        field: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"field": field, **(details or {})}
        )
        self.field = field


class ReportGenerationError(BoneScanError):
    """Errors during PDF report generation."""

    http_status = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="REPORT_ERROR", details=details)
