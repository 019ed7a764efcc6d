"""
Data models: the validated analysis record and the HTTP API schemas.
"""
from .analysis import AnalysisRecord, Severity, Urgency, FIELD_ORDER
from .api import AnalyzeRequest, ReportRequest, HealthResponse, ErrorResponse

__all__ = [
    "AnalysisRecord",
    "Severity",
    "Urgency",
    "FIELD_ORDER",
    "AnalyzeRequest",
    "ReportRequest",
    "HealthResponse",
    "ErrorResponse",
]
