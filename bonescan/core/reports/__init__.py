"""
Report Generation Module

Generates the downloadable PDF diagnostic report for one analysis.
"""
from .diagnostic_report import (
    DiagnosticReportGenerator,
    DiagnosticReport,
    REPORT_FILENAME,
    load_image,
)

__all__ = [
    "DiagnosticReportGenerator",
    "DiagnosticReport",
    "REPORT_FILENAME",
    "load_image",
]
