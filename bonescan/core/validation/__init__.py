"""
Validation Module

Schema validation and normalization of decoded model output.
"""
from .record_validator import RecordValidator, validate_record

__all__ = [
    "RecordValidator",
    "validate_record",
]
