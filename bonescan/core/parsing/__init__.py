"""
Response Parsing Module

Turns free-form vision model output into a decoded mapping.
"""
from .response_parser import parse_model_response, extract_payload

__all__ = [
    "parse_model_response",
    "extract_payload",
]
