"""
Application services.
"""
from .analysis import AnalysisService, decode_base64_image

__all__ = [
    "AnalysisService",
    "decode_base64_image",
]
