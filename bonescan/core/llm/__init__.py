"""
Vision Model Boundary

The external multimodal model is treated as a black box returning text.
This package holds the prompts and the clients that reach it; it makes no
clinical decisions of its own.
"""
from .vision_client import VisionModel, GatewayVisionClient, GatewayConfig, to_data_uri
from .gemini_client import GeminiVisionClient, GeminiConfig, GeminiModel
from .factory import create_vision_client
from .prompts import prompts_for

__all__ = [
    "VisionModel",
    "GatewayVisionClient",
    "GatewayConfig",
    "to_data_uri",
    "GeminiVisionClient",
    "GeminiConfig",
    "GeminiModel",
    "create_vision_client",
    "prompts_for",
]
