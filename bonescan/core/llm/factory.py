"""
Vision client selection from settings.
"""
from bonescan.config import Settings
from bonescan.utils import get_logger
from .gemini_client import GeminiConfig, GeminiVisionClient
from .vision_client import GatewayConfig, GatewayVisionClient, VisionModel

logger = get_logger(__name__)


def create_vision_client(settings: Settings) -> VisionModel:
    """Build the configured vision client (`gateway` or `gemini`)."""
    if settings.vision_provider == "gemini":
        logger.info(f"Vision provider: Gemini ({settings.gemini_model})")
        return GeminiVisionClient(GeminiConfig(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            policy=settings.policy,
            request_timeout_seconds=settings.request_timeout_seconds,
        ))

    logger.info(f"Vision provider: gateway ({settings.gateway_model})")
    return GatewayVisionClient(GatewayConfig(
        api_key=settings.gateway_api_key,
        base_url=settings.gateway_url,
        model=settings.gateway_model,
        policy=settings.policy,
        request_timeout_seconds=settings.request_timeout_seconds,
    ))
