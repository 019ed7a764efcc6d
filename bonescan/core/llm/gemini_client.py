"""
Gemini Vision Client

Direct Google Gemini access through LangChain, for deployments that call
Gemini without the chat-completions gateway. Same capability as
GatewayVisionClient: one scan in, the model's raw reply text out.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
import os
from datetime import datetime

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from bonescan.core.clinical import PolicyMode
from bonescan.utils import (
    get_logger,
    BoneScanError,
    ParseError,
    UpstreamProtocolError,
    UpstreamQuotaError,
    UpstreamTransientError,
)
from .prompts import prompts_for
from .vision_client import to_data_uri

logger = get_logger(__name__)


class GeminiModel(str, Enum):
    """Gemini models with image input."""
    PRO_2_5 = "gemini-2.5-pro"
    FLASH_2_5 = "gemini-2.5-flash"
    FLASH_2_0 = "gemini-2.0-flash"


@dataclass
class GeminiConfig:
    """Configuration for the Gemini vision client."""
    api_key: Optional[str] = field(default_factory=lambda: os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"))
    model: str = GeminiModel.PRO_2_5.value
    policy: PolicyMode = PolicyMode.FRACTURE_ONLY
    temperature: float = 0.2
    max_output_tokens: int = 2048
    request_timeout_seconds: Optional[float] = 120.0
    # Rate limits surface to the caller instead of being retried here
    max_retries: int = 0


# Substrings of provider error text, checked in this order
_QUOTA_MARKERS = ("402", "billing", "insufficient", "credits")
_RATE_LIMIT_MARKERS = ("429", "resource_exhausted", "resource exhausted", "rate limit", "too many requests")


def classify_provider_error(exc: Exception) -> BoneScanError:
    """Map a LangChain / Google API exception onto the analysis error taxonomy."""
    text = f"{type(exc).__name__}: {exc}".lower()
    if any(marker in text for marker in _QUOTA_MARKERS):
        return UpstreamQuotaError()
    if any(marker in text for marker in _RATE_LIMIT_MARKERS):
        return UpstreamTransientError()
    return UpstreamProtocolError(f"AI analysis failed: {exc}")


def _content_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: List[str] = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type", "text") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return ""


class GeminiVisionClient:
    """
    Client for Google Gemini multimodal models via LangChain.
    """

    def __init__(self, config: Optional[GeminiConfig] = None, llm: Optional[Any] = None):
        """
        Args:
            config: Optional configuration, uses defaults if not provided
            llm: Optional pre-built chat model (anything with `ainvoke`)
        """
        self.config = config or GeminiConfig()
        self.system_prompt, self.instruction = prompts_for(self.config.policy)
        self._request_count = 0
        self._last_request_time: Optional[datetime] = None
        self._llm = llm

        if self._llm is None and self.config.api_key:
            self._llm = ChatGoogleGenerativeAI(
                model=self.config.model,
                temperature=self.config.temperature,
                max_output_tokens=self.config.max_output_tokens,
                timeout=self.config.request_timeout_seconds,
                max_retries=self.config.max_retries,
                google_api_key=self.config.api_key,
            )
            logger.info(f"LangChain Gemini vision client initialized with model: {self.config.model}")
        elif self._llm is None:
            logger.warning("No Gemini API key provided. Scan analysis will be unavailable.")

    @property
    def is_available(self) -> bool:
        return self._llm is not None

    def _messages(self, image: bytes, mime_type: str) -> list:
        return [
            SystemMessage(content=self.system_prompt),
            HumanMessage(content=[
                {"type": "text", "text": self.instruction},
                {"type": "image_url", "image_url": {"url": to_data_uri(image, mime_type)}},
            ]),
        ]

    async def analyze_image(self, image: bytes, mime_type: str) -> str:
        """
        Send one scan to Gemini and return the reply text.

        Raises:
            UpstreamTransientError / UpstreamQuotaError / UpstreamProtocolError
            ParseError: the model returned no text
        """
        if not self.is_available:
            raise BoneScanError("Gemini API key is not configured", code="CONFIGURATION_ERROR")

        start_time = datetime.now()
        try:
            response = await self._llm.ainvoke(self._messages(image, mime_type))
        except Exception as e:
            logger.error(f"Gemini vision request failed: {e}")
            raise classify_provider_error(e) from e

        latency = (datetime.now() - start_time).total_seconds() * 1000
        self._request_count += 1
        self._last_request_time = datetime.now()

        text = _content_text(getattr(response, "content", response))
        if not text.strip():
            raise ParseError("No analysis returned", raw_text=str(response))

        logger.info(f"Gemini replied in {latency:.0f} ms ({len(text)} chars)")
        return text

    def get_stats(self) -> Dict[str, Any]:
        """Get client statistics."""
        return {
            "is_available": self.is_available,
            "model": self.config.model,
            "request_count": self._request_count,
            "last_request": self._last_request_time.isoformat() if self._last_request_time else None
        }
