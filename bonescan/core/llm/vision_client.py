"""
Vision Model Client (chat-completions gateway)

The hosted multimodal model is an untyped oracle: it takes one image plus a
short instruction and returns text. Anything with an async
`analyze_image(image, mime_type) -> str` method can stand in for it, which
keeps the parse/validate/rule chain testable without network access.

This client talks to an OpenAI-compatible chat-completions endpoint and maps
its HTTP failures onto the analysis error taxonomy.
"""
import base64
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

import httpx

from bonescan.config import DEFAULT_GATEWAY_MODEL, DEFAULT_GATEWAY_URL
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

logger = get_logger(__name__)


@runtime_checkable
class VisionModel(Protocol):
    """Capability: send one scan to the external model, get its raw reply."""

    async def analyze_image(self, image: bytes, mime_type: str) -> str:
        ...


def to_data_uri(image: bytes, mime_type: str) -> str:
    """Inline an image as a base64 data: URI."""
    encoded = base64.b64encode(image).decode("ascii")
    return f"data:{mime_type or 'image/png'};base64,{encoded}"


def build_messages(system_prompt: str, instruction: str, image: bytes, mime_type: str) -> List[Dict[str, Any]]:
    """Chat messages for one scan: fixed system prompt, instruction plus inline image."""
    return [
        {"role": "system", "content": system_prompt},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": instruction},
                {"type": "image_url", "image_url": {"url": to_data_uri(image, mime_type)}},
            ],
        },
    ]


def _message_text(content: Any) -> str:
    """Chat content may be a string or a list of typed parts."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            part.get("text", "") for part in content
            if isinstance(part, dict) and part.get("type", "text") == "text"
        )
    return ""


def _retry_after(response: httpx.Response) -> Optional[float]:
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


@dataclass
class GatewayConfig:
    """Configuration for the chat-completions gateway."""
    api_key: Optional[str] = None
    base_url: str = DEFAULT_GATEWAY_URL
    model: str = DEFAULT_GATEWAY_MODEL
    policy: PolicyMode = PolicyMode.FRACTURE_ONLY
    request_timeout_seconds: Optional[float] = 120.0
    extra_headers: Dict[str, str] = field(default_factory=dict)


class GatewayVisionClient:
    """
    Client for an OpenAI-compatible multimodal chat-completions endpoint.

    Issues exactly one request per scan; retrying is left to the caller.
    """

    def __init__(self, config: Optional[GatewayConfig] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config or GatewayConfig()
        self._transport = transport
        self.system_prompt, self.instruction = prompts_for(self.config.policy)

        if not self.config.api_key:
            logger.warning("Vision gateway API key is not set. Scan analysis will be unavailable.")

    @property
    def is_available(self) -> bool:
        return bool(self.config.api_key)

    def _payload(self, image: bytes, mime_type: str) -> Dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": build_messages(self.system_prompt, self.instruction, image, mime_type),
        }

    async def analyze_image(self, image: bytes, mime_type: str) -> str:
        """
        Send one scan to the gateway and return the model's reply text.

        Raises:
            UpstreamTransientError: HTTP 429
            UpstreamQuotaError: HTTP 402
            UpstreamProtocolError: any other non-success status
            ParseError: success status but no message content
        """
        if not self.is_available:
            raise BoneScanError("Vision API key is not configured", code="CONFIGURATION_ERROR")

        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
            **self.config.extra_headers,
        }

        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self.config.request_timeout_seconds,
        ) as client:
            response = await client.post(
                self.config.base_url,
                json=self._payload(image, mime_type),
                headers=headers,
            )

        if response.status_code == 429:
            logger.warning("Vision gateway rate limit hit")
            raise UpstreamTransientError(retry_after=_retry_after(response))
        if response.status_code == 402:
            logger.error("Vision gateway reports exhausted credits")
            raise UpstreamQuotaError()
        if not response.is_success:
            logger.error(f"AI gateway error: {response.status_code} {response.text}")
            raise UpstreamProtocolError(
                f"AI analysis failed: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError("No analysis returned", raw_text=response.text) from e

        choices = data.get("choices") if isinstance(data, dict) else None
        first = choices[0] if isinstance(choices, list) and choices else None
        message = first.get("message") if isinstance(first, dict) else None
        text = _message_text(message.get("content") if isinstance(message, dict) else None)

        if not text.strip():
            logger.error(f"Vision gateway returned no content: {response.text[:500]}")
            raise ParseError("No analysis returned", raw_text=response.text)

        logger.info(f"Vision gateway replied ({len(text)} chars, model {self.config.model})")
        return text
