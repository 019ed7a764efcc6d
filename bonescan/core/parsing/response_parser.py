"""
Vision Model Response Parser

Extracts the structured record from the model's raw reply. Models often wrap
their JSON in a markdown code fence even when told not to, so the first fenced
block wins; otherwise the whole reply is decoded.

Decoding is all-or-nothing: malformed JSON is a ParseError carrying the raw
reply, never a partial result.
"""
import json
import re
from typing import Any, Dict, Optional

from bonescan.utils import get_logger, ParseError

logger = get_logger(__name__)

# ```json ... ```  or  ``` ... ```  (tag optional, non-greedy so the first fence wins)
_FENCE_RE = re.compile(r"```[A-Za-z0-9_+-]*[ \t]*\n?(.*?)```", re.DOTALL)


def extract_payload(text: str) -> str:
    """Return the interior of the first code fence, or the whole text, trimmed."""
    match = _FENCE_RE.search(text)
    payload = match.group(1) if match else text
    return payload.strip()


def parse_model_response(text: Optional[str]) -> Dict[str, Any]:
    """
    Decode a model reply into a mapping.

    Args:
        text: Raw reply text from the vision model.

    Returns:
        The decoded JSON object.

    Raises:
        ParseError: if the reply is empty, not valid JSON, or not a JSON object.
    """
    raw = text or ""
    payload = extract_payload(raw)

    if not payload:
        raise ParseError("No analysis returned", raw_text=raw)

    try:
        decoded = json.loads(payload)
    except json.JSONDecodeError as e:
        logger.error(f"Parse failed at line {e.lineno} col {e.colno}: {raw!r}")
        raise ParseError("Failed to parse analysis", raw_text=raw, details={"reason": e.msg}) from e

    if not isinstance(decoded, dict):
        logger.error(f"Parse failed: expected a JSON object, got {type(decoded).__name__}: {raw!r}")
        raise ParseError(
            "Failed to parse analysis",
            raw_text=raw,
            details={"reason": f"expected object, got {type(decoded).__name__}"},
        )

    return decoded
