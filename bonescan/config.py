"""
BoneScan AI - Configuration
===========================
Centralised settings for the vision provider, deployment policy and logging.
Loads secrets from the project-level .env file.
"""
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from bonescan import __version__
from bonescan.core.clinical import PolicyMode

# ── Paths ───────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")

APP_VERSION = __version__

DEFAULT_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_GATEWAY_MODEL = "google/gemini-2.5-pro"
DEFAULT_GEMINI_MODEL = "gemini-2.5-pro"


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _optional_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = _env(name)
    if not raw:
        return default
    if raw.lower() in ("none", "off"):
        return None
    return float(raw)


@dataclass
class Settings:
    """Process-wide settings, read from the environment once."""
    policy: PolicyMode = field(
        default_factory=lambda: PolicyMode(_env("BONESCAN_POLICY", PolicyMode.FRACTURE_ONLY.value))
    )
    vision_provider: str = field(default_factory=lambda: _env("VISION_PROVIDER", "gateway").lower())

    # OpenAI-compatible chat-completions gateway
    gateway_url: str = field(default_factory=lambda: _env("VISION_GATEWAY_URL", DEFAULT_GATEWAY_URL))
    gateway_api_key: Optional[str] = field(
        default_factory=lambda: _env("VISION_API_KEY") or _env("LOVABLE_API_KEY") or None
    )
    gateway_model: str = field(default_factory=lambda: _env("VISION_MODEL", DEFAULT_GATEWAY_MODEL))

    # Direct Gemini via LangChain
    gemini_api_key: Optional[str] = field(
        default_factory=lambda: _env("GEMINI_API_KEY") or _env("GOOGLE_API_KEY") or None
    )
    gemini_model: str = field(default_factory=lambda: _env("GEMINI_MODEL", DEFAULT_GEMINI_MODEL))

    # Caller-side abort for the single outbound call; None waits indefinitely
    request_timeout_seconds: Optional[float] = field(
        default_factory=lambda: _optional_float("VISION_TIMEOUT_SECONDS", 120.0)
    )

    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(default_factory=lambda: _env("LOG_FILE") or None)

    def __post_init__(self):
        self.policy = PolicyMode(self.policy)
        if self.vision_provider not in ("gateway", "gemini"):
            raise ValueError(
                f"Unknown VISION_PROVIDER '{self.vision_provider}'. Valid: gateway, gemini"
            )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings are loaded once per process."""
    return Settings()
