"""
Request / response models for the HTTP API.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class AnalyzeRequest(BaseModel):
    """Inline image submission: base64 payload plus its MIME type."""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"example": {"imageBase64": "iVBORw0KGgo...", "mimeType": "image/png"}},
    )

    image_base64: Optional[str] = Field(default=None, alias="imageBase64")
    mime_type: Optional[str] = Field(default=None, alias="mimeType")


class ReportRequest(BaseModel):
    """A previously returned analysis result, optionally with the source image."""
    model_config = ConfigDict(populate_by_name=True)

    result: Dict[str, Any]
    # base64 or a data: URI
    image_base64: Optional[str] = Field(default=None, alias="imageBase64")


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: str
    uptime_seconds: float
    policy: str
    provider: str


class ErrorResponse(BaseModel):
    error: str
    code: str = "ANALYSIS_FAILED"
