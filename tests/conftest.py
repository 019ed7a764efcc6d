"""
Pytest Configuration and Fixtures

Shared fixtures for the BoneScan AI pipeline tests.
"""
import io
import json
from typing import Any, Dict, List

import pytest
from PIL import Image


class FakeVisionModel:
    """Stands in for the hosted model: returns a canned reply, records calls."""

    def __init__(self, reply: str = ""):
        self.reply = reply
        self.calls: List[Dict[str, Any]] = []

    async def analyze_image(self, image: bytes, mime_type: str) -> str:
        self.calls.append({"image": image, "mime_type": mime_type})
        return self.reply


class FailingVisionModel:
    """Raises the given exception from every call."""

    def __init__(self, error: Exception):
        self.error = error

    async def analyze_image(self, image: bytes, mime_type: str) -> str:
        raise self.error


@pytest.fixture
def fracture_payload() -> Dict[str, Any]:
    """A well-formed fracture analysis where the model picked the wrong specialist."""
    return {
        "detected": True,
        "condition": "Distal Radius Fracture",
        "severity": "Moderate",
        "affectedRegion": "Left Wrist",
        "findings": "Transverse fracture of the distal radius with mild dorsal angulation.",
        "medication": "Ibuprofen 400 mg as needed for pain",
        "doctorType": "Cardiologist",
        "urgency": "Within 24 hours",
        "additionalNotes": "Cast immobilization for 6 weeks.",
    }


@pytest.fixture
def no_finding_payload() -> Dict[str, Any]:
    """A clean scan."""
    return {
        "detected": False,
        "condition": "No fracture detected",
        "severity": "None",
        "affectedRegion": "Right Hand",
        "findings": "Normal bone alignment and cortical outlines.",
        "medication": "None required",
        "doctorType": "",
        "urgency": "Routine",
        "additionalNotes": "",
    }


@pytest.fixture
def osteoarthritis_payload() -> Dict[str, Any]:
    """A disease finding that fracture-only deployments must filter out."""
    return {
        "detected": True,
        "condition": "Osteoarthritis of Knee",
        "severity": "Mild",
        "affectedRegion": "Right Knee",
        "findings": "Joint space narrowing with marginal osteophytes.",
        "medication": "Paracetamol",
        "doctorType": "Rheumatologist",
        "urgency": "Within a week",
        "additionalNotes": "Weight management advised.",
    }


@pytest.fixture
def fracture_reply(fracture_payload) -> str:
    """The fracture payload as the model usually sends it: inside a json fence."""
    return "Here is the analysis:\n```json\n" + json.dumps(fracture_payload, indent=2) + "\n```\n"


@pytest.fixture
def fake_model_factory():
    """Build a FakeVisionModel with a given reply."""
    return FakeVisionModel


@pytest.fixture
def failing_model_factory():
    """Build a FailingVisionModel raising a given error."""
    return FailingVisionModel


@pytest.fixture
def png_bytes() -> bytes:
    """A small valid PNG."""
    buffer = io.BytesIO()
    Image.new("RGB", (32, 32), color=(200, 200, 200)).save(buffer, format="PNG")
    return buffer.getvalue()
