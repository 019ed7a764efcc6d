"""
Analysis record schema.

The canonical, validated result of one scan analysis. JSON keys are camelCase
(the shape the vision model is asked to produce and the API returns); Python
attributes are snake_case.
"""
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_validator


class Severity(str, Enum):
    """Ordered severity scale. NONE iff nothing reportable was detected."""
    NONE     = "None"
    MILD     = "Mild"
    MODERATE = "Moderate"
    SEVERE   = "Severe"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        return list(Severity).index(self)


class Urgency(str, Enum):
    """Ordered by decreasing time pressure."""
    IMMEDIATE   = "Immediate"
    WITHIN_DAY  = "Within 24 hours"
    WITHIN_WEEK = "Within a week"
    ROUTINE     = "Routine"

    @property
    def rank(self) -> int:
        return list(Urgency).index(self)


# Order in which fields are checked; the first failure is the one reported.
FIELD_ORDER = (
    "detected",
    "condition",
    "severity",
    "affectedRegion",
    "findings",
    "medication",
    "doctorType",
    "urgency",
    "additionalNotes",
)


class AnalysisRecord(BaseModel):
    """Validated scan analysis. Field declaration order matches FIELD_ORDER."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    detected: StrictBool
    condition: StrictStr
    severity: Severity
    affected_region: StrictStr = Field(alias="affectedRegion")
    findings: StrictStr
    medication: StrictStr
    doctor_type: StrictStr = Field(alias="doctorType")
    urgency: Urgency
    additional_notes: StrictStr = Field(default="", alias="additionalNotes")

    @field_validator("additional_notes", mode="before")
    @classmethod
    def _null_notes_are_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
