"""
Analysis Record Validation

Turns the decoded model mapping into a well-typed AnalysisRecord or fails with
a ValidationError naming the first bad field, in the fixed order:

    detected, condition, severity, affectedRegion, findings,
    medication, doctorType, urgency, additionalNotes

Nothing is coerced across types: a numeric severity or a "true" string for
`detected` is a failure. The only defaults are for `additionalNotes`.
"""
from typing import Any, Dict, Mapping

from pydantic import ValidationError as PydanticValidationError

from bonescan.models.analysis import AnalysisRecord, Severity, FIELD_ORDER
from bonescan.utils import get_logger, ValidationError

logger = get_logger(__name__)

# attribute name -> JSON key, so errors raised for either spelling map back to FIELD_ORDER
_ATTR_TO_KEY = {
    name: (info.alias or name) for name, info in AnalysisRecord.model_fields.items()
}

# snake_case attribute names are not accepted as wire keys
_NAME_ONLY_KEYS = frozenset(
    name for name, info in AnalysisRecord.model_fields.items() if info.alias and info.alias != name
)


def _field_of(error: Dict[str, Any]) -> str:
    loc = error.get("loc") or ("record",)
    head = str(loc[0])
    return _ATTR_TO_KEY.get(head, head)


def _order_of(field: str) -> int:
    try:
        return FIELD_ORDER.index(field)
    except ValueError:
        return len(FIELD_ORDER)


class RecordValidator:
    """
    Validates decoded model output against the AnalysisRecord schema.

    Stateless; one instance can be shared across requests.
    """

    def validate(self, data: Mapping[str, Any]) -> AnalysisRecord:
        """
        Build an AnalysisRecord from a decoded mapping.

        Raises:
            ValidationError: naming the first missing or invalid field.
        """
        if not isinstance(data, Mapping):
            raise ValidationError(
                f"Expected an object, got {type(data).__name__}", field="record"
            )

        try:
            record = AnalysisRecord.model_validate(
                {key: value for key, value in data.items() if key not in _NAME_ONLY_KEYS}
            )
        except PydanticValidationError as exc:
            first = min(exc.errors(), key=lambda err: _order_of(_field_of(err)))
            field = _field_of(first)
            if first.get("type") == "missing":
                message = f"Missing required field '{field}'"
            else:
                message = f"Invalid value for field '{field}': {first.get('msg', 'invalid')}"
            logger.warning(f"RecordValidator: {message}")
            raise ValidationError(message, field=field, details={"input": first.get("input")}) from exc

        return self._enforce_detection_coupling(record)

    @staticmethod
    def _enforce_detection_coupling(record: AnalysisRecord) -> AnalysisRecord:
        """severity is None exactly when nothing was detected."""
        if record.detected and record.severity == Severity.NONE:
            raise ValidationError(
                "Invalid value for field 'severity': a detected condition needs a severity",
                field="severity",
            )
        if not record.detected and record.severity != Severity.NONE:
            logger.info(
                f"RecordValidator: severity '{record.severity.value}' dropped for non-detection"
            )
            return record.model_copy(update={"severity": Severity.NONE})
        return record


_default_validator = RecordValidator()


def validate_record(data: Mapping[str, Any]) -> AnalysisRecord:
    """Module-level convenience wrapper around RecordValidator.validate."""
    return _default_validator.validate(data)
