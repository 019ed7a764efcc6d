"""
Scan Analysis Service

Sequences one analysis: input checks → one awaited vision model call →
parse → validate → rule engine. Also renders the report for a finished
analysis.

Parse and validation failures are logged with the raw reply and re-raised;
no record is ever guessed. The service holds no per-request state.
"""
import base64
import binascii
from typing import Optional

from bonescan.core.clinical import PolicyMode, SpecialistRoutingEngine
from bonescan.core.llm import VisionModel
from bonescan.core.parsing import parse_model_response
from bonescan.core.reports import DiagnosticReport, DiagnosticReportGenerator
from bonescan.core.reports.diagnostic_report import ImageInput
from bonescan.core.validation import RecordValidator
from bonescan.models.analysis import AnalysisRecord
from bonescan.utils import get_logger, InputError, ParseError, ValidationError

logger = get_logger(__name__)

DEFAULT_MIME_TYPE = "image/png"


def decode_base64_image(image_base64: Optional[str]) -> bytes:
    """Decode an inline base64 image (a data: URI prefix is tolerated)."""
    if not image_base64 or not image_base64.strip():
        raise InputError("No image provided")
    payload = image_base64.partition(",")[2] if image_base64.startswith("data:") else image_base64
    if not payload.strip():
        raise InputError("No image provided")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InputError("Image data is not valid base64") from e


class AnalysisService:
    """
    Orchestrates the analysis pipeline for one deployment policy.

    Args:
        vision_model: Anything implementing `analyze_image(bytes, mime) -> str`
        policy: Deployment policy handed to the rule engine
        report_generator: Optional renderer (defaults to DiagnosticReportGenerator)
    """

    def __init__(
        self,
        vision_model: VisionModel,
        policy: PolicyMode = PolicyMode.FRACTURE_ONLY,
        report_generator: Optional[DiagnosticReportGenerator] = None,
    ):
        self.vision_model = vision_model
        self.policy = PolicyMode(policy)
        self.validator = RecordValidator()
        self.rule_engine = SpecialistRoutingEngine(self.policy)
        self.report_generator = report_generator or DiagnosticReportGenerator()

    @staticmethod
    def check_input(image: Optional[bytes], mime_type: Optional[str]) -> str:
        """Reject missing images and non-image uploads; return the MIME type to send."""
        if not image:
            raise InputError("No image provided")
        mime = (mime_type or DEFAULT_MIME_TYPE).strip().lower()
        if not mime.startswith("image/"):
            raise InputError(f"Unsupported file type '{mime}'. Please upload an image.")
        return mime

    def process_reply(self, raw_text: str) -> AnalysisRecord:
        """Run parse → validate → rules over a model reply."""
        try:
            decoded = parse_model_response(raw_text)
            record = self.validator.validate(decoded)
        except (ParseError, ValidationError) as e:
            logger.error(f"Model reply rejected ({e.code}): {e.message} | raw reply: {raw_text!r}")
            raise

        outcome = self.rule_engine.evaluate(record)
        if outcome.scope_filtered:
            logger.info(f"Analysis scope-filtered under '{self.policy.value}' policy")
        elif outcome.matched_rule is not None:
            logger.info(f"Routing rule {outcome.matched_rule.rule_id} applied")
        return outcome.record

    async def analyze(self, image: Optional[bytes], mime_type: Optional[str] = None) -> AnalysisRecord:
        """
        Analyze one scan.

        Raises:
            InputError, UpstreamTransientError, UpstreamQuotaError,
            UpstreamProtocolError, ParseError, ValidationError
        """
        mime = self.check_input(image, mime_type)
        logger.info(f"Analyzing scan ({len(image)} bytes, {mime})")

        raw_text = await self.vision_model.analyze_image(image, mime)
        record = self.process_reply(raw_text)

        logger.info(
            f"Analysis complete: condition='{record.condition}' specialist='{record.doctor_type}'",
            extra={"context": {
                "detected": record.detected,
                "severity": record.severity.value,
                "urgency": record.urgency.value,
                "policy": self.policy.value,
            }},
        )
        return record

    def render_report(
        self,
        record: AnalysisRecord,
        image: Optional[ImageInput] = None,
    ) -> DiagnosticReport:
        """Render the downloadable PDF for a finished analysis."""
        return self.report_generator.generate(record, image)
