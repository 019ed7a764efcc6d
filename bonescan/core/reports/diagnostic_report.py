"""
Diagnostic Report Generator

Renders a validated AnalysisRecord (plus the optional source X-ray) into a
downloadable PDF:

- Blue header band with product title, short report ID and date
- Scan thumbnail with the diagnosis summary beside it, or a full-width
  summary when there is no usable image
- Clinical Findings, Suggested Medication, Recommended Specialist and
  Additional Notes, each skipped when empty
- Trailing disclaimer

Layout works top-down in millimetres on A4 and converts to reportlab's
bottom-up points only when drawing.
"""
import base64
import binascii
import io
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from reportlab.lib.colors import Color
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from bonescan.models.analysis import AnalysisRecord
from bonescan.utils import get_logger, ReportGenerationError

logger = get_logger(__name__)

REPORT_FILENAME = "BoneScan-AI-Report.pdf"
REPORT_TITLE = "BoneScan AI — Diagnostic Report"

DISCLAIMER = (
    "DISCLAIMER: This report is AI-generated and for informational purposes only. "
    "It does not constitute medical advice, diagnosis, or treatment. Always consult "
    "a qualified healthcare provider for medical decisions."
)

# Layout (mm, measured from the top of the page)
MARGIN = 16
HEADER_HEIGHT = 36
CONTENT_TOP = 48
IMAGE_SIZE = 55
SUMMARY_OFFSET = 62
PAGE_BREAK_AT = 260
DISCLAIMER_MIN_Y = 250
DISCLAIMER_BREAK_AT = 270
BODY_BOTTOM = 282
NEW_PAGE_TOP = 20
BODY_LINE = 5

# Colours
BRAND_BLUE = Color(23 / 255, 92 / 255, 211 / 255)
WHITE = Color(1, 1, 1)
TITLE_TEXT = Color(30 / 255, 30 / 255, 30 / 255)
META_TEXT = Color(80 / 255, 80 / 255, 80 / 255)
BODY_TEXT = Color(50 / 255, 50 / 255, 50 / 255)
RULE_GREY = Color(220 / 255, 220 / 255, 220 / 255)
MUTED_TEXT = Color(150 / 255, 150 / 255, 150 / 255)

ImageInput = Union[bytes, bytearray, str]


@dataclass
class DiagnosticReport:
    """A rendered report ready for download."""
    report_id: str
    generated_at: datetime
    filename: str
    pdf_bytes: bytes
    page_count: int = 1
    image_embedded: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "report_id": self.report_id,
            "generated_at": self.generated_at.isoformat(),
            "filename": self.filename,
            "size_bytes": len(self.pdf_bytes),
            "page_count": self.page_count,
            "image_embedded": self.image_embedded,
        }


def _format_date(moment: datetime) -> str:
    return f"{moment:%B} {moment.day}, {moment.year}"


def load_image(image: Optional[ImageInput]) -> Optional[ImageReader]:
    """
    Decode raw bytes, a data: URI or bare base64 into an ImageReader.

    Returns None (and logs) when the image is missing or cannot be decoded.
    """
    if image is None or len(image) == 0:
        return None

    try:
        if isinstance(image, str):
            payload = image.split(",", 1)[1] if image.startswith("data:") else image
            raw = base64.b64decode(payload, validate=False)
        else:
            raw = bytes(image)
        reader = ImageReader(io.BytesIO(raw))
        reader.getSize()
        return reader
    except (binascii.Error, ValueError, IndexError, OSError) as e:
        logger.warning(f"Scan image could not be decoded, omitting it from the report: {e}")
    except Exception as e:
        logger.warning(f"Scan image rejected by reportlab, omitting it from the report: {e}")
    return None


class _PageWriter:
    """Top-down cursor over a reportlab canvas."""

    def __init__(self, pdf: canvas.Canvas):
        self.pdf = pdf
        self.page_width, self.page_height = A4
        self.content_width = self.page_width - 2 * MARGIN * mm
        self.y = CONTENT_TOP
        self.page_count = 1

    def to_pt(self, y_mm: float) -> float:
        return self.page_height - y_mm * mm

    def new_page(self) -> None:
        self.pdf.showPage()
        self.page_count += 1
        self.y = NEW_PAGE_TOP

    def break_if_below(self, threshold: float) -> None:
        if self.y > threshold:
            self.new_page()

    def text(self, x_mm: float, y_mm: float, text: str, font: str, size: float, color: Color) -> None:
        self.pdf.setFont(font, size)
        self.pdf.setFillColor(color)
        self.pdf.drawString(x_mm * mm, self.to_pt(y_mm), text)

    def wrap(self, text: str, font: str, size: float, width_pt: float) -> List[str]:
        return simpleSplit(text, font, size, width_pt) or [""]

    def rule(self, y_mm: float) -> None:
        self.pdf.setStrokeColor(RULE_GREY)
        self.pdf.line(MARGIN * mm, self.to_pt(y_mm), self.page_width - MARGIN * mm, self.to_pt(y_mm))


class DiagnosticReportGenerator:
    """
    Generates the downloadable PDF for one analysis.

    Rendering is synchronous and keeps no state between calls.
    """

    def __init__(self, filename: str = REPORT_FILENAME, compress: bool = True):
        self.filename = filename
        self.compress = compress

    def generate(
        self,
        record: AnalysisRecord,
        image: Optional[ImageInput] = None,
    ) -> DiagnosticReport:
        """
        Render a report.

        Args:
            record: Validated, rule-corrected analysis.
            image: Optional scan as bytes, data: URI or base64. A bad image
                   only switches to the image-less layout.

        Returns:
            DiagnosticReport with the PDF bytes.

        Raises:
            ReportGenerationError: if reportlab fails for any other reason.
        """
        report_id = uuid.uuid4().hex[:8].upper()
        generated_at = datetime.now()

        try:
            buffer = io.BytesIO()
            pdf = canvas.Canvas(buffer, pagesize=A4, pageCompression=1 if self.compress else 0)
            pdf.setTitle(REPORT_TITLE)
            pdf.setAuthor("BoneScan AI")

            page = _PageWriter(pdf)
            self._draw_header(page, report_id, generated_at)

            embedded = self._draw_summary(page, record, load_image(image))

            page.rule(page.y)
            page.y += 10

            for title, body in self._sections(record):
                if not body.strip():
                    continue
                page.break_if_below(PAGE_BREAK_AT)
                self._draw_section(page, title, body)

            self._draw_disclaimer(page)

            pdf.showPage()
            pdf.save()
        except Exception as e:
            logger.error(f"Report generation failed: {e}", exc_info=True)
            raise ReportGenerationError(f"Report generation failed: {e}") from e

        logger.info(f"Diagnostic report {report_id} generated ({page.page_count} page(s))")
        return DiagnosticReport(
            report_id=report_id,
            generated_at=generated_at,
            filename=self.filename,
            pdf_bytes=buffer.getvalue(),
            page_count=page.page_count,
            image_embedded=embedded,
        )

    @staticmethod
    def _sections(record: AnalysisRecord):
        return (
            ("Clinical Findings", record.findings),
            ("Suggested Medication", record.medication),
            ("Recommended Specialist", record.doctor_type),
            ("Additional Notes", record.additional_notes),
        )

    def _draw_header(self, page: _PageWriter, report_id: str, generated_at: datetime) -> None:
        pdf = page.pdf
        pdf.setFillColor(BRAND_BLUE)
        pdf.rect(0, page.to_pt(HEADER_HEIGHT), page.page_width, HEADER_HEIGHT * mm, fill=1, stroke=0)

        page.text(MARGIN, 16, REPORT_TITLE, "Helvetica-Bold", 18, WHITE)
        page.text(
            MARGIN, 28,
            f"Report ID: {report_id}  |  Date: {_format_date(generated_at)}",
            "Helvetica", 9, WHITE,
        )

    def _draw_summary(
        self,
        page: _PageWriter,
        record: AnalysisRecord,
        image: Optional[ImageReader],
    ) -> bool:
        """Draw the diagnosis summary; returns whether the image was placed."""
        top = page.y

        if image is not None:
            try:
                page.pdf.drawImage(
                    image,
                    MARGIN * mm,
                    page.to_pt(top + IMAGE_SIZE),
                    width=IMAGE_SIZE * mm,
                    height=IMAGE_SIZE * mm,
                    preserveAspectRatio=True,
                    mask="auto",
                )
            except Exception as e:
                logger.warning(f"Scan image could not be embedded, using full-width layout: {e}")
                image = None

        if image is not None:
            x = MARGIN + SUMMARY_OFFSET
            column = page.content_width - SUMMARY_OFFSET * mm
            cursor = top + 8
            for line in page.wrap(record.condition, "Helvetica-Bold", 14, column):
                page.text(x, cursor, line, "Helvetica-Bold", 14, TITLE_TEXT)
                cursor += 6
            cursor += 4
            for line in (
                f"Severity: {record.severity.value}",
                f"Urgency: {record.urgency.value}",
                f"Region: {record.affected_region}",
            ):
                for part in page.wrap(line, "Helvetica", 10, column):
                    page.text(x, cursor, part, "Helvetica", 10, META_TEXT)
                    cursor += 8
            page.y = max(top + IMAGE_SIZE + 10, cursor + 2)
            return True

        cursor = top
        for line in page.wrap(record.condition, "Helvetica-Bold", 14, page.content_width):
            page.text(MARGIN, cursor, line, "Helvetica-Bold", 14, TITLE_TEXT)
            cursor += 6
        cursor += 4
        meta = (
            f"Severity: {record.severity.value}  |  Urgency: {record.urgency.value}  |  "
            f"Region: {record.affected_region}"
        )
        for line in page.wrap(meta, "Helvetica", 10, page.content_width):
            page.text(MARGIN, cursor, line, "Helvetica", 10, META_TEXT)
            cursor += BODY_LINE
        page.y = cursor + 9
        return False

    def _draw_section(self, page: _PageWriter, title: str, body: str) -> None:
        page.text(MARGIN, page.y, title.upper(), "Helvetica-Bold", 10, BRAND_BLUE)
        page.y += 6

        for line in page.wrap(body, "Helvetica", 10, page.content_width):
            if page.y > BODY_BOTTOM:
                page.new_page()
            page.text(MARGIN, page.y, line, "Helvetica", 10, BODY_TEXT)
            page.y += BODY_LINE
        page.y += 8

    def _draw_disclaimer(self, page: _PageWriter) -> None:
        page.y = max(page.y + 8, DISCLAIMER_MIN_Y)
        page.break_if_below(DISCLAIMER_BREAK_AT)

        page.rule(page.y)
        page.y += 6
        for line in page.wrap(DISCLAIMER, "Helvetica", 7, page.content_width):
            page.text(MARGIN, page.y, line, "Helvetica", 7, MUTED_TEXT)
            page.y += 3.5
