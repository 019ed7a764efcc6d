"""
Unit Tests for Diagnostic Report Generation

Checks the rendered PDF: section order, empty-section skipping, image
handling and pagination. Reports are rendered uncompressed so drawn text
can be found in the raw bytes.
"""
import base64
import re

import pytest

from bonescan.core.reports import DiagnosticReportGenerator, DiagnosticReport, REPORT_FILENAME, load_image
from bonescan.models import AnalysisRecord
from bonescan.utils import ReportGenerationError


@pytest.fixture
def generator() -> DiagnosticReportGenerator:
    return DiagnosticReportGenerator(compress=False)


@pytest.fixture
def record(fracture_payload) -> AnalysisRecord:
    fracture_payload["doctorType"] = "Orthopedic Surgeon"
    return AnalysisRecord.model_validate(fracture_payload)


class TestReportContent:
    """Tests for what the report contains."""

    def test_is_pdf(self, generator, record):
        report = generator.generate(record)

        assert isinstance(report, DiagnosticReport)
        assert report.pdf_bytes.startswith(b"%PDF")
        assert report.filename == REPORT_FILENAME == "BoneScan-AI-Report.pdf"
        assert len(report.report_id) == 8
        assert report.report_id == report.report_id.upper()

    def test_sections_in_order(self, generator, record):
        pdf = generator.generate(record).pdf_bytes
        positions = [
            pdf.index(label)
            for label in (
                b"CLINICAL FINDINGS",
                b"SUGGESTED MEDICATION",
                b"RECOMMENDED SPECIALIST",
                b"ADDITIONAL NOTES",
            )
        ]
        assert positions == sorted(positions)

    def test_summary_fields_rendered(self, generator, record):
        pdf = generator.generate(record).pdf_bytes
        assert b"Distal Radius Fracture" in pdf
        assert b"Severity: Moderate" in pdf
        assert b"Urgency: Within 24 hours" in pdf
        assert b"Orthopedic Surgeon" in pdf
        assert b"DISCLAIMER" in pdf

    def test_header_carries_report_id(self, generator, record):
        report = generator.generate(record)
        assert f"Report ID: {report.report_id}".encode() in report.pdf_bytes

    def test_empty_section_skipped(self, generator, record):
        record = record.model_copy(update={"additional_notes": "", "medication": "  "})
        pdf = generator.generate(record).pdf_bytes
        assert b"ADDITIONAL NOTES" not in pdf
        assert b"SUGGESTED MEDICATION" not in pdf
        assert b"CLINICAL FINDINGS" in pdf

    def test_report_ids_differ(self, generator, record):
        assert generator.generate(record).report_id != generator.generate(record).report_id

    def test_to_dict(self, generator, record):
        summary = generator.generate(record).to_dict()
        assert summary["filename"] == REPORT_FILENAME
        assert summary["size_bytes"] > 0
        assert summary["image_embedded"] is False


class TestReportImage:
    """The scan image is optional and never fatal."""

    def test_no_image_uses_full_width_layout(self, generator, record):
        report = generator.generate(record, None)
        assert report.image_embedded is False
        assert re.search(rb"Severity: Moderate\s+\|\s+Urgency: Within 24 hours", report.pdf_bytes)

    def test_png_bytes_embedded(self, generator, record, png_bytes):
        report = generator.generate(record, png_bytes)
        assert report.image_embedded is True
        assert b"/Subtype /Image" in report.pdf_bytes

    def test_data_uri_embedded(self, generator, record, png_bytes):
        uri = "data:image/png;base64," + base64.b64encode(png_bytes).decode()
        assert generator.generate(record, uri).image_embedded is True

    @pytest.mark.parametrize("bad_image", [b"not an image", "data:image/png;base64,@@@", "%%%"])
    def test_malformed_image_still_renders(self, generator, record, bad_image):
        report = generator.generate(record, bad_image)
        assert report.pdf_bytes.startswith(b"%PDF")
        assert report.image_embedded is False

    def test_load_image(self, png_bytes):
        assert load_image(png_bytes) is not None
        assert load_image(base64.b64encode(png_bytes).decode()) is not None
        assert load_image(b"") is None
        assert load_image(None) is None


class TestReportPagination:
    """Long content flows onto further pages."""

    def test_short_report_single_page(self, generator, record):
        assert generator.generate(record).page_count == 1

    def test_long_findings_paginate(self, generator, record):
        long_text = "Cortical irregularity noted along the distal metaphysis. " * 150
        report = generator.generate(record.model_copy(update={"findings": long_text}))
        assert report.page_count > 1

    def test_compressed_output_still_valid(self, record):
        report = DiagnosticReportGenerator().generate(record)
        assert report.pdf_bytes.startswith(b"%PDF")


class TestReportErrors:

    def test_render_failure_raises(self, generator, record, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("canvas exploded")

        monkeypatch.setattr(DiagnosticReportGenerator, "_draw_header", boom)
        with pytest.raises(ReportGenerationError) as exc_info:
            generator.generate(record)
        assert exc_info.value.code == "REPORT_ERROR"
