"""
Unit Tests for the Analysis Service

End-to-end pipeline over a fake vision model: input checks, parse,
validate, rules, and error propagation.
"""
import base64
import json

import pytest

from bonescan.core.clinical import PolicyMode, NO_SPECIALIST_NEEDED, GENERAL_PHYSICIAN_FALLBACK
from bonescan.models import Severity
from bonescan.services import AnalysisService, decode_base64_image
from bonescan.utils import (
    InputError,
    ParseError,
    UpstreamQuotaError,
    UpstreamTransientError,
    ValidationError,
)


class TestDecodeBase64Image:

    def test_plain_base64(self):
        assert decode_base64_image(base64.b64encode(b"xray").decode()) == b"xray"

    def test_data_uri(self):
        assert decode_base64_image("data:image/png;base64," + base64.b64encode(b"xray").decode()) == b"xray"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing(self, value):
        with pytest.raises(InputError) as exc_info:
            decode_base64_image(value)
        assert exc_info.value.message == "No image provided"

    @pytest.mark.parametrize("value", ["data:image/png;base64", "data:image/png;base64,", "data:image/png;base64,   "])
    def test_data_uri_without_payload(self, value):
        with pytest.raises(InputError) as exc_info:
            decode_base64_image(value)
        assert exc_info.value.message == "No image provided"

    def test_invalid(self):
        with pytest.raises(InputError) as exc_info:
            decode_base64_image("this is not base64!")
        assert exc_info.value.http_status == 400


class TestInputChecks:

    def test_missing_image(self, fake_model_factory):
        model = fake_model_factory("{}")
        with pytest.raises(InputError):
            AnalysisService(model).check_input(b"", "image/png")

    def test_non_image_mime(self, fake_model_factory):
        with pytest.raises(InputError) as exc_info:
            AnalysisService(fake_model_factory("{}")).check_input(b"data", "application/pdf")
        assert "Unsupported file type" in exc_info.value.message

    def test_default_mime(self, fake_model_factory):
        assert AnalysisService(fake_model_factory("{}")).check_input(b"data", None) == "image/png"

    def test_mime_normalized(self, fake_model_factory):
        assert AnalysisService(fake_model_factory("{}")).check_input(b"data", " Image/JPEG ") == "image/jpeg"

    async def test_model_not_called_on_bad_input(self, fake_model_factory):
        model = fake_model_factory("{}")
        with pytest.raises(InputError):
            await AnalysisService(model).analyze(None, "image/png")
        assert model.calls == []


class TestAnalyze:
    """Full pipeline."""

    async def test_fracture_corrected(self, fake_model_factory, fracture_reply):
        model = fake_model_factory(fracture_reply)
        record = await AnalysisService(model).analyze(b"xray", "image/jpeg")

        assert record.detected is True
        assert record.condition == "Distal Radius Fracture"
        assert record.doctor_type == "Orthopedic Surgeon"
        assert model.calls == [{"image": b"xray", "mime_type": "image/jpeg"}]

    async def test_out_of_scope_filtered(self, fake_model_factory, osteoarthritis_payload):
        model = fake_model_factory(json.dumps(osteoarthritis_payload))
        record = await AnalysisService(model).analyze(b"xray", "image/png")

        assert record.detected is False
        assert record.severity == Severity.NONE
        assert record.doctor_type == GENERAL_PHYSICIAN_FALLBACK

    async def test_general_policy_keeps_disease(self, fake_model_factory, osteoarthritis_payload):
        model = fake_model_factory(json.dumps(osteoarthritis_payload))
        record = await AnalysisService(model, policy=PolicyMode.GENERAL).analyze(b"xray", "image/png")
        assert record.detected is True

    async def test_clean_scan(self, fake_model_factory, no_finding_payload):
        model = fake_model_factory(json.dumps(no_finding_payload))
        record = await AnalysisService(model).analyze(b"xray", "image/png")
        assert record.doctor_type == NO_SPECIALIST_NEEDED

    async def test_parse_error_propagates(self, fake_model_factory):
        model = fake_model_factory("Sorry, I can't help with that.")
        with pytest.raises(ParseError):
            await AnalysisService(model).analyze(b"xray", "image/png")

    async def test_validation_error_propagates(self, fake_model_factory, fracture_payload):
        del fracture_payload["severity"]
        model = fake_model_factory(json.dumps(fracture_payload))
        with pytest.raises(ValidationError) as exc_info:
            await AnalysisService(model).analyze(b"xray", "image/png")
        assert exc_info.value.field == "severity"

    @pytest.mark.parametrize("error", [UpstreamTransientError(retry_after=3), UpstreamQuotaError()])
    async def test_upstream_errors_propagate(self, failing_model_factory, error):
        with pytest.raises(type(error)):
            await AnalysisService(failing_model_factory(error)).analyze(b"xray", "image/png")

    def test_process_reply(self, fake_model_factory, fracture_reply):
        record = AnalysisService(fake_model_factory("")).process_reply(fracture_reply)
        assert record.doctor_type == "Orthopedic Surgeon"

    async def test_render_report(self, fake_model_factory, fracture_reply, png_bytes):
        service = AnalysisService(fake_model_factory(fracture_reply))
        record = await service.analyze(png_bytes, "image/png")
        report = service.render_report(record, png_bytes)
        assert report.pdf_bytes.startswith(b"%PDF")
        assert report.image_embedded is True
