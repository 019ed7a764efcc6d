"""
Unit Tests for the Vision Model Response Parser

Fence extraction and all-or-nothing JSON decoding.
"""
import json

import pytest

from bonescan.core.parsing import extract_payload, parse_model_response
from bonescan.utils import ParseError


class TestExtractPayload:
    """Tests for code-fence extraction."""

    def test_json_fence(self):
        """Interior of a ```json fence is returned."""
        assert extract_payload('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_untagged_fence(self):
        """A fence without a language tag works too."""
        assert extract_payload('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_first_fence_wins(self):
        """Only the first fenced block is used."""
        text = 'intro\n```json\n{"a": 1}\n```\nand\n```json\n{"b": 2}\n```'
        assert extract_payload(text) == '{"a": 1}'

    def test_no_fence_returns_trimmed_text(self):
        """Without a fence the whole reply is used, trimmed."""
        assert extract_payload('   {"a": 1}\n\n') == '{"a": 1}'


class TestParseModelResponse:
    """Tests for parse_model_response."""

    def test_bare_json(self, fracture_payload):
        """Unfenced JSON decodes directly."""
        assert parse_model_response(json.dumps(fracture_payload)) == fracture_payload

    def test_fenced_json_with_prose(self, fracture_reply, fracture_payload):
        """Prose around a fenced block is ignored."""
        assert parse_model_response(fracture_reply) == fracture_payload

    def test_fenced_equals_plain_decode(self):
        """A fenced block decodes to exactly what json.loads gives for its interior."""
        block = '{"detected": false, "nested": {"x": [1, 2, 3]}, "text": "line\\nbreak"}'
        assert parse_model_response(f"```json\n{block}\n```") == json.loads(block)

    def test_malformed_json(self):
        """Broken JSON raises ParseError carrying the raw reply."""
        raw = '```json\n{"detected": true, "condition": \n```'
        with pytest.raises(ParseError) as exc_info:
            parse_model_response(raw)
        assert exc_info.value.message == "Failed to parse analysis"
        assert exc_info.value.raw_text == raw
        assert exc_info.value.code == "PARSE_ERROR"

    def test_prose_only_reply(self):
        """A refusal with no JSON is a parse failure."""
        with pytest.raises(ParseError):
            parse_model_response("I cannot analyze this image.")

    @pytest.mark.parametrize("text", ["", "   \n", None, "```json\n```"])
    def test_empty_reply(self, text):
        """Empty replies are rejected."""
        with pytest.raises(ParseError) as exc_info:
            parse_model_response(text)
        assert exc_info.value.message == "No analysis returned"

    @pytest.mark.parametrize("text", ["[1, 2]", '"just a string"', "42", "null"])
    def test_non_object_json(self, text):
        """Valid JSON that is not an object is still a parse failure."""
        with pytest.raises(ParseError):
            parse_model_response(text)
