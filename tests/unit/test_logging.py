"""
Unit Tests for Structured Logging
"""
import logging

from bonescan.utils import setup_logging
from bonescan.utils.logging import StructuredFormatter


def make_record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("bonescan.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:

    def test_plain_line(self):
        line = StructuredFormatter(use_color=False).format(make_record("hello"))
        assert "INFO" in line
        assert "[bonescan.test] hello" in line
        assert "\033[" not in line

    def test_context_rendered(self):
        record = make_record("Specialist corrected", context={"rule": "FX-SPINE", "policy": "fracture_only", "skip": None})
        line = StructuredFormatter(use_color=False).format(record)
        assert line.endswith("Specialist corrected | rule=FX-SPINE policy=fracture_only")

    def test_color(self):
        line = StructuredFormatter(use_color=True).format(make_record("hello"))
        assert line.startswith("\033[32m")
        assert line.endswith("\033[0m")


class TestSetupLogging:

    def test_repeat_calls_do_not_stack_handlers(self, tmp_path):
        root = logging.getLogger()
        before = len(root.handlers)
        level = root.level
        try:
            setup_logging("DEBUG", str(tmp_path / "bonescan.log"))
            setup_logging("DEBUG", str(tmp_path / "bonescan.log"))
            assert len(root.handlers) == before + 2
            assert root.level == logging.DEBUG
        finally:
            for handler in list(root.handlers):
                if getattr(handler, "_bonescan_handler", False):
                    root.removeHandler(handler)
                    handler.close()
            root.setLevel(level)

    def test_unknown_level_falls_back_to_info(self):
        root = logging.getLogger()
        level = root.level
        try:
            setup_logging("chatty")
            assert root.level == logging.INFO
        finally:
            for handler in list(root.handlers):
                if getattr(handler, "_bonescan_handler", False):
                    root.removeHandler(handler)
            root.setLevel(level)
