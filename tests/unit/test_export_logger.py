"""
Unit tests for cv_export/common/logger.py
"""

import json
import logging

import pytest

from cv_export.common import logger as logger_module
from cv_export.common.logger import ExportLogger, get_logger, set_global_debug_mode, setup_logging


@pytest.fixture(autouse=True)
def reset_debug_mode():
    original = logger_module.is_debug_mode()
    yield
    set_global_debug_mode(original)


class TestExportLogger:
    """Tests for message prefixes and stage tagging."""

    def test_prefix_with_export_id_and_stage(self, caplog):
        """Test that messages carry the short export id and stage."""
        log = get_logger("test.export", export_id="0123456789abcdef", stage="measure")

        with caplog.at_level(logging.INFO, logger="test.export"):
            log.info("Measuring 5 blocks")

        assert "[export:01234567] [measure] Measuring 5 blocks" in caplog.text

    def test_no_prefix_without_context(self, caplog):
        """Test that plain messages are unchanged."""
        log = ExportLogger("test.plain")

        with caplog.at_level(logging.INFO, logger="test.plain"):
            log.info("hello")

        assert caplog.records[-1].getMessage() == "hello"

    def test_with_stage_keeps_export_id(self, caplog):
        """Test that with_stage only swaps the stage tag."""
        log = get_logger("test.stage", export_id="abcdef0123456789", stage="pdf").with_stage("paginate")

        with caplog.at_level(logging.WARNING, logger="test.stage"):
            log.warning("overflow")

        assert "[export:abcdef01] [paginate] overflow" in caplog.text

    def test_debug_mode_lowers_level(self):
        """Test that debug mode switches the logger to DEBUG."""
        set_global_debug_mode(True)

        log = get_logger("test.debug")

        assert log.level == logging.DEBUG


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_json_lines_survive_quotes_and_newlines(self, restore_root_logger, capsys):
        """Test that every emitted line parses as JSON, whatever the message holds."""
        setup_logging("INFO", format="json")

        logging.getLogger("test.json").warning('Measuring header[0] failed: "boom"')
        logging.getLogger("test.json").error("Rasterizer unavailable:\nno browser")

        lines = capsys.readouterr().out.strip().splitlines()
        entries = [json.loads(line) for line in lines]
        assert len(entries) == 2
        assert entries[0]["message"] == 'Measuring header[0] failed: "boom"'
        assert entries[0]["level"] == "WARNING"
        assert entries[0]["name"] == "test.json"
        assert entries[1]["message"] == "Rasterizer unavailable:\nno browser"

    def test_json_includes_traceback(self, restore_root_logger, capsys):
        """Test that exception info is kept inside the JSON object."""
        setup_logging("INFO", format="json")

        try:
            raise ValueError("bad image")
        except ValueError:
            logging.getLogger("test.json").exception("PDF render failed")

        entry = json.loads(capsys.readouterr().out.strip())
        assert "ValueError: bad image" in entry["exception"]

    def test_level_applied(self, restore_root_logger):
        setup_logging("WARNING", format="simple")

        assert restore_root_logger.level == logging.WARNING
        assert len(restore_root_logger.handlers) == 1

    def test_debug_flag(self, restore_root_logger):
        """Test that debug forces DEBUG and reaches new export loggers."""
        setup_logging("WARNING", debug=True)

        assert restore_root_logger.level == logging.DEBUG
        assert logger_module.is_debug_mode() is True
        assert get_logger("test.debug.flag").level == logging.DEBUG
