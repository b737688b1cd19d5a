"""
Tests for logging utilities.
"""

import logging

from gradelab.utils.logging import ProcessingStats, StructuredLogger, setup_logging_from_config


class TestStructuredLogger:
    """Test structured log formatting."""

    def test_metadata_suffix(self, caplog):
        """Test bound metadata is appended as JSON."""
        log = StructuredLogger("gradelab.test").bind(format="CUBE")
        with caplog.at_level(logging.INFO, logger="gradelab.test"):
            log.info("LUT export complete", samples=4913)

        assert caplog.records[-1].getMessage() == 'LUT export complete | {"format": "CUBE", "samples": 4913}'

    def test_plain_message(self, caplog):
        """Test messages without metadata are unchanged."""
        with caplog.at_level(logging.WARNING, logger="gradelab.test"):
            StructuredLogger("gradelab.test").warning("plain")
        assert caplog.records[-1].getMessage() == "plain"


class TestProcessingStats:
    """Test batch statistics."""

    def test_summary(self):
        """Test counts and progress."""
        stats = ProcessingStats()
        stats.set_total(4)
        stats.add_result(True, 0.1)
        stats.add_result(False, 0.3)
        stats.add_error(1, "bad buffer")

        summary = stats.get_summary()
        assert summary['processed_images'] == 2
        assert summary['failed_images'] == 1
        assert summary['errors'] == 1
        assert stats.get_progress_percentage() == 50
        assert abs(stats.get_average_processing_time() - 0.2) < 1e-9


class TestSetup:
    """Test console logging setup."""

    def test_setup_from_config(self):
        """Test level and handler installation from config."""
        root = logging.getLogger()
        previous = root.level
        handler = setup_logging_from_config({'logging': {'level': 'DEBUG', 'color': False}})
        try:
            assert root.level == logging.DEBUG
            assert handler in root.handlers
        finally:
            root.removeHandler(handler)
            root.setLevel(previous)
