"""Tests for heartrate_osc.log module."""

import logging

import pytest

from heartrate_osc.log import APP_LOGGER, DATE_FORMAT, LOG_FORMAT, VALID_LEVELS, setup_logging, show_status


class TestSetupLogging:
    """Tests for setup_logging function."""

    @pytest.fixture(autouse=True)
    def reset_logging(self):
        """Reset logging after each test."""
        yield
        logging.getLogger().handlers.clear()
        app = logging.getLogger(APP_LOGGER)
        app.handlers.clear()
        app.setLevel(logging.NOTSET)

    def test_valid_levels(self):
        """VALID_LEVELS contains exactly the standard levels."""
        assert VALID_LEVELS == {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

    def test_default_level_is_info(self):
        """Default log level is INFO."""
        setup_logging()
        assert logging.getLogger(APP_LOGGER).level == logging.INFO

    @pytest.mark.parametrize("level", ["DEBUG", "WARNING", "ERROR", "CRITICAL", "debug", "WaRnInG"])
    def test_level_names(self, level):
        """Level names are accepted case-insensitively."""
        setup_logging(level)
        assert logging.getLogger(APP_LOGGER).level == getattr(logging, level.upper())

    def test_invalid_level_logs_warning(self, capsys):
        """Invalid level defaults to INFO and warns on stderr."""
        setup_logging("BADLEVEL")

        assert logging.getLogger(APP_LOGGER).level == logging.INFO
        captured = capsys.readouterr()
        assert "Unknown log level" in captured.err
        assert "BADLEVEL" in captured.err

    def test_root_logger_at_warning(self):
        """Root logger stays at WARNING to hide bleak noise."""
        setup_logging("DEBUG")
        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger("heartrate_osc.supervisor").isEnabledFor(logging.DEBUG)

    def test_log_format(self):
        """Format constants carry the expected fields."""
        assert "%(levelname)s" in LOG_FORMAT
        assert "%(name)s" in LOG_FORMAT
        assert DATE_FORMAT == "%H:%M:%S"


class TestShowStatus:
    """Tests for show_status function."""

    def test_rewrites_line(self, capsys):
        """Status is written to stdout with a carriage return."""
        show_status("HR: 72")
        out = capsys.readouterr().out
        assert out.startswith("\r")
        assert "HR: 72" in out
        assert "\n" not in out
