"""
Tests for logging configuration module.
"""

import logging
import sys

from langshim.logging_config import (
    LOGGER_NAME,
    setup_logging,
    get_logger,
    ColoredFormatter,
    debug,
)


def _record(level=logging.INFO, msg="Test message"):
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )


def _console_handlers(logger):
    return [
        h for h in logger.handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]


class TestSetupLogging:
    """Test logging setup and configuration."""

    def test_setup_logging_default(self):
        """Test default logging setup."""
        logger = setup_logging()
        assert logger.name == LOGGER_NAME == "langshim"
        assert logger.level == logging.WARNING

    def test_setup_logging_verbose(self):
        """Test verbose logging enables DEBUG level."""
        logger = setup_logging(verbose=True)
        assert logger.level == logging.DEBUG

    def test_setup_logging_quiet(self):
        """Test quiet mode suppresses console output."""
        logger = setup_logging(quiet=True)
        assert logger.level == logging.ERROR
        assert _console_handlers(logger) == []

    def test_console_on_stderr(self):
        """Test console output never goes to stdout."""
        logger = setup_logging()
        handlers = _console_handlers(logger)
        assert len(handlers) == 1
        assert handlers[0].stream is sys.stderr

    def test_setup_logging_with_file(self, tmp_path):
        """Test logging to file."""
        log_file = tmp_path / "test.log"
        logger = setup_logging(log_file=str(log_file))

        file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1

        logger.warning("Test message")
        file_handlers[0].flush()
        assert "Test message" in log_file.read_text()

    def test_setup_logging_creates_log_directory(self, tmp_path):
        """Test that log directory is created if it doesn't exist."""
        log_file = tmp_path / "subdir" / "test.log"
        setup_logging(log_file=str(log_file))
        assert log_file.parent.is_dir()

    def test_setup_logging_custom_level(self):
        """Test custom log level, case-insensitive."""
        logger = setup_logging(level="info")
        assert logger.level == logging.INFO

    def test_setup_logging_replaces_handlers(self):
        """Test repeated setup does not stack handlers."""
        setup_logging()
        logger = setup_logging()
        assert len(_console_handlers(logger)) == 1


class TestGetLogger:
    """Test logger retrieval."""

    def test_get_logger_returns_instance(self):
        """Test get_logger returns logger instance."""
        assert isinstance(get_logger(), logging.Logger)

    def test_get_logger_singleton(self):
        """Test get_logger returns same instance."""
        assert get_logger() is get_logger()


class TestColoredFormatter:
    """Test colored log formatter."""

    def test_colored_formatter_with_colors(self):
        """Test formatter with colors enabled."""
        formatter = ColoredFormatter("%(levelname_colored)s %(message)s", use_colors=True)
        formatted = formatter.format(_record())
        assert "Test message" in formatted
        assert "\033[" in formatted

    def test_colored_formatter_without_colors(self):
        """Test formatter with colors disabled."""
        formatter = ColoredFormatter("%(levelname_colored)s %(message)s", use_colors=False)
        formatted = formatter.format(_record())
        assert formatted == "INFO Test message"

    def test_colored_formatter_all_levels(self):
        """Test formatter with all log levels."""
        formatter = ColoredFormatter("%(levelname_colored)s", use_colors=True)
        for level in [logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL]:
            assert formatter.format(_record(level, "Test"))


class TestDebugHelpers:
    """Test verbose-gated helpers."""

    def test_debug_with_verbose(self, caplog):
        """Test debug function with verbose enabled."""
        setup_logging(level="DEBUG", propagate=True)
        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            debug("Debug message", verbose=True)
            assert "Debug message" in caplog.text

    def test_debug_without_verbose(self, caplog):
        """Test debug function with verbose disabled."""
        setup_logging(level="DEBUG", propagate=True)
        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            debug("Debug message", verbose=False)
            assert "Debug message" not in caplog.text

    def test_vlog_integration(self, caplog):
        """Test vlog uses the shared logger."""
        from langshim.common import vlog

        setup_logging(level="INFO", propagate=True)
        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            vlog("Test vlog message", verbose=True)
            assert "Test vlog message" in caplog.text

    def test_vlog_respects_verbose_flag(self, caplog, monkeypatch):
        """Test vlog is silent unless verbose or LANGSHIM_DEBUG=1."""
        from langshim.common import vlog

        monkeypatch.delenv("LANGSHIM_DEBUG", raising=False)
        setup_logging(level="INFO", propagate=True)
        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            vlog("Should not appear", verbose=False)
            assert "Should not appear" not in caplog.text

            monkeypatch.setenv("LANGSHIM_DEBUG", "1")
            vlog("Debug env message", verbose=False)
            assert "Debug env message" in caplog.text
