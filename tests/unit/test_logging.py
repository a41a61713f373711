"""
Unit tests for logging configuration.
"""

import logging

import pytest

from audiocd.utils.logging import (
    LogMode,
    log_disc_info,
    log_operation,
    log_performance,
    setup_logging,
)
from tests.fixtures import two_track_toc


@pytest.fixture
def package_logger():
    """Restore the package logger after each test."""
    logger = logging.getLogger("audiocd")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate


class TestSetupLogging:
    """Test log destinations."""

    def test_silent(self, package_logger):
        """Test SILENT installs only a null handler."""
        logger = setup_logging(LogMode.SILENT)

        assert logger is package_logger
        assert all(isinstance(h, logging.NullHandler) for h in logger.handlers)
        assert not logger.propagate

    def test_stderr(self, package_logger, capsys):
        setup_logging(LogMode.STDERR)
        log_operation("open", "/dev/sr0")

        captured = capsys.readouterr()
        assert "open: /dev/sr0" in captured.err

    def test_file(self, package_logger, tmp_path):
        """Test FILE mode writes system info and messages to the log file."""
        log_file = tmp_path / "logs" / "audiocd.log"

        setup_logging(LogMode.FILE, str(log_file))
        log_performance("read_sectors", 0.5, sectors=75)
        for handler in package_logger.handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "System Information" in text
        assert "Performance - read_sectors: 0.50s, sectors=75" in text

    def test_file_requires_path(self, package_logger):
        with pytest.raises(ValueError):
            setup_logging(LogMode.FILE)

    def test_reconfigure_replaces_handlers(self, package_logger, tmp_path):
        """Test calling setup_logging again does not stack handlers."""
        setup_logging(LogMode.FILE, str(tmp_path / "a.log"))
        setup_logging(LogMode.STDERR)

        assert len(package_logger.handlers) == 1
        assert not isinstance(package_logger.handlers[0], logging.FileHandler)


class TestLogDiscInfo:
    """Test disc summary logging."""

    def test_disc_summary(self, package_logger, caplog):
        package_logger.propagate = True
        with caplog.at_level(logging.DEBUG, logger="audiocd"):
            log_disc_info("/dev/sr0", "MOCK CD-ROM 1.0", two_track_toc())

        assert "Drive: /dev/sr0 (MOCK CD-ROM 1.0)" in caplog.text
        assert "Disc: 2 tracks, 250 sectors (00:03:25)" in caplog.text


class TestSettingsLogging:
    """Test logging configured from stream settings."""

    def test_apply_logging(self, package_logger, tmp_path):
        from audiocd.core.settings import StreamSettings

        log_file = tmp_path / "audiocd.log"
        StreamSettings(log_mode=LogMode.FILE, log_file=str(log_file)).apply_logging()

        assert [type(h) for h in package_logger.handlers] == [logging.FileHandler]
        assert log_file.exists()
