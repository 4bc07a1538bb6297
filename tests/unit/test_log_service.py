"""Unit tests for logging setup."""

import logging

import pytest

from resume_optimizer.services.log_service import (
    WizardLogFileHandler,
    configure_logging,
    resolve_level,
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestResolveLevel:
    """Tests for resolve_level."""

    def test_names_and_ints(self):
        """Names are case-insensitive; ints pass through."""
        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level("WARNING") == logging.WARNING
        assert resolve_level(logging.ERROR) == logging.ERROR

    def test_unknown_name(self):
        """Unknown level names raise error."""
        with pytest.raises(ValueError, match="Unknown log level"):
            resolve_level("chatty")


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_file_and_console(self, tmp_path):
        """File and console handlers are installed."""
        root = configure_logging(log_dir=str(tmp_path / "logs"), level="debug")

        assert root.level == logging.DEBUG
        file_handlers = [h for h in root.handlers if isinstance(h, WizardLogFileHandler)]
        assert len(file_handlers) == 1
        assert (tmp_path / "logs" / "wizard.log").exists()
        assert len(root.handlers) == 2

    def test_console_only(self):
        """No log directory means no file handler."""
        root = configure_logging(log_dir=None, console=True)

        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0], WizardLogFileHandler)

    def test_size_rollover(self, tmp_path):
        """A file over the size limit rolls over."""
        handler = WizardLogFileHandler(
            str(tmp_path / "wizard.log"), max_bytes=10, when="midnight", encoding="utf-8"
        )
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "x" * 50, None, None)
        handler.emit(record)

        assert handler.shouldRollover(record) == 1
        handler.close()

    def test_no_rollover_below_limit(self, tmp_path):
        """A record that still fits does not roll the file over."""
        handler = WizardLogFileHandler(
            str(tmp_path / "wizard.log"), max_bytes=1024, when="midnight", encoding="utf-8"
        )
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "short", None, None)
        handler.emit(record)

        assert handler.shouldRollover(record) == 0
        handler.close()
