"""Tests for logging configuration."""

import logging
import tempfile
from pathlib import Path

from rentarium.services.logging import get_log_level, setup_logging


class TestSetupLogging:
    """Test ledger logging configuration."""

    def setup_method(self):
        """Save original handlers before each test."""
        self.root_logger = logging.getLogger()
        self.original_handlers = self.root_logger.handlers.copy()
        self.original_level = self.root_logger.level

    def teardown_method(self):
        """Restore original handlers after each test."""
        for handler in self.root_logger.handlers[:]:
            handler.close()
            self.root_logger.removeHandler(handler)
        for handler in self.original_handlers:
            self.root_logger.addHandler(handler)
        self.root_logger.setLevel(self.original_level)

    def test_creates_log_directory(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = Path(temp_dir) / "logs" / "rentarium.log"
            assert not log_file.parent.exists()

            setup_logging(str(log_file))

            assert log_file.parent.exists()

    def test_creates_stdout_and_file_handlers(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            setup_logging(str(Path(temp_dir) / "rentarium.log"))

            assert len(self.root_logger.handlers) == 2
            assert any(isinstance(h, logging.FileHandler) for h in self.root_logger.handlers)

    def test_returns_package_logger(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            logger = setup_logging(str(Path(temp_dir) / "rentarium.log"))
            assert logger.name == "rentarium"

    def test_writes_to_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = Path(temp_dir) / "rentarium.log"
            logger = setup_logging(str(log_file))

            logger.warning("rent ledger ready")
            for handler in self.root_logger.handlers:
                handler.flush()

            assert "rent ledger ready" in log_file.read_text()

    def test_level_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert get_log_level() == logging.DEBUG

        monkeypatch.setenv("LOG_LEVEL", "bogus")
        assert get_log_level() == logging.INFO
