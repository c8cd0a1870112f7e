"""
Unit Tests for Centralized Logging.

Tests the logging configuration, handler wiring, and source handling.
"""

import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import MagicMock, patch

import pytest
import structlog
from pydantic import ValidationError

from notekeeper.core import logging as logging_module

TEST_CONFIG = {
    "level": "DEBUG",
    "format": "json",
    "handlers": {
        "console": {"enabled": True},
        "file": {
            "enabled": False,
            "path": "logs/system.jsonl",
            "max_bytes": 1024,
            "backup_count": 2,
        },
    },
}


@pytest.fixture(autouse=True)
def _restore_logging():
    """setup_logging mutates process-wide state; put it back afterwards."""
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    logging_module._logging_config = None
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in saved_handlers:
            handler.close()
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)
    logging_module._logging_config = None
    structlog.reset_defaults()


class TestValidSources:
    """Tests for VALID_SOURCES constant."""

    def test_valid_sources_contains_expected_values(self):
        """Should contain all recognized log source values."""
        expected = frozenset({"cli", "shell", "store", "tasks", "internal", "unknown"})
        assert logging_module.VALID_SOURCES == expected

    def test_valid_sources_is_frozenset(self):
        assert isinstance(logging_module.VALID_SOURCES, frozenset)


class TestLoggingConfigLoading:
    """Tests for logging configuration loading from YAML."""

    def test_load_logging_config_reads_yaml_file(self):
        """Should validate logging.yaml into a schema."""
        with patch("notekeeper.core.logging.load_yaml_config", return_value=TEST_CONFIG):
            config = logging_module._load_logging_config()

        assert config.level == "DEBUG"
        assert config.handlers.file.max_bytes == 1024

    def test_load_logging_config_is_cached(self):
        """Should read and validate the file only once."""
        with patch(
            "notekeeper.core.logging.load_yaml_config", return_value=TEST_CONFIG,
        ) as mock_load:
            logging_module._load_logging_config()
            logging_module._load_logging_config()

        mock_load.assert_called_once_with("logging.yaml")

    def test_unknown_key_is_rejected(self):
        """Should reject keys the schema does not know."""
        broken = {**TEST_CONFIG, "colour": True}
        with patch("notekeeper.core.logging.load_yaml_config", return_value=broken):
            with pytest.raises(ValidationError):
                logging_module._load_logging_config()


class TestSetupLogging:
    """Tests for handler configuration."""

    def test_console_handler_writes_to_stderr(self):
        """Should attach a single console handler at the configured level."""
        with patch("notekeeper.core.logging.load_yaml_config", return_value=TEST_CONFIG):
            logging_module.setup_logging()

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_parameters_override_config(self):
        """Should let arguments win over the YAML values."""
        with patch("notekeeper.core.logging.load_yaml_config", return_value=TEST_CONFIG):
            logging_module.setup_logging(level="warning", enable_console=False)

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert root.handlers == []

    def test_file_handler_rotates(self, tmp_path):
        """Should rotate the JSONL file with the configured limits."""
        log_path = tmp_path / "logs" / "system.jsonl"
        with patch("notekeeper.core.logging.load_yaml_config", return_value=TEST_CONFIG), \
             patch("notekeeper.core.logging.find_project_root", return_value=tmp_path):
            logging_module.setup_logging(enable_console=False, enable_file_logging=True)

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], RotatingFileHandler)
        assert handlers[0].maxBytes == 1024
        assert handlers[0].backupCount == 2
        assert log_path.parent.is_dir()

    def test_repeated_setup_does_not_stack_handlers(self):
        """Should replace handlers on a second call."""
        with patch("notekeeper.core.logging.load_yaml_config", return_value=TEST_CONFIG):
            logging_module.setup_logging()
            logging_module.setup_logging()

        assert len(logging.getLogger().handlers) == 1

    def test_invalid_level_raises(self):
        """Should reject an unknown level name."""
        with patch("notekeeper.core.logging.load_yaml_config", return_value=TEST_CONFIG):
            with pytest.raises(AttributeError):
                logging_module.setup_logging(level="LOUD")

    def test_quiets_database_loggers(self):
        """Should keep SQL engine chatter out of the log."""
        with patch("notekeeper.core.logging.load_yaml_config", return_value=TEST_CONFIG):
            logging_module.setup_logging()

        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("aiosqlite").level == logging.WARNING


class TestLogWithSource:
    def test_passes_source_to_level_method(self):
        """Should call the level method with the source field."""
        logger = MagicMock()

        logging_module.log_with_source(logger, "tasks", "INFO", "Done", command="generate")

        logger.info.assert_called_once_with("Done", source="tasks", command="generate")

    def test_unknown_level_raises(self):
        logger = MagicMock(spec=["info"])
        with pytest.raises(AttributeError):
            logging_module.log_with_source(logger, "cli", "loud", "x")
