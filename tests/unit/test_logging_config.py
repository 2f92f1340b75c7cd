"""
Unit tests for src/utils/logging

Tests JSON formatting, console formatting, handler setup and
environment-based configuration.
"""

import json
import logging
import os
import sys
from unittest.mock import patch

from utils.logging import (
    ConsoleFormatter,
    JSONFormatter,
    configure_from_env,
    get_logger,
    setup_logging,
)


def make_record(msg="Test message", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="cdc_flatten.transform",
        level=level,
        pathname="/path/to/transform.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Test JSONFormatter class"""

    def test_init_with_defaults(self):
        """Test initialization with default parameters"""
        # Arrange & Act
        formatter = JSONFormatter()

        # Assert
        assert formatter.include_timestamp is True
        assert formatter.include_hostname is True
        assert formatter.app_name == "cdc-flatten"
        assert formatter.hostname is not None

    def test_init_without_hostname(self):
        """Test hostname lookup is skipped when disabled"""
        formatter = JSONFormatter(include_hostname=False, app_name="test-app")

        assert formatter.hostname is None
        assert formatter.app_name == "test-app"

    def test_format_basic_log_record(self):
        """Test formatting a basic log record"""
        # Arrange
        formatter = JSONFormatter()

        # Act
        data = json.loads(formatter.format(make_record()))

        # Assert
        assert data["level"] == "INFO"
        assert data["logger"] == "cdc_flatten.transform"
        assert data["message"] == "Test message"
        assert data["app"] == "cdc-flatten"
        assert "timestamp" in data
        assert "hostname" in data
        assert data["source"]["file"] == "/path/to/transform.py"
        assert data["source"]["line"] == 42
        assert "context" not in data

    def test_format_without_timestamp(self):
        """Test formatting without timestamp"""
        formatter = JSONFormatter(include_timestamp=False, include_hostname=False)

        data = json.loads(formatter.format(make_record()))

        assert "timestamp" not in data
        assert "hostname" not in data

    def test_format_with_extra_context(self):
        """Test extra fields are collected under context"""
        formatter = JSONFormatter()
        record = make_record(topic="serverX.inventory.customers", error_type="EnvelopeContractError")

        data = json.loads(formatter.format(record))

        assert data["context"] == {
            "topic": "serverX.inventory.customers",
            "error_type": "EnvelopeContractError",
        }

    def test_format_with_exception(self):
        """Test exception details are included"""
        formatter = JSONFormatter()
        try:
            raise ValueError("bad document")
        except ValueError:
            record = logging.LogRecord(
                name="test", level=logging.ERROR, pathname="t.py", lineno=1,
                msg="failed", args=(), exc_info=sys.exc_info(),
            )

        data = json.loads(formatter.format(record))

        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "bad document"
        assert any("bad document" in line for line in data["exception"]["traceback"])


class TestConsoleFormatter:
    """Test ConsoleFormatter class"""

    def test_format_plain(self):
        """Test plain formatting without colors"""
        formatter = ConsoleFormatter(use_colors=False)

        result = formatter.format(make_record())

        assert "[INFO] cdc_flatten.transform: Test message" in result

    def test_levelname_restored_after_coloring(self):
        """Test the record levelname is not left colored"""
        formatter = ConsoleFormatter()
        formatter.use_colors = True
        record = make_record(level=logging.WARNING)
        record.levelname = "WARNING"

        result = formatter.format(record)

        assert "\033[33mWARNING\033[0m" in result
        assert record.levelname == "WARNING"

    def test_format_with_extra_context(self):
        """Test extra fields are appended"""
        formatter = ConsoleFormatter(use_colors=False)

        result = formatter.format(make_record(topic="t1"))

        assert result.endswith("[topic=t1]")


class TestSetupLogging:
    """Test setup_logging function"""

    def test_console_handler(self, restore_root_logger):
        """Test a single console handler is installed"""
        setup_logging(level="DEBUG")

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, ConsoleFormatter)

    def test_json_format(self, restore_root_logger):
        """Test JSON formatting applies to the console handler"""
        setup_logging(json_format=True, app_name="flatten-test")

        formatter = restore_root_logger.handlers[0].formatter
        assert isinstance(formatter, JSONFormatter)
        assert formatter.app_name == "flatten-test"

    def test_replaces_existing_handlers(self, restore_root_logger):
        """Test calling twice does not duplicate handlers"""
        setup_logging()
        setup_logging()

        assert len(restore_root_logger.handlers) == 1

    def test_file_handler(self, restore_root_logger, tmp_path):
        """Test file logging creates the directory and writes records"""
        log_file = tmp_path / "logs" / "flatten.log"

        setup_logging(level="INFO", log_file=str(log_file), console_output=False)
        get_logger("cdc_flatten.test").info("written to file")
        for handler in restore_root_logger.handlers:
            handler.flush()

        assert log_file.exists()
        assert "written to file" in log_file.read_text()

    def test_noisy_loggers_quieted(self, restore_root_logger):
        """Test third-party loggers are raised to WARNING"""
        setup_logging(level="DEBUG")

        assert logging.getLogger("opentelemetry").level == logging.WARNING
        assert logging.getLogger("grpc").level == logging.WARNING


class TestConfigureFromEnv:
    """Test configure_from_env function"""

    def test_reads_environment(self):
        """Test LOG_* variables are passed through"""
        env = {"LOG_LEVEL": "WARNING", "LOG_JSON": "true", "LOG_CONSOLE": "no"}

        with patch.dict(os.environ, env, clear=False), \
                patch("utils.logging.config.setup_logging") as mock_setup:
            os.environ.pop("LOG_FILE", None)
            configure_from_env()

        mock_setup.assert_called_once_with(
            level="WARNING",
            log_file=None,
            console_output=False,
            json_format=True,
        )
