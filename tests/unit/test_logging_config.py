"""
Unit tests for logging configuration and formatters
"""

import json
import logging
import sys
from unittest.mock import patch

import pytest

from utils.logging import ConsoleFormatter, JSONFormatter, setup_logging, shutdown_logging


def make_record(msg="Diffing table", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="dbdiff.test",
        level=level,
        pathname="runner.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


class TestJSONFormatter:
    """Test JSONFormatter"""

    def test_format_basic_log_record(self):
        formatter = JSONFormatter(app_name="dbdiff")

        data = json.loads(formatter.format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "dbdiff.test"
        assert data["message"] == "Diffing table"
        assert data["app"] == "dbdiff"
        assert data["source"]["line"] == 42
        assert "timestamp" in data
        assert "hostname" in data

    def test_format_without_timestamp_and_hostname(self):
        formatter = JSONFormatter(include_timestamp=False, include_hostname=False)

        data = json.loads(formatter.format(make_record()))

        assert "timestamp" not in data
        assert "hostname" not in data

    def test_format_with_extra_context(self):
        formatter = JSONFormatter()

        data = json.loads(formatter.format(make_record(table="orders", error_type="SnapshotQueryError")))

        assert data["context"] == {"table": "orders", "error_type": "SnapshotQueryError"}

    def test_format_with_exception_info(self):
        formatter = JSONFormatter()
        try:
            raise ValueError("bad value")
        except ValueError:
            record = make_record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        data = json.loads(formatter.format(record))

        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "bad value"


class TestConsoleFormatter:
    """Test ConsoleFormatter"""

    def test_format_without_colors(self):
        formatter = ConsoleFormatter(use_colors=False)

        output = formatter.format(make_record(level=logging.WARNING))

        assert "[WARNING] dbdiff.test: Diffing table" in output
        assert "\033[" not in output

    @patch("sys.stderr.isatty", return_value=True)
    def test_format_with_colors_restores_levelname(self, mock_isatty):
        formatter = ConsoleFormatter(use_colors=True)
        record = make_record(level=logging.ERROR)

        output = formatter.format(record)

        assert "\033[31mERROR\033[0m" in output
        assert record.levelname == "ERROR"

    def test_extra_context_appended(self):
        formatter = ConsoleFormatter(use_colors=False)

        output = formatter.format(make_record(table="orders"))

        assert output.endswith("[table=orders]")


class TestSetupLogging:
    """Test setup_logging"""

    def test_console_handler_on_stderr(self, restore_root_logger):
        setup_logging(level="DEBUG")

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert root.handlers[0].stream is sys.stderr
        assert isinstance(root.handlers[0].formatter, ConsoleFormatter)

    def test_json_format(self, restore_root_logger):
        setup_logging(json_format=True)

        assert isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)

    def test_invalid_level_defaults_to_info(self, restore_root_logger):
        setup_logging(level="LOUD")

        assert restore_root_logger.level == logging.INFO

    def test_file_handler_creates_directory(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "logs" / "dbdiff.log"

        setup_logging(log_file=str(log_file), console_output=False)
        logging.getLogger("dbdiff.test").info("written to file")
        shutdown_logging()

        assert "written to file" in log_file.read_text()

    def test_shutdown_removes_handlers(self, restore_root_logger):
        setup_logging()

        shutdown_logging()

        assert restore_root_logger.handlers == []
