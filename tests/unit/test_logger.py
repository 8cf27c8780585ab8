"""
Unit tests for logging system.

Tests the logging utilities including setup, formatters and the capture adapter.
"""

import logging
import json

from dialog_extractor.utils.logger import (
    JSONFormatter,
    setup_logger,
    get_logger,
    ExtractionLoggerAdapter,
    get_ocr_logger,
    get_core_logger,
)


def _record(name="test_logger", level=logging.INFO, msg="Test message", exc_info=None):
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="/test/path.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info
    )
    record.module = "test_module"
    record.funcName = "test_function"
    return record


class TestJSONFormatter:
    """Test the JSON log formatter."""

    def test_basic_formatting(self):
        """Test basic JSON formatting of log records."""
        data = json.loads(JSONFormatter().format(_record()))

        assert data['level'] == 'INFO'
        assert data['logger'] == 'test_logger'
        assert data['message'] == 'Test message'
        assert data['module'] == 'test_module'
        assert data['function'] == 'test_function'
        assert data['line'] == 42
        assert 'timestamp' in data

    def test_formatting_with_capture_fields(self):
        record = _record(msg="Extracted")
        record.source_file = "shot.png"
        record.engine = "azure_vision"
        record.processing_time = 1.23

        data = json.loads(JSONFormatter().format(record))

        assert data['source_file'] == "shot.png"
        assert data['engine'] == "azure_vision"
        assert data['processing_time'] == 1.23

    def test_non_ascii_message_is_kept(self):
        data = json.loads(JSONFormatter().format(_record(msg="こんにちは")))
        assert data['message'] == "こんにちは"

    def test_formatting_with_exception(self):
        """Test JSON formatting with exception information."""
        try:
            raise ValueError("Test exception")
        except ValueError:
            import sys
            exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(_record(level=logging.ERROR, exc_info=exc_info)))

        assert 'ValueError' in data['exception']
        assert 'Test exception' in data['exception']


class TestSetupLogger:
    """Test the setup_logger function."""

    def test_basic_logger_setup(self):
        logger = setup_logger("test_basic")

        assert logger.name == "test_basic"
        assert logger.level == logging.INFO
        assert len(logger.handlers) >= 1

    def test_logger_with_different_level(self):
        assert setup_logger("test_debug", level="DEBUG").level == logging.DEBUG
        assert setup_logger("test_error", level="ERROR").level == logging.ERROR

    def test_unknown_level_defaults_to_info(self):
        assert setup_logger("test_unknown", level="chatty").level == logging.INFO

    def test_logger_with_file_output(self, temp_dir):
        log_dir = temp_dir / "logs"

        logger = setup_logger("test_file", log_to_file=True, log_dir=str(log_dir))
        logger.info("Test message")

        log_files = list(log_dir.glob("*.log"))
        assert len(log_files) == 1
        assert "Test message" in log_files[0].read_text(encoding='utf-8')

    def test_logger_with_json_format(self, temp_dir):
        log_dir = temp_dir / "json_logs"

        logger = setup_logger("test_json", log_to_file=True, log_dir=log_dir, json_format=True)
        logger.info("JSON test message")

        log_files = list(log_dir.glob("*.log"))
        lines = log_files[0].read_text(encoding='utf-8').strip().splitlines()
        log_data = json.loads(lines[-1])
        assert log_data['message'] == "JSON test message"
        assert log_data['level'] == "INFO"

    def test_repeated_setup_does_not_stack_handlers(self):
        first = len(setup_logger("test_repeat").handlers)
        second = len(setup_logger("test_repeat").handlers)
        assert first == second

    def test_logger_propagate_disabled(self):
        assert setup_logger("test_propagate").propagate is False


class TestGetLogger:
    """Test namespaced logger helpers."""

    def test_get_logger_namespace(self):
        assert get_logger("tessdata").name == "dialog_extractor.tessdata"

    def test_component_loggers(self):
        assert get_ocr_logger().name == "dialog_extractor.ocr"
        assert get_core_logger().name == "dialog_extractor.core"

    def test_ocr_component_logger(self):
        logger = get_ocr_logger("tessdata")
        assert logger.name == "dialog_extractor.ocr.tessdata"
        assert logger.parent is get_ocr_logger()


class TestExtractionLoggerAdapter:
    """Test the adapter that adds capture context."""

    def test_context_is_attached(self, caplog_debug):
        logger = logging.getLogger("adapter_test")
        adapter = ExtractionLoggerAdapter(logger, {'source_file': 'shot.png'})

        adapter.info("Recognized", extra={'processing_time': 0.5})

        record = caplog_debug.records[-1]
        assert record.source_file == 'shot.png'
        assert record.processing_time == 0.5
