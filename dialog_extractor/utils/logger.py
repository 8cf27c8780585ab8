"""
Logging utilities for Dialog Extractor.

Provides colored console logging, optional file logs and structured JSON output.
"""

import logging
import json
from pathlib import Path
from typing import Optional, Union
from datetime import datetime

import coloredlogs


ROOT_LOGGER_NAME = "dialog_extractor"

CONSOLE_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


class JSONFormatter(logging.Formatter):
    """Custom formatter that outputs JSON structured logs."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        # Capture context added by ExtractionLoggerAdapter
        if hasattr(record, 'source_file'):
            log_data['source_file'] = record.source_file
        if hasattr(record, 'engine'):
            log_data['engine'] = record.engine
        if hasattr(record, 'processing_time'):
            log_data['processing_time'] = record.processing_time

        return json.dumps(log_data, ensure_ascii=False)


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: str = "INFO",
    log_to_file: bool = False,
    log_dir: Optional[Union[str, Path]] = None,
    json_format: bool = False
) -> logging.Logger:
    """
    Set up a logger with colored console output and optional file output.

    Args:
        name: Logger name
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to log to file
        log_dir: Directory for log files (default: ~/logs/dialog_extractor)
        json_format: Whether to use JSON formatting for file logs

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.handlers.clear()

    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(log_level)

    coloredlogs.install(
        level=log_level,
        logger=logger,
        fmt=CONSOLE_FORMAT,
        datefmt='%H:%M:%S'
    )

    if log_to_file:
        if log_dir is None:
            log_dir = Path.home() / "logs" / "dialog_extractor"
        else:
            log_dir = Path(log_dir)

        log_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"extract_{timestamp}.log"

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(log_level)

        if json_format:
            file_formatter = JSONFormatter()
        else:
            file_formatter = logging.Formatter(
                '%(asctime)s [%(levelname)s] %(name)s:%(funcName)s:%(lineno)d - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )

        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")

    # Prevent duplicate logs in parent loggers
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


class ExtractionLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that adds capture-specific context to log records.

    Usage:
        adapter = ExtractionLoggerAdapter(logger, {'source_file': 'shot.png'})
        adapter.info("Recognized", extra={'processing_time': 1.23})
    """

    def process(self, msg, kwargs):
        """Add extra context to log record."""
        extra = kwargs.get('extra', {})
        extra.update(self.extra)
        kwargs['extra'] = extra
        return msg, kwargs


def get_ocr_logger(component: Optional[str] = None) -> logging.Logger:
    """Get logger for OCR processing, optionally for one engine or helper."""
    return get_logger(f"ocr.{component}" if component else "ocr")


def get_core_logger() -> logging.Logger:
    """Get logger for core functionality."""
    return get_logger("core")
