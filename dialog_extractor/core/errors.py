"""
Exception types raised by Dialog Extractor.

Missing files and directories are reported with the builtin
``FileNotFoundError``; everything else derives from ``DialogExtractorError``.
"""

from typing import Optional


class DialogExtractorError(Exception):
    """Base class for all Dialog Extractor errors."""


class ConfigurationError(DialogExtractorError):
    """Configuration file is absent, unreadable or incomplete."""


class NetworkError(DialogExtractorError):
    """A request could not reach the remote service."""


class HTTPStatusError(DialogExtractorError):
    """The remote service answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class EngineNotFoundError(DialogExtractorError):
    """The OCR engine or its language data cannot be located."""


class EngineAPIError(DialogExtractorError):
    """The OCR engine was found but a call into it failed."""


class PollTimeoutError(DialogExtractorError):
    """An asynchronous operation did not finish within its deadline."""


class OperationCancelledError(DialogExtractorError):
    """The caller cancelled an operation in progress."""
