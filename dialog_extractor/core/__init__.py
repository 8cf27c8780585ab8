"""
Core components: configuration, errors and capture orchestration.

The orchestrator lives in ``dialog_extractor.core.extractor``; it is not
imported here because it depends on the OCR engines, which depend on this
package.
"""

from .config import AppConfig, ConfigManager, OcrCredentials, get_config, load_credentials
from .errors import (
    DialogExtractorError,
    ConfigurationError,
    NetworkError,
    HTTPStatusError,
    EngineNotFoundError,
    EngineAPIError,
    PollTimeoutError,
    OperationCancelledError,
)

__all__ = [
    "AppConfig", "ConfigManager", "OcrCredentials", "get_config", "load_credentials",
    "DialogExtractorError", "ConfigurationError", "NetworkError", "HTTPStatusError",
    "EngineNotFoundError", "EngineAPIError", "PollTimeoutError", "OperationCancelledError",
]
