"""
Configuration management for Dialog Extractor.

Two kinds of configuration live here:

- ``OcrCredentials``: the Azure Vision endpoint/API-key pair, loaded from a
  JSON file on every cloud capture and rejected if incomplete.
- ``AppConfig``: application settings merged from defaults, the user's
  settings file and ``DIALOG_*`` environment variables.
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, Optional, Union, get_args, get_origin
from dataclasses import dataclass, asdict, fields, replace

from .errors import ConfigurationError
from ..utils.logger import get_logger


logger = get_logger("config")


@dataclass(frozen=True)
class OcrCredentials:
    """Endpoint and API key for the cloud OCR service."""

    endpoint: str
    api_key: str

    def __repr__(self) -> str:
        # Keep the key out of logs and tracebacks
        return f"OcrCredentials(endpoint={self.endpoint!r}, api_key='***')"


def load_credentials(path: Union[str, Path]) -> OcrCredentials:
    """
    Load cloud OCR credentials from a JSON file.

    The file holds an object with ``Endpoint`` and ``ApiKey`` string fields;
    key names are matched case-insensitively.

    Args:
        path: Path to the JSON credentials file

    Returns:
        Loaded credentials, values exactly as stored in the file

    Raises:
        ConfigurationError: If the file is absent, unreadable, malformed or
            missing either field
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Azure Vision configuration file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8-sig') as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Azure Vision configuration could not be read: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Azure Vision configuration is not valid JSON: {path}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Azure Vision configuration is invalid: {path}")

    entries = {str(key).lower(): value for key, value in data.items()}
    endpoint = entries.get("endpoint")
    api_key = entries.get("apikey")

    if not isinstance(endpoint, str) or not isinstance(api_key, str) or not endpoint or not api_key:
        raise ConfigurationError(f"Azure Vision configuration is invalid: {path}")

    return OcrCredentials(endpoint=endpoint, api_key=api_key)


@dataclass
class AppConfig:
    """Application settings for capture and recognition."""

    # Cloud OCR
    credentials_file: str = "azurevision.json"
    cloud_language: str = "ja"
    reading_order: str = "basic"
    poll_interval: float = 1.0
    poll_timeout: float = 120.0
    max_poll_attempts: Optional[int] = None
    request_timeout: float = 30.0

    # Local OCR
    tessdata_dir: str = "tessdata"
    tesseract_cmd: Optional[str] = None
    local_language: str = "eng"
    strip_spaces: bool = False

    # Output
    join_dialog_lines: bool = True
    output_folder: str = "~/Documents/DialogExtractor"

    # Logging settings
    log_level: str = "INFO"
    log_to_file: bool = False
    log_dir: Optional[str] = None

    def __post_init__(self):
        """Expand user paths after initialization."""
        self.output_folder = os.path.expanduser(self.output_folder)
        self.tessdata_dir = os.path.expanduser(self.tessdata_dir)
        self.credentials_file = os.path.expanduser(self.credentials_file)
        if self.log_dir:
            self.log_dir = os.path.expanduser(self.log_dir)


class ConfigManager:
    """Manages configuration loading and saving."""

    CONFIG_FILE = "~/.dialog-extractor.json"

    ENV_MAPPINGS = {
        'DIALOG_CREDENTIALS_FILE': 'credentials_file',
        'DIALOG_CLOUD_LANGUAGE': 'cloud_language',
        'DIALOG_READING_ORDER': 'reading_order',
        'DIALOG_POLL_INTERVAL': 'poll_interval',
        'DIALOG_POLL_TIMEOUT': 'poll_timeout',
        'DIALOG_MAX_POLL_ATTEMPTS': 'max_poll_attempts',
        'DIALOG_REQUEST_TIMEOUT': 'request_timeout',
        'DIALOG_TESSDATA_DIR': 'tessdata_dir',
        'DIALOG_TESSERACT_CMD': 'tesseract_cmd',
        'DIALOG_LOCAL_LANGUAGE': 'local_language',
        'DIALOG_STRIP_SPACES': 'strip_spaces',
        'DIALOG_JOIN_LINES': 'join_dialog_lines',
        'DIALOG_OUTPUT_PATH': 'output_folder',
        'DIALOG_LOG_LEVEL': 'log_level',
        'DIALOG_LOG_TO_FILE': 'log_to_file',
        'DIALOG_LOG_DIR': 'log_dir',
    }

    @classmethod
    def load_config(cls) -> AppConfig:
        """Load configuration from file and environment variables."""
        config = AppConfig()
        overrides: Dict[str, Any] = {}

        config_path = Path(cls.CONFIG_FILE).expanduser()
        if config_path.exists():
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    file_config = json.load(f)
                if isinstance(file_config, dict):
                    overrides.update(cls._config_from_dict(file_config, str(config_path)))
                else:
                    logger.warning(f"Ignoring settings file {config_path}: not a JSON object")
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Could not load config file: {e}")

        overrides.update(cls._load_from_env())

        # replace() runs __post_init__ again, expanding paths from any layer
        return replace(config, **overrides)

    @classmethod
    def save_config(cls, config: AppConfig) -> bool:
        """Save configuration to file."""
        try:
            config_path = Path(cls.CONFIG_FILE).expanduser()
            config_path.parent.mkdir(parents=True, exist_ok=True)

            with open(config_path, 'w', encoding='utf-8') as f:
                json.dump(asdict(config), f, indent=2, ensure_ascii=False)
            return True
        except IOError as e:
            logger.error(f"Error saving config: {e}")
            return False

    @classmethod
    def _config_from_dict(cls, data: Dict[str, Any], source: str) -> Dict[str, Any]:
        """Pick the known settings out of a dictionary, converted to their field types."""
        known = {f.name: f.type for f in fields(AppConfig)}
        values = {}

        for key, value in data.items():
            if key not in known:
                logger.debug(f"Unknown setting {key!r} in {source}")
                continue
            try:
                values[key] = _coerce(value, known[key])
            except (TypeError, ValueError):
                logger.warning(f"Ignoring invalid {key}={value!r} from {source}")

        return values

    @classmethod
    def _load_from_env(cls) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        data = {}
        for env_var, config_attr in cls.ENV_MAPPINGS.items():
            value = os.getenv(env_var)
            if value:
                data[config_attr] = value

        return cls._config_from_dict(data, "environment")


_TRUE_VALUES = ('true', '1', 'yes', 'on')
_FALSE_VALUES = ('false', '0', 'no', 'off')


def _coerce(value: Any, field_type: Any) -> Any:
    """
    Convert a raw setting to ``field_type``.

    Strings are parsed for numeric and boolean fields. ``None`` is only
    accepted for ``Optional`` fields.

    Raises:
        TypeError, ValueError: The value does not fit the field
    """
    args = get_args(field_type)
    optional = get_origin(field_type) is Union and type(None) in args
    if optional:
        field_type = next(arg for arg in args if arg is not type(None))

    if value is None:
        if optional:
            return None
        raise TypeError("value required")

    if field_type is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _TRUE_VALUES + _FALSE_VALUES:
            return value.strip().lower() in _TRUE_VALUES
        raise ValueError(f"not a boolean: {value!r}")

    if isinstance(value, bool):
        # bool is an int subclass; never accept it as a number or string
        raise TypeError(f"unexpected boolean for {field_type.__name__}")

    if field_type is int:
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"not an integer: {value!r}")
        if not isinstance(value, (int, float, str)):
            raise TypeError(f"not an integer: {value!r}")
        converted = int(value)
        if converted < 1:
            raise ValueError(f"must be positive: {value!r}")
        return converted

    if field_type is float:
        if not isinstance(value, (int, float, str)):
            raise TypeError(f"not a number: {value!r}")
        converted = float(value)
        if converted < 0:
            raise ValueError(f"must not be negative: {value!r}")
        return converted

    if not isinstance(value, str):
        raise TypeError(f"not a string: {value!r}")
    return value


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ConfigManager.load_config()
    return _config


def update_config(new_config: AppConfig) -> bool:
    """Update the global configuration and save to file."""
    global _config
    _config = new_config
    return ConfigManager.save_config(new_config)
