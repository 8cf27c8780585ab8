"""
Pytest configuration and shared fixtures.

This module contains pytest configuration and fixtures that are available
to all test modules.
"""

import pytest
import tempfile
import shutil
from pathlib import Path
from unittest.mock import Mock, patch
import json
import os

import requests

# Import project modules for testing
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from dialog_extractor.core.config import AppConfig, OcrCredentials


SAMPLE_READ_RESULT = {
    "status": "succeeded",
    "createdDateTime": "2025-01-01T00:00:00Z",
    "lastUpdatedDateTime": "2025-01-01T00:00:01Z",
    "analyzeResult": {
        "version": "3.2.0",
        "readResults": [
            {"page": 1, "lines": [{"text": "A"}, {"text": "B"}]},
            {"page": 2, "lines": [{"text": "C"}]},
        ],
    },
}


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def credentials():
    """Credentials pointing at a fake endpoint."""
    return OcrCredentials(
        endpoint="https://example.cognitiveservices.azure.com/",
        api_key="test_key_123"
    )


@pytest.fixture
def credentials_file(temp_dir):
    """Create a well-formed credentials file."""
    credentials_file = temp_dir / "azurevision.json"
    credentials_file.write_text(json.dumps({
        "Endpoint": "https://example.cognitiveservices.azure.com/",
        "ApiKey": "test_key_123"
    }), encoding='utf-8')
    return credentials_file


@pytest.fixture
def sample_config(temp_dir, credentials_file):
    """Configuration that keeps every path inside the temp directory."""
    return AppConfig(
        credentials_file=str(credentials_file),
        tessdata_dir=str(temp_dir / "tessdata"),
        tesseract_cmd="tesseract",
        local_language="jpn",
        poll_interval=0.0,
        poll_timeout=5.0,
        output_folder=str(temp_dir / "output"),
    )


@pytest.fixture
def mock_env_vars():
    """Mock environment variables for testing."""
    env_vars = {
        'DIALOG_CREDENTIALS_FILE': '/test/azurevision.json',
        'DIALOG_TESSDATA_DIR': '/test/tessdata',
        'DIALOG_LOCAL_LANGUAGE': 'jpn+eng',
        'DIALOG_POLL_TIMEOUT': '45',
        'DIALOG_MAX_POLL_ATTEMPTS': '10',
        'DIALOG_LOG_LEVEL': 'DEBUG',
        'DIALOG_JOIN_LINES': 'false',
    }

    with patch.dict(os.environ, env_vars):
        yield env_vars


@pytest.fixture
def sample_read_result():
    """A finished Read API result with two pages."""
    return json.loads(json.dumps(SAMPLE_READ_RESULT))


def make_response(status_code=200, text="", headers=None, content=b""):
    """Build a stand-in for ``requests.Response``."""
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.text = text
    response.content = content
    response.headers = headers or {}
    return response


@pytest.fixture
def response_factory():
    """Give tests access to ``make_response``."""
    return make_response


@pytest.fixture
def mock_session():
    """A ``requests.Session`` double with real header storage."""
    session = Mock(spec=requests.Session)
    session.headers = {}
    return session


@pytest.fixture
def sample_image_file(temp_dir):
    """Create a sample image file for testing."""
    from PIL import Image, ImageDraw

    img = Image.new('RGB', (300, 100), color='white')
    draw = ImageDraw.Draw(img)
    draw.text((10, 30), 'Test OCR Text', fill='black')

    image_file = temp_dir / "test_image.png"
    img.save(image_file)

    return image_file


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logger() between tests so caplog keeps seeing records."""
    yield
    import logging
    logger = logging.getLogger("dialog_extractor")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def caplog_debug(caplog):
    """Set logging level to DEBUG for tests."""
    import logging
    caplog.set_level(logging.DEBUG)
    return caplog


# Pytest configuration
def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers",
        "unit: marks tests as unit tests"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
