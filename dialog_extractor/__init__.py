"""
Dialog Extractor - capture dialog screenshots and turn them into text.

This package provides OCR for captured images with either a local Tesseract
engine or the Azure Computer Vision Read API, plus the tooling to fetch
Tesseract language data and save the extracted text.
"""

__version__ = "1.0.0"
__author__ = "Dialog Extractor Team"
__license__ = "MIT"

# Version information for programmatic access
VERSION_INFO = {
    "major": 1,
    "minor": 0,
    "patch": 0,
    "pre_release": None,  # alpha, beta, rc
}


def get_version() -> str:
    """Get the current version string."""
    version = f"{VERSION_INFO['major']}.{VERSION_INFO['minor']}.{VERSION_INFO['patch']}"

    if VERSION_INFO['pre_release']:
        version += f"-{VERSION_INFO['pre_release']}"

    return version


__all__ = ["__version__", "VERSION_INFO", "get_version"]
