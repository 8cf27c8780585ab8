"""
OCR engine implementations.

- Tesseract (local), with ``TessdataInstaller`` for its language models
- Azure Computer Vision Read API (cloud)
"""

from .base import OCREngine, CaptureResult, validate_image_path
from .tesseract_engine import TesseractEngine
from .azure_vision import AzureReadClient, AzureVisionEngine, flatten_read_result
from .tessdata import TessdataInstaller, ensure_tessdata

__all__ = [
    "OCREngine", "CaptureResult", "validate_image_path",
    "TesseractEngine",
    "AzureReadClient", "AzureVisionEngine", "flatten_read_result",
    "TessdataInstaller", "ensure_tessdata",
]
