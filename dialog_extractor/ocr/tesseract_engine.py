"""
Tesseract OCR Engine.

Local recognition through the tesseract executable (via pytesseract), reading
language models from a tessdata folder that ``TessdataInstaller`` keeps filled.
"""

import os
import shutil
from pathlib import Path
from typing import List, Optional, Union

import pytesseract
from PIL import Image

from .base import OCREngine
from ..core.errors import EngineNotFoundError, EngineAPIError
from ..utils.logger import get_ocr_logger
from ..utils.text_processor import strip_spaces


DEFAULT_TESSDATA_DIR = "tessdata"


class TesseractEngine(OCREngine):
    """Tesseract OCR Engine for local processing."""

    def __init__(self, tessdata_dir: Union[str, Path] = DEFAULT_TESSDATA_DIR,
                 language: str = "eng", tesseract_cmd: Optional[str] = None, **kwargs):
        """
        Initialize Tesseract OCR engine.

        Args:
            tessdata_dir: Folder holding ``<lang>.traineddata`` files
            language: Tesseract language code(s), e.g. "eng" or "jpn+eng"
            tesseract_cmd: Path to tesseract executable (auto-detected if None)
            **kwargs: Additional options (strip_spaces, psm)
        """
        super().__init__("tesseract_local", **kwargs)
        self.tessdata_dir = Path(tessdata_dir)
        self.language = language
        self.tesseract_cmd = tesseract_cmd
        self.logger = get_ocr_logger("tesseract")

        self.strip_spaces = kwargs.get("strip_spaces", False)
        self.psm = kwargs.get("psm")

        self._image = None
        self._text: Optional[str] = None

        self._setup_tesseract()

    def _setup_tesseract(self):
        """Setup Tesseract executable path."""
        if self.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd
        else:
            self._find_tesseract_executable()

    def _find_tesseract_executable(self):
        """Find Tesseract executable automatically."""
        common_paths = [
            'C:\\Program Files\\Tesseract-OCR\\tesseract.exe',
            'C:\\Program Files (x86)\\Tesseract-OCR\\tesseract.exe',
            '/usr/bin/tesseract',
            '/usr/local/bin/tesseract',
            '/opt/homebrew/bin/tesseract',  # macOS Homebrew
            'tesseract'  # Assume it's in PATH
        ]

        for path in common_paths:
            if os.path.exists(path) or shutil.which(path):
                pytesseract.pytesseract.tesseract_cmd = path
                self.tesseract_cmd = path
                self.logger.debug(f"Found Tesseract at: {path}")
                return

        self.logger.warning("Tesseract executable not found in common locations")

    @property
    def languages(self) -> List[str]:
        """Individual language codes, e.g. ["jpn", "eng"] for "jpn+eng"."""
        return [lang for lang in self.language.split('+') if lang]

    def is_available(self) -> bool:
        """Check if the tesseract executable can be run."""
        try:
            version = pytesseract.get_tesseract_version()
        except pytesseract.TesseractNotFoundError as e:
            self.logger.error(f"Tesseract not available: {e}")
            return False
        self.logger.debug(f"Tesseract version: {version}")
        return True

    def open(self) -> None:
        if not self.tessdata_dir.is_dir():
            raise FileNotFoundError(f"tessdata folder not found: {self.tessdata_dir}")

        if not self.is_available():
            raise EngineNotFoundError(
                f"Tesseract executable not found (tesseract_cmd={pytesseract.pytesseract.tesseract_cmd!r})"
            )

    def process(self, image_path: Path) -> None:
        try:
            self._image = Image.open(image_path)
            self._image.load()
        except OSError as e:
            raise EngineAPIError(f"Failed to load image into the engine: {image_path}") from e

        try:
            self._text = pytesseract.image_to_string(
                self._image,
                lang=self.language,
                config=self._get_tesseract_config()
            )
        except pytesseract.TesseractNotFoundError as e:
            raise EngineNotFoundError("Tesseract executable disappeared during processing") from e
        except pytesseract.TesseractError as e:
            raise EngineAPIError(f"Tesseract invocation failed: {e}") from e

        self.logger.info(f"Recognized {image_path.name}: {len(self._text or '')} chars")

    def extract_text(self) -> str:
        text = (self._text or "").strip()
        if self.strip_spaces:
            text = strip_spaces(text)
        return text

    def release(self) -> None:
        if self._image is not None:
            self._image.close()
        self._image = None
        self._text = None

    def _get_tesseract_config(self) -> str:
        """Get Tesseract configuration string."""
        tessdata = self.tessdata_dir.resolve().as_posix()
        config = f'--tessdata-dir "{tessdata}"'
        if self.psm is not None:
            config += f' --psm {self.psm}'
        return config

    def get_info(self):
        info = super().get_info()
        info.update({
            'tesseract_cmd': self.tesseract_cmd,
            'tessdata_dir': str(self.tessdata_dir),
            'language': self.language,
        })
        return info
