"""
Base classes and interfaces for OCR engines.

Every engine exposes the same capability set: ``open`` the backend,
``process`` an image, ``extract_text`` from the processed page and
``release`` whatever the engine holds. ``recognize`` runs that sequence for
one image and raises on failure; ``process_image`` wraps it into a
``CaptureResult`` for callers that prefer a described failure.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Any, Optional, Union
from pathlib import Path
import time

from ..core.errors import DialogExtractorError


SUPPORTED_IMAGE_SUFFIXES = ('.png', '.jpg', '.jpeg', '.bmp', '.tif', '.tiff', '.gif')


@dataclass
class CaptureResult:
    """Text produced by one capture-and-recognize run."""

    text: str                            # Extracted text, possibly empty
    engine: str                          # Engine used (tesseract_local, azure_vision)
    file_path: Optional[str] = None      # Source image, None for in-memory captures
    processing_time: float = 0.0         # Time taken in seconds
    character_count: int = 0

    # Error handling
    success: bool = True
    error_message: Optional[str] = None

    def __post_init__(self):
        if not self.character_count and self.text:
            self.character_count = len(self.text)


def validate_image_path(image_path: Union[str, Path, None]) -> Path:
    """
    Check that an image path was given and points at an existing file.

    Raises:
        ValueError: If the path is empty
        FileNotFoundError: If nothing exists at the path
    """
    if image_path is None or str(image_path) == "":
        raise ValueError("image_path is required")

    path = Path(image_path)
    if not path.is_file():
        raise FileNotFoundError(f"Image not found: {path}")
    return path


class OCREngine(ABC):
    """
    Abstract base class for OCR engines.

    Engines are context managers: entering calls ``open`` and leaving calls
    ``release`` even when recognition fails.
    """

    def __init__(self, name: str, **kwargs):
        """
        Initialize OCR engine.

        Args:
            name: Engine identifier
            **kwargs: Engine-specific configuration
        """
        self.name = name
        self.config = kwargs

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if the OCR engine is installed and configured.

        Returns:
            True if engine is ready to use, False otherwise
        """
        pass

    @abstractmethod
    def open(self) -> None:
        """
        Prepare the backend for recognition.

        Raises:
            EngineNotFoundError: If the backend cannot be located
        """
        pass

    @abstractmethod
    def process(self, image_path: Path) -> None:
        """Load an image into the engine and run recognition on it."""
        pass

    @abstractmethod
    def extract_text(self) -> str:
        """Return the text recognized by the last ``process`` call."""
        pass

    def release(self) -> None:
        """Free resources held since ``open``."""
        pass

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    def recognize(self, image_path: Union[str, Path]) -> str:
        """
        Recognize the text in an image file.

        The path is validated before the engine is touched.

        Args:
            image_path: Path to image file

        Returns:
            Recognized text, possibly empty
        """
        path = validate_image_path(image_path)
        with self:
            self.process(path)
            return self.extract_text()

    def process_image(self, image_path: Union[str, Path]) -> CaptureResult:
        """
        Recognize an image and report the outcome as a ``CaptureResult``.

        Failures are returned with ``success=False`` instead of raised.
        """
        start_time = time.time()

        try:
            text = self.recognize(image_path)
        except (DialogExtractorError, OSError, ValueError) as e:
            return self._create_error_result(image_path, str(e), start_time)

        return CaptureResult(
            text=text,
            engine=self.name,
            file_path=str(image_path),
            processing_time=time.time() - start_time,
        )

    def process_file(self, file_path: Union[str, Path]) -> CaptureResult:
        """
        Process any supported file type.

        Args:
            file_path: Path to file

        Returns:
            Capture result
        """
        file_path = Path(file_path)

        if not file_path.exists():
            return self._create_error_result(file_path, f"File not found: {file_path}", time.time())

        suffix = file_path.suffix.lower()
        if suffix not in SUPPORTED_IMAGE_SUFFIXES:
            return self._create_error_result(
                file_path, f"Unsupported file type: {suffix}", time.time()
            )

        return self.process_image(file_path)

    def _create_error_result(self, file_path: Union[str, Path, None],
                             error_message: str, start_time: float) -> CaptureResult:
        """Create an error result."""
        return CaptureResult(
            text="",
            engine=self.name,
            file_path=str(file_path) if file_path is not None else None,
            processing_time=time.time() - start_time,
            success=False,
            error_message=error_message
        )

    def get_info(self) -> Dict[str, Any]:
        """
        Get engine information and status.

        Returns:
            Dictionary with engine details
        """
        return {
            'name': self.name,
            'available': self.is_available(),
            'config': self.config
        }

    def __str__(self) -> str:
        return f"{self.name} OCR Engine ({'available' if self.is_available() else 'unavailable'})"

    def __repr__(self) -> str:
        return f"OCREngine(name='{self.name}')"
