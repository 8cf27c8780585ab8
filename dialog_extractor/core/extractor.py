"""
Capture orchestration.

``DialogExtractor`` is what a front end drives: it remembers the image the
user opened, runs it through the local or cloud OCR path, applies dialog
line joining and saves the resulting text.
"""

import threading
import time
from pathlib import Path
from typing import Optional, Union

from .config import AppConfig, get_config
from .errors import EngineNotFoundError
from ..ocr.base import CaptureResult, validate_image_path
from ..ocr.azure_vision import AzureVisionEngine
from ..ocr.tesseract_engine import TesseractEngine
from ..ocr.tessdata import TessdataInstaller
from ..utils.logger import ExtractionLoggerAdapter, get_core_logger
from ..utils.text_processor import join_dialog_lines, save_text


class DialogExtractor:
    """Runs capture-and-recognize operations for one user session."""

    def __init__(self, config: Optional[AppConfig] = None,
                 tessdata_installer: Optional[TessdataInstaller] = None):
        self.config = config or get_config()
        self.tessdata_installer = tessdata_installer or TessdataInstaller()
        self.logger = get_core_logger()

        self.current_image: Optional[Path] = None
        self.last_result: Optional[CaptureResult] = None

    def load_image(self, image_path: Union[str, Path]) -> Path:
        """Validate an image and make it the current one."""
        self.current_image = validate_image_path(image_path)
        self.logger.info(f"Opened image {self.current_image}")
        return self.current_image

    def _resolve_image(self, image_path: Optional[Union[str, Path]]) -> Path:
        if image_path is not None:
            return self.load_image(image_path)
        if self.current_image is None or not self.current_image.is_file():
            raise FileNotFoundError("Open an image first.")
        return self.current_image

    def create_local_engine(self) -> TesseractEngine:
        return TesseractEngine(
            tessdata_dir=self.config.tessdata_dir,
            language=self.config.local_language,
            tesseract_cmd=self.config.tesseract_cmd,
            strip_spaces=self.config.strip_spaces,
        )

    def create_cloud_engine(self, cancel_event: Optional[threading.Event] = None) -> AzureVisionEngine:
        return AzureVisionEngine(
            credentials_file=self.config.credentials_file,
            language=self.config.cloud_language,
            reading_order=self.config.reading_order,
            poll_interval=self.config.poll_interval,
            poll_timeout=self.config.poll_timeout,
            max_poll_attempts=self.config.max_poll_attempts,
            request_timeout=self.config.request_timeout,
            cancel_event=cancel_event,
        )

    def extract_local(self, image_path: Optional[Union[str, Path]] = None) -> CaptureResult:
        """
        Recognize an image with Tesseract.

        The language models for the configured language are fetched first
        if they are missing.

        Raises:
            FileNotFoundError: No image given or opened, or it does not exist
            EngineNotFoundError: Tesseract or its language data is unavailable
            EngineAPIError: Tesseract failed on the image
        """
        path = self._resolve_image(image_path)
        engine = self.create_local_engine()

        if not self.tessdata_installer.ensure(engine.languages, self.config.tessdata_dir):
            raise EngineNotFoundError(
                f"Tesseract language data for '{engine.language}' is not available "
                f"in {self.config.tessdata_dir}"
            )

        return self._run(engine.name, path, lambda: engine.recognize(path))

    def extract_cloud(self, image: Union[bytes, str, Path, None] = None,
                      cancel_event: Optional[threading.Event] = None) -> CaptureResult:
        """
        Recognize an image with Azure Vision.

        ``image`` may be encoded image bytes (e.g. a fresh screenshot), a
        path, or None for the current image. Credentials are loaded from the
        configured file on every call.

        Raises:
            ConfigurationError: The credentials file is missing or invalid
            NetworkError, HTTPStatusError: The service call failed
            PollTimeoutError, OperationCancelledError: Polling was abandoned
        """
        engine = self.create_cloud_engine(cancel_event)

        if isinstance(image, (bytes, bytearray)):
            result = self._run(engine.name, None, lambda: engine.recognize_bytes(bytes(image)))
        else:
            path = self._resolve_image(image)
            result = self._run(engine.name, path, lambda: engine.recognize(path))

        if self.config.join_dialog_lines:
            result.text = join_dialog_lines(result.text)
            result.character_count = len(result.text)
        return result

    def _run(self, engine_name: str, path: Optional[Path], recognize) -> CaptureResult:
        source = str(path) if path is not None else None
        log = ExtractionLoggerAdapter(self.logger, {'source_file': source or '<memory>',
                                                    'engine': engine_name})
        start_time = time.time()

        text = recognize()

        elapsed = time.time() - start_time
        log.info(f"Extracted {len(text)} chars in {elapsed:.2f}s",
                 extra={'processing_time': elapsed})

        self.last_result = CaptureResult(
            text=text,
            engine=engine_name,
            file_path=source,
            processing_time=elapsed,
        )
        return self.last_result

    def save_text(self, path: Union[str, Path], text: Optional[str] = None) -> Path:
        """Save ``text``, or the last extracted text, as UTF-8."""
        if text is None:
            text = self.last_result.text if self.last_result else ""
        written = save_text(path, text)
        self.logger.info(f"Saved {len(text)} chars to {written}")
        return written
