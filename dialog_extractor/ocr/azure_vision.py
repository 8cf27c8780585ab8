"""
Azure Computer Vision OCR Engine.

This module talks to the asynchronous Read API (v3.2): the image is submitted
to ``read/analyze``, the ``Operation-Location`` URL from the response is
polled until the job reports ``succeeded`` or ``failed``, and the per-line
text of every page is joined into one string.
"""

import json
import re
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

import requests

from .base import OCREngine
from ..core.config import OcrCredentials, load_credentials
from ..core.errors import (
    HTTPStatusError,
    NetworkError,
    OperationCancelledError,
    PollTimeoutError,
)
from ..utils.logger import get_ocr_logger


READ_ANALYZE_PATH = "vision/v3.2/read/analyze"
SUBSCRIPTION_KEY_HEADER = "Ocp-Apim-Subscription-Key"
OPERATION_LOCATION_HEADER = "Operation-Location"

# Matched on the raw body so that a terminal response which is not valid
# JSON still ends the polling loop.
_TERMINAL_STATUS = re.compile(r'"status"\s*:\s*"(succeeded|failed)"')


def flatten_read_result(payload: Any) -> str:
    """
    Join the line texts of a Read API result in document order.

    Walks ``analyzeResult.readResults[*].lines[*].text``; levels that are
    missing or of the wrong type contribute nothing.

    Args:
        payload: Decoded JSON body of a finished read operation

    Returns:
        Line texts separated by ``\\n``; empty texts before the first
        non-empty one are dropped
    """
    flattened = ""

    analyze = payload.get("analyzeResult") if isinstance(payload, dict) else None
    read_results = analyze.get("readResults") if isinstance(analyze, dict) else None
    if not isinstance(read_results, list):
        return ""

    for page in read_results:
        page_lines = page.get("lines") if isinstance(page, dict) else None
        if not isinstance(page_lines, list):
            continue
        for line in page_lines:
            if not isinstance(line, dict) or "text" not in line:
                continue
            text = line["text"]
            if text is None:
                text = ""
            elif not isinstance(text, str):
                continue
            # separators start once something has been emitted
            if flattened:
                flattened += "\n"
            flattened += text

    return flattened


class AzureReadClient:
    """HTTP client for the Azure Computer Vision Read API."""

    def __init__(self, credentials: OcrCredentials, language: str = "ja",
                 reading_order: str = "basic", poll_interval: float = 1.0,
                 poll_timeout: Optional[float] = 120.0,
                 max_poll_attempts: Optional[int] = None,
                 request_timeout: float = 30.0,
                 session: Optional[requests.Session] = None):
        """
        Args:
            credentials: Endpoint and subscription key
            language: Language hint passed to the service
            reading_order: "basic" or "natural"
            poll_interval: Seconds to wait before each status request
            poll_timeout: Give up polling after this many seconds (None: no deadline)
            max_poll_attempts: Give up after this many status requests (None: no limit)
            request_timeout: Timeout for each HTTP request in seconds
            session: Session to reuse, mainly for tests
        """
        self.credentials = credentials
        self.language = language
        self.reading_order = reading_order
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout
        self.max_poll_attempts = max_poll_attempts
        self.request_timeout = request_timeout
        self.logger = get_ocr_logger("azure_vision")

        self.session = session or requests.Session()
        self.session.headers.update({SUBSCRIPTION_KEY_HEADER: credentials.api_key})

    @property
    def analyze_url(self) -> str:
        endpoint = self.credentials.endpoint
        if not endpoint.endswith("/"):
            endpoint += "/"
        return (f"{endpoint}{READ_ANALYZE_PATH}"
                f"?language={self.language}&readingOrder={self.reading_order}")

    def recognize(self, image_bytes: bytes,
                  cancel_event: Optional[threading.Event] = None) -> str:
        """
        Recognize the text in an encoded image.

        Args:
            image_bytes: PNG/JPEG/BMP/... file content
            cancel_event: Set it from another thread to abandon polling

        Returns:
            Recognized lines joined with newlines, or the raw result body if
            it could not be decoded as JSON

        Raises:
            NetworkError: The service could not be reached
            HTTPStatusError: The service answered with a non-success status
            PollTimeoutError: The job did not finish within the polling limits
            OperationCancelledError: ``cancel_event`` was set
        """
        operation_location = self._submit(image_bytes)
        status, body = self._poll(operation_location, cancel_event)

        if status == "failed":
            self.logger.warning("Read operation reported status 'failed'")

        return self._parse_result(body)

    def recognize_file(self, image_path: Union[str, Path],
                       cancel_event: Optional[threading.Event] = None) -> str:
        """Read an image file and recognize it."""
        image_path = Path(image_path)
        if not image_path.is_file():
            raise FileNotFoundError(f"Image not found: {image_path}")
        return self.recognize(image_path.read_bytes(), cancel_event)

    def _submit(self, image_bytes: bytes) -> str:
        """Start a read operation and return its Operation-Location URL."""
        self.logger.info(f"Submitting {len(image_bytes)} bytes to Read API")
        response = self._request(
            "POST",
            self.analyze_url,
            data=image_bytes,
            headers={"Content-Type": "application/octet-stream"},
        )

        operation_location = response.headers.get(OPERATION_LOCATION_HEADER)
        if not operation_location:
            raise HTTPStatusError(
                f"Read API response has no {OPERATION_LOCATION_HEADER} header",
                status_code=response.status_code,
                body=response.text,
            )

        self.logger.debug(f"Read operation accepted: {operation_location}")
        return operation_location

    def _poll(self, operation_location: str,
              cancel_event: Optional[threading.Event]) -> tuple:
        """Poll until the operation reaches a terminal status; return (status, body)."""
        deadline = None
        if self.poll_timeout is not None:
            deadline = time.monotonic() + self.poll_timeout
        attempts = 0

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise OperationCancelledError("Read operation polling was cancelled")
            if self.max_poll_attempts is not None and attempts >= self.max_poll_attempts:
                raise PollTimeoutError(
                    f"Read operation not finished after {attempts} status requests"
                )
            if deadline is not None and time.monotonic() >= deadline:
                raise PollTimeoutError(
                    f"Read operation timed out after {self.poll_timeout} seconds"
                )

            self._wait(cancel_event)

            response = self._request("GET", operation_location, check_status=False)
            attempts += 1
            body = response.text

            if not 200 <= response.status_code < 300:
                self.logger.warning(
                    f"Status request returned HTTP {response.status_code} (poll {attempts}), retrying"
                )
                continue

            match = _TERMINAL_STATUS.search(body)
            if match:
                self.logger.info(f"Read operation {match.group(1)} after {attempts} polls")
                return match.group(1), body

            self.logger.debug(f"Read operation still running (poll {attempts})")

    def _wait(self, cancel_event: Optional[threading.Event]):
        if cancel_event is None:
            time.sleep(self.poll_interval)
        elif cancel_event.wait(self.poll_interval):
            raise OperationCancelledError("Read operation polling was cancelled")

    def _parse_result(self, body: str) -> str:
        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            self.logger.warning("Read result is not valid JSON, returning raw body")
            return body
        return flatten_read_result(payload)

    def _request(self, method: str, url: str, check_status: bool = True,
                 **kwargs) -> requests.Response:
        try:
            response = self.session.request(method, url, timeout=self.request_timeout, **kwargs)
        except requests.RequestException as e:
            raise NetworkError(f"{method} {url} failed: {e}") from e

        if check_status and not 200 <= response.status_code < 300:
            raise HTTPStatusError(
                f"{method} {url} returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        return response

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class AzureVisionEngine(OCREngine):
    """Azure Computer Vision OCR Engine."""

    def __init__(self, credentials: Optional[OcrCredentials] = None,
                 credentials_file: Optional[Union[str, Path]] = None, **kwargs):
        """
        Initialize Azure Vision OCR engine.

        Credentials are taken as given, or loaded from ``credentials_file``
        when the engine is opened.

        Args:
            credentials: Endpoint and subscription key
            credentials_file: JSON file with ``Endpoint`` and ``ApiKey``
            **kwargs: Options forwarded to ``AzureReadClient`` plus
                ``cancel_event``
        """
        super().__init__("azure_vision", **kwargs)
        if credentials is None and credentials_file is None:
            raise ValueError("credentials or credentials_file is required")

        self.credentials = credentials
        self.credentials_file = credentials_file
        self.cancel_event: Optional[threading.Event] = kwargs.pop("cancel_event", None)
        self.client_options: Dict[str, Any] = kwargs
        self.logger = get_ocr_logger("azure_vision")

        self.client: Optional[AzureReadClient] = None
        self._text: Optional[str] = None

    def is_available(self) -> bool:
        """Check that credentials are present; no request is made."""
        if self.credentials is not None:
            return True
        return Path(self.credentials_file).is_file()

    def open(self) -> None:
        credentials = self.credentials or load_credentials(self.credentials_file)
        self.client = AzureReadClient(credentials, **self.client_options)

    def process(self, image_path: Path) -> None:
        self._text = self.client.recognize(image_path.read_bytes(), self.cancel_event)

    def recognize_bytes(self, image_bytes: bytes) -> str:
        """Recognize an in-memory capture."""
        with self:
            self._text = self.client.recognize(image_bytes, self.cancel_event)
            return self.extract_text()

    def extract_text(self) -> str:
        return self._text or ""

    def release(self) -> None:
        if self.client is not None:
            self.client.close()
        self.client = None
        self._text = None

    def get_info(self) -> Dict[str, Any]:
        info = super().get_info()
        info.update({
            'endpoint': self.credentials.endpoint if self.credentials else None,
            'credentials_file': str(self.credentials_file) if self.credentials_file else None,
        })
        return info
