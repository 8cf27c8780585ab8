"""
Tesseract language data installer.

Makes sure ``<lang>.traineddata`` files exist in a tessdata folder, fetching
missing ones from the tesseract-ocr GitHub repositories.
"""

import os
from pathlib import Path
from typing import Iterable, Optional, Union

import requests

from ..utils.logger import get_ocr_logger


TESSDATA_URLS = (
    "https://github.com/tesseract-ocr/tessdata/raw/main/{filename}",
    # tessdata_best mirror, used when the main repository fails
    "https://github.com/tesseract-ocr/tessdata_best/raw/main/{filename}",
)

TRAINEDDATA_SUFFIX = ".traineddata"


def traineddata_path(language: str, destination: Union[str, Path]) -> Path:
    """Location of a language's model file inside a tessdata folder."""
    return Path(destination) / f"{language}{TRAINEDDATA_SUFFIX}"


class TessdataInstaller:
    """Downloads missing Tesseract language models."""

    def __init__(self, session: Optional[requests.Session] = None,
                 urls: Iterable[str] = TESSDATA_URLS, timeout: float = 120.0):
        self.session = session or requests.Session()
        self.urls = tuple(urls)
        self.timeout = timeout
        self.logger = get_ocr_logger("tessdata")

    def ensure(self, languages: Iterable[str], destination: Union[str, Path]) -> bool:
        """
        Ensure the traineddata files for ``languages`` exist in ``destination``.

        Files already present are not fetched again. A download that fails on
        every URL leaves no file behind.

        Args:
            languages: Tesseract language codes, e.g. ["jpn", "eng"]
            destination: tessdata folder, created if missing

        Returns:
            True if every requested file is present after the call
        """
        languages = list(languages or [])
        if not languages:
            raise ValueError("languages required")
        if destination is None or str(destination) == "":
            raise ValueError("destination required")

        destination = Path(destination)
        destination.mkdir(parents=True, exist_ok=True)

        for language in languages:
            target = traineddata_path(language, destination)
            if target.exists():
                self.logger.debug(f"{target.name} already present")
                continue

            if not self._download(language, target):
                self.logger.error(f"Could not obtain {target.name} from any source")
                return False

        missing = [lang for lang in languages if not traineddata_path(lang, destination).exists()]
        if missing:
            self.logger.error(f"tessdata still missing after download: {', '.join(missing)}")
            return False

        return True

    def _download(self, language: str, target: Path) -> bool:
        """Try each source URL in turn; True once one of them succeeded."""
        filename = target.name

        for url_template in self.urls:
            url = url_template.format(filename=filename)
            self.logger.info(f"Downloading {filename} from {url}")

            try:
                response = self.session.get(url, timeout=self.timeout)
            except requests.RequestException as e:
                self.logger.warning(f"Download of {filename} failed: {e}")
                continue

            if not 200 <= response.status_code < 300:
                self.logger.warning(f"Download of {filename} returned HTTP {response.status_code}")
                continue

            try:
                self._write_atomic(target, response.content)
            except OSError as e:
                self.logger.error(f"Could not write {target}: {e}")
                return False
            self.logger.info(f"Saved {target} ({len(response.content)} bytes)")
            return True

        return False

    @staticmethod
    def _write_atomic(target: Path, content: bytes):
        """Write to a ``.part`` file and move it into place once complete."""
        partial = target.with_name(target.name + ".part")
        try:
            partial.write_bytes(content)
            os.replace(partial, target)
        finally:
            if partial.exists():
                partial.unlink()

    def close(self):
        self.session.close()


def ensure_tessdata(languages: Iterable[str], destination: Union[str, Path]) -> bool:
    """Ensure traineddata files exist, using a throwaway installer."""
    installer = TessdataInstaller()
    try:
        return installer.ensure(languages, destination)
    finally:
        installer.close()
