"""
Unit tests for OCR base classes and interfaces.

Tests the result structure, image path validation and the engine lifecycle
that every OCR engine shares.
"""

import pytest
from pathlib import Path

from dialog_extractor.core.errors import EngineAPIError, EngineNotFoundError
from dialog_extractor.ocr.base import (
    CaptureResult,
    OCREngine,
    validate_image_path,
)


class TestCaptureResult:
    """Test the CaptureResult dataclass."""

    def test_basic_result_creation(self):
        result = CaptureResult(text="Hello World", engine="test_engine", processing_time=1.5)

        assert result.text == "Hello World"
        assert result.engine == "test_engine"
        assert result.character_count == 11
        assert result.success is True
        assert result.error_message is None
        assert result.file_path is None

    def test_empty_text_is_valid(self):
        result = CaptureResult(text="", engine="test")
        assert result.success is True
        assert result.character_count == 0

    def test_manual_count_preserved(self):
        result = CaptureResult(text="Some text", engine="test", character_count=500)
        assert result.character_count == 500


class TestValidateImagePath:

    def test_existing_file(self, sample_image_file):
        assert validate_image_path(str(sample_image_file)) == Path(sample_image_file)

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_path(self, value):
        with pytest.raises(ValueError):
            validate_image_path(value)

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            validate_image_path(temp_dir / "missing.png")

    def test_directory_is_not_an_image(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            validate_image_path(temp_dir)


class MockOCREngine(OCREngine):
    """Mock OCR engine recording every lifecycle call."""

    def __init__(self, name="mock", available=True, fail_with=None, **kwargs):
        super().__init__(name, **kwargs)
        self._available = available
        self.fail_with = fail_with
        self.calls = []

    def is_available(self):
        return self._available

    def open(self):
        self.calls.append('open')
        if not self._available:
            raise EngineNotFoundError("mock engine missing")

    def process(self, image_path):
        self.calls.append(('process', image_path))
        if self.fail_with is not None:
            raise self.fail_with

    def extract_text(self):
        self.calls.append('extract_text')
        return "Mock result"

    def release(self):
        self.calls.append('release')


class TestOCREngine:
    """Test the abstract OCR engine base class."""

    def test_engine_with_config(self):
        engine = MockOCREngine("configured_engine", timeout=30)

        assert engine.name == "configured_engine"
        assert engine.config == {"timeout": 30}

    def test_recognize_runs_full_lifecycle(self, sample_image_file):
        engine = MockOCREngine()

        text = engine.recognize(sample_image_file)

        assert text == "Mock result"
        assert engine.calls == [
            'open', ('process', Path(sample_image_file)), 'extract_text', 'release'
        ]

    def test_recognize_missing_file_never_touches_engine(self, temp_dir):
        engine = MockOCREngine()

        with pytest.raises(FileNotFoundError):
            engine.recognize(temp_dir / "missing.png")

        assert engine.calls == []

    def test_release_runs_when_processing_fails(self, sample_image_file):
        engine = MockOCREngine(fail_with=EngineAPIError("boom"))

        with pytest.raises(EngineAPIError):
            engine.recognize(sample_image_file)

        assert engine.calls[-1] == 'release'

    def test_context_manager(self):
        engine = MockOCREngine()
        with engine as opened:
            assert opened is engine
        assert engine.calls == ['open', 'release']

    def test_process_image_success(self, sample_image_file):
        result = MockOCREngine().process_image(sample_image_file)

        assert result.success is True
        assert result.text == "Mock result"
        assert result.engine == "mock"
        assert result.file_path == str(sample_image_file)

    def test_process_image_reports_engine_not_found(self, sample_image_file):
        result = MockOCREngine(available=False).process_image(sample_image_file)

        assert result.success is False
        assert "mock engine missing" in result.error_message
        assert result.text == ""

    def test_process_file_nonexistent(self, temp_dir):
        result = MockOCREngine().process_file(temp_dir / "nonexistent.png")

        assert result.success is False
        assert "File not found" in result.error_message

    def test_process_file_unsupported_format(self, temp_dir):
        unsupported_file = temp_dir / "document.docx"
        unsupported_file.write_text("fake content")

        result = MockOCREngine().process_file(unsupported_file)

        assert result.success is False
        assert "Unsupported file type" in result.error_message

    def test_get_info(self):
        info = MockOCREngine("info_engine", dpi=300).get_info()

        assert info == {'name': 'info_engine', 'available': True, 'config': {'dpi': 300}}

    def test_string_representation(self):
        assert str(MockOCREngine("shown")) == "shown OCR Engine (available)"
        assert str(MockOCREngine("hidden", available=False)) == "hidden OCR Engine (unavailable)"

    def test_cannot_instantiate_abstract_engine(self):
        with pytest.raises(TypeError):
            OCREngine("abstract")
