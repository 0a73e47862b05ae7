"""Shared fixtures for the Image OCR service tests."""

import io
import os
import threading
import time

import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Console logging only while testing
os.environ.setdefault("LOG_FILE", "")

from core.config import settings
from ingestion.file_handler import UploadReceiver, get_upload_receiver
from main import app
from ocr.extractor import TextExtractor, get_text_extractor


class FakeEngine:
    """Stands in for PaddleOCR, answering in the 3.x result shape."""
    
    def __init__(self, lines=None, error=None, delay=0.0):
        self.lines = lines if lines is not None else []
        self.error = error
        self.delay = delay
        self.calls = 0
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()
    
    def predict(self, image):
        with self._lock:
            self.calls += 1
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                time.sleep(self.delay)
            if self.error is not None:
                raise self.error
            return [{"rec_texts": list(self.lines), "rec_scores": [0.99] * len(self.lines)}]
        finally:
            with self._lock:
                self.active -= 1


def make_image_bytes(fmt="PNG", size=(64, 32)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color="white").save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Point uploads at an isolated directory."""
    directory = tmp_path / "uploads"
    directory.mkdir()
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(directory))
    return directory


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes("JPEG")


@pytest.fixture
def fake_engine():
    return FakeEngine(lines=["HELLO", "WORLD"])


@pytest.fixture
def client(upload_dir, fake_engine):
    """Test client whose extractor uses the fake engine."""
    extractor = TextExtractor(engine=fake_engine, max_concurrency=2)
    app.dependency_overrides[get_text_extractor] = lambda: extractor
    app.dependency_overrides[get_upload_receiver] = lambda: UploadReceiver()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
