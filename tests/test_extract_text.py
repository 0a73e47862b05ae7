"""Tests for the POST /extract-text endpoint."""

import os

import pytest
from fastapi.testclient import TestClient

from ingestion.file_handler import UploadReceiver, get_upload_receiver
from main import app
from ocr.extractor import ExtractionResult, TextExtractor, get_text_extractor
from conftest import FakeEngine

NO_FILE = {"success": False, "message": "No file uploaded. Only jpg and png types accepted"}
UNKNOWN_ERROR = {"success": False, "message": "Unknown error occured"}


class TestExtractTextSuccess:
    """Accepted uploads that the engine can read."""
    
    def test_png_returns_extracted_text(self, client, png_bytes):
        response = client.post("/extract-text", files={"file": ("photo.png", png_bytes, "image/png")})
        
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Image text extracted successfully",
            "data": "HELLO\nWORLD",
        }
    
    def test_jpeg_is_accepted(self, client, jpeg_bytes):
        response = client.post("/extract-text", files={"file": ("photo.jpg", jpeg_bytes, "image/jpeg")})
        
        assert response.status_code == 200
        assert response.json()["success"] is True
    
    def test_image_without_text_returns_empty_data(self, client, png_bytes, fake_engine):
        fake_engine.lines = []
        response = client.post("/extract-text", files={"file": ("blank.png", png_bytes, "image/png")})
        
        assert response.status_code == 200
        assert response.json()["data"] == ""
    
    def test_repeated_request_gives_same_outcome(self, client, png_bytes):
        first = client.post("/extract-text", files={"file": ("photo.png", png_bytes, "image/png")})
        second = client.post("/extract-text", files={"file": ("photo.png", png_bytes, "image/png")})
        
        assert first.json()["success"] == second.json()["success"]


class TestExtractTextNoFile:
    """Requests without an acceptable file part."""
    
    def test_missing_file_part(self, client, fake_engine):
        response = client.post("/extract-text")
        
        assert response.status_code == 400
        assert response.json() == NO_FILE
        assert fake_engine.calls == 0
    
    def test_other_form_fields_only(self, client):
        response = client.post("/extract-text", data={"note": "hello"})
        
        assert response.status_code == 400
        assert response.json() == NO_FILE
    
    def test_text_value_in_file_field(self, client, fake_engine):
        response = client.post("/extract-text", data={"file": "not-a-file"})
        
        assert response.status_code == 400
        assert response.json() == NO_FILE
        assert fake_engine.calls == 0
    
    @pytest.mark.parametrize("mime_type", ["image/gif", "application/pdf", "text/plain", "image/webp"])
    def test_unsupported_type_is_dropped(self, client, png_bytes, fake_engine, mime_type):
        response = client.post("/extract-text", files={"file": ("photo.png", png_bytes, mime_type)})
        
        assert response.status_code == 400
        assert response.json() == NO_FILE
        assert fake_engine.calls == 0
    
    def test_file_under_other_field_name(self, client, png_bytes):
        response = client.post("/extract-text", files={"image": ("photo.png", png_bytes, "image/png")})
        
        assert response.status_code == 400
        assert response.json() == NO_FILE


class TestExtractTextFailures:
    """Engine and orchestration failures map to the generic 400."""
    
    def test_corrupt_png(self, client, fake_engine):
        response = client.post("/extract-text", files={"file": ("photo.png", b"not really a png", "image/png")})
        
        assert response.status_code == 400
        assert response.json() == UNKNOWN_ERROR
        assert fake_engine.calls == 0
    
    def test_engine_error(self, client, png_bytes, fake_engine):
        fake_engine.error = RuntimeError("engine crashed")
        response = client.post("/extract-text", files={"file": ("photo.png", png_bytes, "image/png")})
        
        assert response.status_code == 400
        assert response.json() == UNKNOWN_ERROR
    
    def test_unexpected_exception_is_masked(self, client, png_bytes):
        class BrokenExtractor:
            async def extract_async(self, path):
                raise RuntimeError("unexpected")
        
        app.dependency_overrides[get_text_extractor] = lambda: BrokenExtractor()
        response = client.post("/extract-text", files={"file": ("photo.png", png_bytes, "image/png")})
        
        assert response.status_code == 400
        assert response.json() == UNKNOWN_ERROR
    
    def test_adapter_failure_result(self, client, png_bytes):
        class FailingExtractor:
            async def extract_async(self, path):
                return ExtractionResult.failed()
        
        app.dependency_overrides[get_text_extractor] = lambda: FailingExtractor()
        response = client.post("/extract-text", files={"file": ("photo.png", png_bytes, "image/png")})
        
        assert response.status_code == 400
        assert response.json() == UNKNOWN_ERROR
    
    def test_file_too_large(self, client, png_bytes, fake_engine, upload_dir):
        app.dependency_overrides[get_upload_receiver] = lambda: UploadReceiver(max_size_bytes=16, chunk_size=8)
        response = client.post("/extract-text", files={"file": ("photo.png", png_bytes, "image/png")})
        
        assert response.status_code == 413
        body = response.json()
        assert body["success"] is False
        assert body["message"].startswith("File too large")
        assert fake_engine.calls == 0
        assert list(upload_dir.iterdir()) == []
    
    def test_default_limit_accepts_exactly_five_mib(self, client, upload_dir):
        sizes = []
        
        class SizeRecordingExtractor:
            async def extract_async(self, path):
                sizes.append(path.stat().st_size)
                return ExtractionResult.ok("")
        
        app.dependency_overrides[get_text_extractor] = lambda: SizeRecordingExtractor()
        body = b"x" * (5 * 1024 * 1024)
        response = client.post("/extract-text", files={"file": ("big.png", body, "image/png")})
        
        assert response.status_code == 200
        assert sizes == [5 * 1024 * 1024]
    
    def test_default_limit_rejects_one_byte_over(self, client, fake_engine, upload_dir):
        body = b"x" * (5 * 1024 * 1024 + 1)
        response = client.post("/extract-text", files={"file": ("big.png", body, "image/png")})
        
        assert response.status_code == 413
        assert response.json() == {"success": False, "message": "File too large. Maximum size: 5MB"}
        assert fake_engine.calls == 0
        assert list(upload_dir.iterdir()) == []


class TestTemporaryFiles:
    """Stored uploads never outlive the request."""
    
    def test_removed_after_success(self, client, png_bytes, upload_dir):
        client.post("/extract-text", files={"file": ("photo.png", png_bytes, "image/png")})
        
        assert list(upload_dir.iterdir()) == []
    
    def test_removed_after_engine_failure(self, client, png_bytes, fake_engine, upload_dir):
        fake_engine.error = RuntimeError("engine crashed")
        client.post("/extract-text", files={"file": ("photo.png", png_bytes, "image/png")})
        
        assert list(upload_dir.iterdir()) == []
    
    def test_engine_sees_unique_path(self, client, png_bytes, upload_dir):
        seen = []
        
        class RecordingExtractor:
            async def extract_async(self, path):
                seen.append(path)
                assert path.exists()
                return ExtractionResult.ok("text")
        
        app.dependency_overrides[get_text_extractor] = lambda: RecordingExtractor()
        client.post("/extract-text", files={"file": ("photo.png", png_bytes, "image/png")})
        client.post("/extract-text", files={"file": ("photo.png", png_bytes, "image/png")})
        
        assert len(seen) == 2
        assert seen[0] != seen[1]
        assert all(p.parent == upload_dir for p in seen)
        assert all(p.name.endswith("_photo.png") for p in seen)


@pytest.mark.skipif(
    os.getenv("RUN_OCR_INTEGRATION") != "1",
    reason="set RUN_OCR_INTEGRATION=1 to run PaddleOCR end to end",
)
def test_real_engine_reads_hello(upload_dir, tmp_path):
    """End-to-end read of a rendered word with the real engine."""
    from PIL import Image, ImageDraw, ImageFont
    
    image = Image.new("RGB", (600, 200), color="white")
    draw = ImageDraw.Draw(image)
    draw.text((40, 50), "HELLO", fill="black", font=ImageFont.load_default(size=96))
    path = tmp_path / "hello.png"
    image.save(path)
    
    app.dependency_overrides.clear()
    with TestClient(app) as test_client:
        with open(path, "rb") as f:
            response = test_client.post("/extract-text", files={"file": ("hello.png", f, "image/png")})
    
    assert response.status_code == 200
    assert "HELLO" in response.json()["data"].replace(" ", "").upper()
