"""Text extraction adapter around the PaddleOCR engine.

Recognition failures never escape this module: every error is logged and
reported as a failed ``ExtractionResult`` so callers can answer with a
client-side error instead of a server fault.
"""

import asyncio
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Union
import cv2
from fastapi.concurrency import run_in_threadpool
from PIL import Image, ImageOps
from core.config import settings
from core.logging import log
from core.utils import image_to_array

# PaddleOCR import (PaddlePaddle framework)
try:
    from paddleocr import PaddleOCR
    PADDLEOCR_AVAILABLE = True
except ImportError as e:
    PADDLEOCR_AVAILABLE = False
    log.warning(f"PaddleOCR not installed. Text extraction will be unavailable. Error: {str(e)}")
    log.warning("Install with: pip install paddlepaddle paddleocr")


@dataclass
class ExtractionResult:
    """Outcome of one extraction; ``text`` is only set on success."""
    succeeded: bool
    text: Optional[str] = None

    @classmethod
    def ok(cls, text: str) -> "ExtractionResult":
        return cls(succeeded=True, text=text)

    @classmethod
    def failed(cls) -> "ExtractionResult":
        return cls(succeeded=False)


def parse_ocr_lines(result: Any) -> Optional[List[str]]:
    """Collect recognized text lines from a PaddleOCR result.

    Handles both result shapes PaddleOCR produces:
    - 3.x: list of OCRResult mappings carrying ``rec_texts``
    - 2.x: ``[[ [bbox], (text, confidence) ], ...]`` wrapped per page

    Args:
        result: Raw value returned by the engine

    Returns:
        list: Text lines in engine order, or None if the engine returned
        nothing (2.x does this for images it cannot read)
    """
    if result is None:
        return None

    lines: List[str] = []
    pages = result if isinstance(result, (list, tuple)) else [result]
    for page in pages:
        if page is None:
            continue
        # OCRResult / dict format
        if hasattr(page, 'keys') and 'rec_texts' in page:
            lines.extend(str(t) for t in (page['rec_texts'] or []))
        elif hasattr(page, 'rec_texts'):
            lines.extend(str(t) for t in (page.rec_texts or []))
        # Old format: list of [bbox, (text, confidence)] per page
        elif isinstance(page, (list, tuple)):
            for item in page:
                if isinstance(item, (list, tuple)) and len(item) >= 2:
                    text_info = item[1]
                    if isinstance(text_info, (list, tuple)) and text_info:
                        lines.append(str(text_info[0]))
    return lines


class TextExtractor:
    """English OCR adapter with bounded concurrency.

    The engine is created once, on first use, and inference calls on it
    are serialized since Paddle predictors are not thread-safe. Image
    decoding still runs in parallel up to ``max_concurrency``. Pass
    ``engine`` to supply an object exposing ``predict(image)`` or
    ``ocr(image)`` instead of PaddleOCR.
    """

    def __init__(
        self,
        lang: Optional[str] = None,
        max_concurrency: Optional[int] = None,
        engine: Any = None,
    ):
        self.lang = lang or settings.OCR_LANG
        self.max_concurrency = max(1, max_concurrency or settings.OCR_MAX_CONCURRENCY)
        self.engine = engine
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._engine_lock = threading.Lock()
        self._inference_lock = threading.Lock()

    def _get_engine(self) -> Any:
        if self.engine is None:
            with self._engine_lock:
                if self.engine is None:
                    if not PADDLEOCR_AVAILABLE:
                        raise RuntimeError("PaddleOCR is not installed")
                    log.info(f"Initializing PaddleOCR engine (lang={self.lang})...")
                    self.engine = PaddleOCR(lang=self.lang)
                    log.info("PaddleOCR engine initialized")
        return self.engine

    def _run_engine(self, image: Image.Image) -> Any:
        engine = self._get_engine()
        img_bgr = cv2.cvtColor(image_to_array(image), cv2.COLOR_RGB2BGR)
        with self._inference_lock:
            # predict() is the 3.x API, ocr() the 2.x one
            if hasattr(engine, 'predict'):
                return engine.predict(img_bgr)
            return engine.ocr(img_bgr)

    def extract(self, path: Union[str, Path]) -> ExtractionResult:
        """Recognize the text in an image file.

        Args:
            path: Path of the stored image

        Returns:
            ExtractionResult: Joined text lines, or a failed result
        """
        started = time.perf_counter()
        try:
            with Image.open(path) as img:
                image = ImageOps.exif_transpose(img).convert('RGB')
            log.debug(f"Image loaded for OCR: {Path(path).name} {image.size}")

            result = self._run_engine(image)
            lines = parse_ocr_lines(result)
            if lines is None:
                log.error(f"OCR engine returned no result for {Path(path).name}")
                return ExtractionResult.failed()

            log.debug(f"OCR recognized {len(lines)} line(s) in {time.perf_counter() - started:.2f}s")
            return ExtractionResult.ok("\n".join(lines))
        except Exception as e:
            log.error(f"Error during OCR processing of {Path(path).name}: {str(e)}")
            return ExtractionResult.failed()

    async def extract_async(self, path: Union[str, Path]) -> ExtractionResult:
        """Run ``extract`` in the worker pool, at most ``max_concurrency`` at a time."""
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.max_concurrency)
        async with self._semaphore:
            return await run_in_threadpool(self.extract, path)


_extractor: Optional[TextExtractor] = None


def get_text_extractor() -> TextExtractor:
    """Get or initialize the shared text extractor (singleton)."""
    global _extractor
    if _extractor is None:
        _extractor = TextExtractor()
    return _extractor
