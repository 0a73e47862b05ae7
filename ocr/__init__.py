"""OCR module.

This module provides:
- TextExtractor: PaddleOCR-backed text extraction adapter
- ExtractionResult: success flag plus recognized text
"""

from ocr.extractor import ExtractionResult, TextExtractor, get_text_extractor

__all__ = [
    'ExtractionResult',
    'TextExtractor',
    'get_text_extractor'
]
