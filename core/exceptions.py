"""Domain exceptions for the Image OCR service."""


class ImageOCRError(Exception):
    """Base class for errors raised by the service."""


class UploadTooLargeError(ImageOCRError):
    """Raised when an uploaded file exceeds the configured size limit."""
    
    def __init__(self, max_size_bytes: int):
        self.max_size_bytes = max_size_bytes
        super().__init__(f"File too large. Maximum size: {max_size_bytes / (1024 * 1024):g}MB")
