"""Utility functions for the Image OCR service."""

import re
import secrets
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional
import numpy as np
from PIL import Image


_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def generate_upload_id() -> str:
    """Generate a unique upload ID.
    
    Format: upload_{timestamp}_{random}
    
    Returns:
        str: Unique upload identifier
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    random_str = secrets.token_hex(4)
    return f"upload_{timestamp}_{random_str}"


def sanitize_filename(filename: Optional[str]) -> str:
    """Reduce a client-supplied filename to a safe basename.
    
    Directory components are dropped and characters outside
    ``[A-Za-z0-9._-]`` are replaced with underscores.
    
    Args:
        filename: Original filename from the multipart part (may be None)
        
    Returns:
        str: Safe filename, ``upload`` when nothing usable remains
    """
    name = Path((filename or "").replace("\\", "/")).name
    name = _UNSAFE_FILENAME_CHARS.sub("_", name).strip("._")
    return name or "upload"


def get_upload_path(upload_id: str, original_name: Optional[str]) -> Path:
    """Get the storage path for an uploaded file.
    
    Args:
        upload_id: Upload identifier
        original_name: Client-supplied filename
        
    Returns:
        Path: Full path inside the upload directory
    """
    from core.config import settings
    return Path(settings.UPLOAD_DIR) / f"{upload_id}_{sanitize_filename(original_name)}"


def validate_mime_type(mime_type: Optional[str], allowed: Iterable[str]) -> bool:
    """Validate that a MIME type is one of the accepted types.
    
    Parameters such as ``; charset=...`` are ignored.
    
    Args:
        mime_type: Declared content type of the part
        allowed: Accepted MIME types
        
    Returns:
        bool: True if the type is accepted
    """
    if not mime_type:
        return False
    base_type = mime_type.split(";", 1)[0].strip().lower()
    return base_type in {a.lower() for a in allowed}


def image_to_array(image: Image.Image) -> np.ndarray:
    """Convert PIL Image to numpy array.
    
    Args:
        image: PIL Image object
        
    Returns:
        np.ndarray: Image as numpy array (RGB)
    """
    return np.array(image.convert('RGB'))
