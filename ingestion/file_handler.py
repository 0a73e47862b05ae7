"""Multipart upload receiving and temporary storage."""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Iterable, Optional
from fastapi import UploadFile
from core.config import settings
from core.exceptions import UploadTooLargeError
from core.logging import log
from core.utils import generate_upload_id, get_upload_path, validate_mime_type


@dataclass
class Upload:
    """A file part accepted for the duration of one request."""
    original_name: str
    stored_path: Path
    mime_type: str
    size_bytes: int


class UploadReceiver:
    """Accepts image uploads and stores them under unique temporary paths.
    
    Parts with a MIME type outside ``allowed_types`` are dropped: ``receive``
    returns None for them exactly as it does for a missing part.
    """
    
    def __init__(
        self,
        allowed_types: Optional[Iterable[str]] = None,
        max_size_bytes: Optional[int] = None,
        chunk_size: Optional[int] = None,
    ):
        self.allowed_types = set(allowed_types if allowed_types is not None else settings.ALLOWED_MIME_TYPES)
        self.max_size_bytes = max_size_bytes if max_size_bytes is not None else settings.max_file_size_bytes
        self.chunk_size = chunk_size or settings.UPLOAD_CHUNK_SIZE
    
    async def receive(self, file: Optional[UploadFile]) -> Optional[Upload]:
        """Store an uploaded part on disk.
        
        Args:
            file: The ``file`` form part, if any
            
        Returns:
            Upload: The stored upload, or None if no acceptable file was sent
            
        Raises:
            UploadTooLargeError: If the body exceeds the size limit
        """
        if file is None or not file.filename:
            log.info("No file part in request")
            return None
        
        if not validate_mime_type(file.content_type, self.allowed_types):
            log.info(f"Dropping upload {file.filename!r}: unsupported type {file.content_type!r}")
            return None
        
        stored_path = get_upload_path(generate_upload_id(), file.filename)
        size = 0
        try:
            with open(stored_path, "wb") as out:
                while chunk := await file.read(self.chunk_size):
                    size += len(chunk)
                    if size > self.max_size_bytes:
                        raise UploadTooLargeError(self.max_size_bytes)
                    out.write(chunk)
        except BaseException:
            self._remove(stored_path)
            raise
        
        log.info(f"File uploaded: {stored_path.name} ({file.content_type}, {size} bytes)")
        return Upload(
            original_name=file.filename,
            stored_path=stored_path,
            mime_type=file.content_type,
            size_bytes=size,
        )
    
    def cleanup(self, upload: Optional[Upload]) -> None:
        """Remove the stored file of an upload."""
        if upload is not None:
            self._remove(upload.stored_path)
    
    @asynccontextmanager
    async def stored_upload(self, file: Optional[UploadFile]) -> AsyncIterator[Optional[Upload]]:
        """Receive a file and remove it again when the block exits."""
        upload = await self.receive(file)
        try:
            yield upload
        finally:
            self.cleanup(upload)
    
    @staticmethod
    def _remove(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
            log.debug(f"Removed temporary file: {path}")
        except OSError as e:
            log.warning(f"Failed to remove temporary file {path}: {str(e)}")


_receiver: Optional[UploadReceiver] = None


def get_upload_receiver() -> UploadReceiver:
    """Get or initialize the shared upload receiver."""
    global _receiver
    if _receiver is None:
        _receiver = UploadReceiver()
    return _receiver
