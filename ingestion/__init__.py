"""Upload ingestion module."""

from ingestion.file_handler import Upload, UploadReceiver, get_upload_receiver

__all__ = [
    'Upload',
    'UploadReceiver',
    'get_upload_receiver'
]
