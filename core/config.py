"""Configuration management for the Image OCR service."""

import tempfile
from pathlib import Path
from typing import List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # API Settings
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    RELOAD: bool = False
    
    # Upload Settings
    UPLOAD_DIR: str = tempfile.gettempdir()
    MAX_FILE_SIZE_MB: int = 5
    ALLOWED_MIME_TYPES: List[str] = ["image/jpeg", "image/png"]
    UPLOAD_CHUNK_SIZE: int = 1024 * 1024  # Bytes read per chunk while storing
    
    # OCR Settings
    OCR_LANG: str = "en"  # PaddleOCR language model
    OCR_MAX_CONCURRENCY: int = 2  # Concurrent OCR jobs allowed in the worker pool
    
    # Demo outbound call
    DEMO_API_URL: str = "https://httpbin.org"
    DEMO_API_TIMEOUT: float = 10.0
    
    # Keep-alive (0 disables)
    SELF_PING_URL: str = "http://localhost:3000"
    SELF_PING_INTERVAL_SECONDS: int = 0
    
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "./logs/app.log"
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "7 days"
    
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
    
    @property
    def max_file_size_bytes(self) -> int:
        return self.MAX_FILE_SIZE_MB * 1024 * 1024


# Global settings instance
settings = Settings()


def ensure_directories():
    """Create all required directories if they don't exist."""
    directories = [settings.UPLOAD_DIR]
    if settings.LOG_FILE:
        directories.append(Path(settings.LOG_FILE).parent)
    
    for directory in directories:
        Path(directory).mkdir(parents=True, exist_ok=True)


# Initialize directories on import
ensure_directories()
