"""Core modules for the Image OCR service."""
