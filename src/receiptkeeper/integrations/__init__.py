"""Receiptkeeper integrations module."""

from receiptkeeper.integrations.local_export import LocalExporter
from receiptkeeper.integrations.ocr import (
    OCREngine,
    OCREngineError,
    UnsupportedLanguageError,
)

__all__ = [
    "LocalExporter",
    "OCREngine",
    "OCREngineError",
    "UnsupportedLanguageError",
]
