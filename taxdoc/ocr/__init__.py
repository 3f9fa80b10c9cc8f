"""OCR capability and rotation search."""

from .rotation_search import (
    ProcessedRotatedImagesResult,
    RotationAttempt,
    RotationSearchEngine,
)
from .tesseract_engine import OCRCapability, OCRResult, TesseractEngine

__all__ = [
    "OCRCapability",
    "OCRResult",
    "ProcessedRotatedImagesResult",
    "RotationAttempt",
    "RotationSearchEngine",
    "TesseractEngine",
]
