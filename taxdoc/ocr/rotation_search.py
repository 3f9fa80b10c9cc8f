"""Rotation-search OCR.

Photographed documents often arrive rotated by a quarter or half turn, and
OCR output degrades sharply off-orientation. Rather than detecting the
orientation up front, every cardinal rotation is recognised and the attempt
with the best confidence wins. A best-effort result is always returned,
even when every orientation yields next to no text.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from taxdoc.exceptions import OcrUnavailableError
from taxdoc.imaging.loader import CARDINAL_ANGLES, DocumentImage, rotate
from taxdoc.utils.logger import get_logger

from .tesseract_engine import OCRCapability

logger = get_logger(__name__)

# Punctuation that shows up on tax forms and counts as recognised output.
_FORM_PUNCTUATION = frozenset(".,:;-/$%()#&'\"")

# Non-space character count at which longer text stops raising the score.
_PROXY_SATURATION = 200


@dataclass(frozen=True)
class RotationAttempt:
    """OCR outcome for one orientation."""

    angle: int
    extracted_text: str
    confidence: float
    error: str | None = None


@dataclass(frozen=True)
class ProcessedRotatedImagesResult:
    """All rotation attempts for one document and the selected winner."""

    image_path: str
    best_angle: int
    best_text: str
    attempts: tuple[RotationAttempt, ...]

    @property
    def best_attempt(self) -> RotationAttempt:
        return next(a for a in self.attempts if a.angle == self.best_angle)


def text_volume(text: str) -> float:
    """Share of a full page of text produced, saturating at 1."""
    glyphs = sum(1 for c in text if not c.isspace())
    return min(1.0, glyphs / _PROXY_SATURATION)


def proxy_confidence(text: str) -> float:
    """Estimate OCR quality for engines that report no confidence.

    Combines the share of recognisable glyphs (letters, digits, common form
    punctuation) with how much text was produced.

    Args:
        text: Raw OCR output.

    Returns:
        Score in [0, 1]; 0 for empty text.
    """
    glyphs = [c for c in text if not c.isspace()]
    if not glyphs:
        return 0.0
    recognised = sum(1 for c in glyphs if c.isalnum() or c in _FORM_PUNCTUATION)
    return recognised / len(glyphs) * text_volume(text)


def select_best(attempts: list[RotationAttempt]) -> RotationAttempt:
    """Pick the highest-confidence attempt.

    Ties go to the lowest angle, so 0 wins whenever it is tied, and the
    choice does not depend on completion order.
    """
    if not attempts:
        raise ValueError("No rotation attempts to select from")
    return min(attempts, key=lambda a: (-a.confidence, a.angle))


class RotationSearchEngine:
    """Runs OCR at every cardinal rotation and keeps the best text.

    Args:
        capability: OCR backend, usually a ``TesseractEngine``.
        min_text_length: Stripped character count below which an attempt
            is considered empty. Only used for diagnostics; the best
            attempt is returned regardless.
        max_workers: Number of rotations recognised concurrently.
            ``1`` runs them sequentially.
    """

    def __init__(
        self,
        capability: OCRCapability,
        min_text_length: int = 10,
        max_workers: int = 4,
    ) -> None:
        self.capability = capability
        self.min_text_length = min_text_length
        self.max_workers = max_workers

    def _attempt(self, image: DocumentImage, angle: int) -> RotationAttempt:
        rotated = rotate(image, angle)
        result = self.capability.extract_text(rotated.pixels)
        # Engine confidence is scaled by how much text was read.
        if result.confidence is not None:
            confidence = result.confidence * text_volume(result.text)
        else:
            confidence = proxy_confidence(result.text)
        logger.debug(
            "Rotation %d: %d characters, confidence %.3f",
            angle,
            len(result.text.strip()),
            confidence,
        )
        return RotationAttempt(
            angle=angle,
            extracted_text=result.text,
            confidence=confidence,
        )

    def process_document(self, image: DocumentImage) -> ProcessedRotatedImagesResult:
        """Recognise a document at all four cardinal rotations.

        Args:
            image: Decoded document image.

        Returns:
            Every attempt in 0, 90, 180, 270 order and the selected winner.

        Raises:
            OcrUnavailableError: If OCR failed for every rotation.
        """
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [pool.submit(self._attempt, image, angle) for angle in CARDINAL_ANGLES]

        attempts: list[RotationAttempt] = []
        last_error: Exception | None = None
        for angle, future in zip(CARDINAL_ANGLES, futures):
            try:
                attempts.append(future.result())
            except Exception as exc:
                last_error = exc
                logger.warning("OCR failed for %s at %d degrees: %s", image.source, angle, exc)
                attempts.append(
                    RotationAttempt(angle=angle, extracted_text="", confidence=0.0, error=str(exc))
                )

        if all(a.error is not None for a in attempts):
            raise OcrUnavailableError(
                f"OCR failed for every rotation of {image.source or 'document'}"
            ) from last_error

        best = select_best(attempts)
        if all(len(a.extracted_text.strip()) < self.min_text_length for a in attempts):
            logger.warning(
                "No rotation of %s produced at least %d characters; "
                "returning best effort at %d degrees",
                image.source,
                self.min_text_length,
                best.angle,
            )

        logger.info(
            "Selected rotation %d for %s (confidence %.3f)",
            best.angle,
            image.source,
            best.confidence,
        )
        return ProcessedRotatedImagesResult(
            image_path=image.source,
            best_angle=best.angle,
            best_text=best.extracted_text,
            attempts=tuple(attempts),
        )
