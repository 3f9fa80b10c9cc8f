"""Tesseract OCR capability.

Wraps pytesseract to turn a pixel buffer into text plus an average word
confidence, the signal the rotation search ranks orientations by.
"""

import shutil
from dataclasses import dataclass
from typing import Protocol

import numpy as np
import pytesseract
from PIL import Image

from taxdoc.exceptions import OcrUnavailableError
from taxdoc.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class OCRResult:
    """Text recognised in one image.

    ``confidence`` is in [0, 1], or ``None`` when the engine does not
    report one.
    """

    text: str
    confidence: float | None
    word_count: int = 0


class OCRCapability(Protocol):
    """Anything that can turn pixels into text."""

    def extract_text(self, image: np.ndarray) -> OCRResult: ...


class TesseractEngine:
    """Wrapper around Tesseract OCR for document text extraction.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language code.
        psm: Default Tesseract page segmentation mode.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
        psm: int = 3,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.tesseract_cmd = tesseract_cmd or "tesseract"
        self.default_lang = default_lang
        self.psm = psm

    def is_available(self) -> bool:
        """Return whether the Tesseract binary can be found."""
        return shutil.which(self.tesseract_cmd) is not None

    def extract_text(
        self,
        image: np.ndarray,
        lang: str | None = None,
        psm: int | None = None,
    ) -> OCRResult:
        """Extract text and average word confidence from an image.

        Args:
            image: Input image as a numpy array.
            lang: OCR language code. Defaults to the engine default.
            psm: Page segmentation mode. Defaults to the engine default.

        Returns:
            OCRResult with the full text and confidence normalised to [0, 1].

        Raises:
            OcrUnavailableError: If the Tesseract binary is not installed.
        """
        lang = lang or self.default_lang
        config = f"--psm {psm if psm is not None else self.psm}"
        pil_image = Image.fromarray(image)

        try:
            text = pytesseract.image_to_string(pil_image, lang=lang, config=config)
            data = pytesseract.image_to_data(
                pil_image,
                lang=lang,
                config=config,
                output_type=pytesseract.Output.DICT,
            )
        except pytesseract.TesseractNotFoundError as exc:
            raise OcrUnavailableError("Tesseract is not installed or not on PATH") from exc

        total_conf = 0.0
        word_count = 0
        for raw_conf, raw_text in zip(data["conf"], data["text"]):
            conf = float(raw_conf)
            if conf > 0 and raw_text.strip():
                total_conf += conf
                word_count += 1

        avg_conf = (total_conf / word_count / 100.0) if word_count > 0 else 0.0

        logger.debug(
            "OCR extracted %d words with average confidence %.2f",
            word_count,
            avg_conf,
        )
        return OCRResult(text=text, confidence=avg_conf, word_count=word_count)
