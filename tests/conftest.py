"""Shared test fixtures for the tax document test suite."""

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from taxdoc.ocr.tesseract_engine import OCRResult

W2_TEXT = (
    "a Employee's social security number\n123-45-6789\n"
    "b Employer identification number (EIN)\n12-3456789\n"
    "1 Wages, tips, other compensation\n55,000.00\n"
    "2 Federal income tax withheld\n6,250.00\n"
    "f Employee's address and ZIP code\n123 Main St, Springfield, IL 62701\n"
    "Form W-2 Wage and Tax Statement 2023\n"
)

ADP_TEXT = (
    "Company Code: RJ/ABC 12345678\n"
    "Period Ending: 01/15/2024\n"
    "Pay Date: 01/19/2024\n"
    "Gross Pay $2,500.00\n"
    "Federal Income Tax -250.00\n"
    "Social Security Tax -155.00\n"
    "Medicare Tax -36.25\n"
    "Net Pay $1,958.75\n"
)


class MarkerOCR:
    """Fake OCR that only reads text when a marker sits in the top-left corner.

    Stands in for Tesseract on synthetic documents: the marker is white,
    the rest black, so the upright orientation is detectable from pixels.
    """

    def __init__(
        self,
        upright_text: str,
        upright_confidence: float | None = None,
        garbage: str = "~|{ ¬",
        garbage_confidence: float | None = None,
    ) -> None:
        self.upright_text = upright_text
        self.upright_confidence = upright_confidence
        self.garbage = garbage
        self.garbage_confidence = garbage_confidence

    def extract_text(self, image: np.ndarray) -> OCRResult:
        h, w = image.shape[:2]
        if image[: h // 4, : w // 4].mean() > 127:
            return OCRResult(text=self.upright_text, confidence=self.upright_confidence)
        confidence = self.garbage_confidence
        if confidence is None and self.upright_confidence is not None:
            confidence = 0.0
        return OCRResult(text=self.garbage, confidence=confidence)


def make_marked_document(upside_down: bool = False) -> np.ndarray:
    """Create an 80x120 grayscale page with a white top-left marker."""
    image = np.zeros((80, 120), dtype=np.uint8)
    image[0:20, 0:30] = 255
    if upside_down:
        image = np.ascontiguousarray(image[::-1, ::-1])
    return image


def save_png(path: Path, image: np.ndarray) -> Path:
    """Write an array to ``path`` as PNG and return the path."""
    Image.fromarray(image).save(path)
    return path


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a simple synthetic grayscale test image."""
    image = np.zeros((200, 300), dtype=np.uint8)
    image[50:150, 50:250] = 255
    return image


@pytest.fixture
def sample_color_image() -> np.ndarray:
    """Create a simple synthetic RGB test image."""
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[50:150, 50:250] = (255, 255, 255)
    return image


@pytest.fixture
def checkerboard_image() -> np.ndarray:
    """Create a high-frequency checkerboard, which scores as very sharp."""
    tile = np.indices((200, 300)).sum(axis=0) % 2
    return (tile * 255).astype(np.uint8)


@pytest.fixture
def sharp_png(tmp_path: Path, checkerboard_image: np.ndarray) -> Path:
    return save_png(tmp_path / "sharp.png", checkerboard_image)


@pytest.fixture
def blank_png(tmp_path: Path) -> Path:
    return save_png(tmp_path / "blank.png", np.full((100, 100), 128, dtype=np.uint8))


@pytest.fixture
def corrupt_png(tmp_path: Path) -> Path:
    path = tmp_path / "corrupt.png"
    path.write_bytes(b"this is not an image")
    return path


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
