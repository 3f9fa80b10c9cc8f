"""Laplacian-variance blur detection for uploaded document photos.

The variance of a Laplacian-filtered grayscale image is high when the image
has crisp edges and low when it is out of focus. The threshold separating
the two is an empirical, tunable value rather than a derived constant; the
300.0 default came from a handful of sample uploads.
"""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

import cv2
import numpy as np

from taxdoc.imaging.loader import load_image
from taxdoc.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_BLUR_THRESHOLD = 300.0


class BlurStatus(StrEnum):
    """Outcome of the blur gate."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class BlurReport:
    """Sharpness score of one image and its classification."""

    image_path: str
    score: float
    is_blurry: bool


@dataclass(frozen=True)
class BlurCheckResult:
    """Tagged blur gate outcome; both variants carry the report."""

    status: BlurStatus
    report: BlurReport

    @property
    def accepted(self) -> bool:
        return self.status is BlurStatus.ACCEPTED


def calculate_sharpness(image: np.ndarray) -> float:
    """Calculate image sharpness using Laplacian variance.

    Args:
        image: Input image (RGB or grayscale).

    Returns:
        Sharpness score (higher means sharper). A uniform image scores 0.
    """
    gray = cv2.cvtColor(image, cv2.COLOR_RGB2GRAY) if image.ndim == 3 else image
    return float(cv2.Laplacian(gray, cv2.CV_64F).var())


class BlurDetector:
    """Classifies images as blurry when their sharpness is below a threshold.

    Holds no state besides the threshold, so a single instance can be
    shared by concurrent callers.

    Args:
        threshold: Minimum Laplacian variance for an image to count as
            sharp. Scores equal to the threshold are not blurry.
        pdf_dpi: Rendering resolution used when the input is a PDF.
    """

    def __init__(self, threshold: float = DEFAULT_BLUR_THRESHOLD, pdf_dpi: int = 300) -> None:
        if threshold < 0:
            raise ValueError(f"Blur threshold must be non-negative, got {threshold}")
        self.threshold = threshold
        self.pdf_dpi = pdf_dpi

    def is_blurry(self, score: float) -> bool:
        return score < self.threshold

    def analyse(self, image_path: Path | str) -> BlurReport:
        """Score an image file.

        Args:
            image_path: Path of the image to score.

        Returns:
            The blur report for the image.

        Raises:
            FileNotFoundError: If the file does not exist.
            ImageDecodeError: If the file cannot be decoded.
        """
        image = load_image(image_path, pdf_dpi=self.pdf_dpi)
        score = calculate_sharpness(image.grayscale())
        report = BlurReport(
            image_path=str(image_path),
            score=score,
            is_blurry=self.is_blurry(score),
        )
        logger.info(
            "File [%s] is blurry? %s with %.2f",
            report.image_path,
            "yes" if report.is_blurry else "no",
            report.score,
        )
        return report

    def check(self, image_path: Path | str) -> BlurCheckResult:
        """Run the blur gate and tag the result as accepted or rejected."""
        report = self.analyse(image_path)
        status = BlurStatus.REJECTED if report.is_blurry else BlurStatus.ACCEPTED
        return BlurCheckResult(status=status, report=report)
