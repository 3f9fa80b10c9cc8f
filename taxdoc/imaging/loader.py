"""Document image loading and cardinal rotation.

Decodes image files (and the first page of PDFs) into read-only numpy
buffers with normalised 8-bit colour depth. Rotation always returns a new
``DocumentImage`` so concurrent rotation attempts never share a mutable
buffer.
"""

from dataclasses import dataclass
from pathlib import Path

import cv2
import numpy as np
from pdf2image import convert_from_path
from pdf2image.exceptions import (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFSyntaxError,
)
from PIL import Image, UnidentifiedImageError

from taxdoc.exceptions import ImageDecodeError
from taxdoc.utils.logger import get_logger

logger = get_logger(__name__)

CARDINAL_ANGLES: tuple[int, ...] = (0, 90, 180, 270)

# Modes collapsed to 8-bit grayscale; everything else becomes 8-bit RGB.
_GRAYSCALE_MODES = {"1", "L", "LA", "I", "I;16", "I;16B", "I;16L", "F"}

_ROTATE_CODES = {
    90: cv2.ROTATE_90_CLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


@dataclass(frozen=True, eq=False)
class DocumentImage:
    """Decoded document image at a given clockwise orientation."""

    pixels: np.ndarray
    width: int
    height: int
    channels: int
    angle: int = 0
    source: str = ""

    def grayscale(self) -> np.ndarray:
        """Return a single-channel intensity view of the pixels."""
        if self.channels == 1:
            return self.pixels
        return cv2.cvtColor(self.pixels, cv2.COLOR_RGB2GRAY)


def _freeze(pixels: np.ndarray) -> np.ndarray:
    pixels = np.array(pixels, dtype=np.uint8, order="C")
    pixels.setflags(write=False)
    return pixels


def from_array(pixels: np.ndarray, source: str = "", angle: int = 0) -> DocumentImage:
    """Wrap an 8-bit grayscale or RGB array in a ``DocumentImage``.

    Args:
        pixels: Array of shape (H, W) or (H, W, 3).
        source: Path or label the pixels came from.
        angle: Orientation the pixels are already rotated to.

    Returns:
        A read-only document image.
    """
    if pixels.ndim not in (2, 3) or (pixels.ndim == 3 and pixels.shape[2] != 3):
        raise ValueError(f"Unsupported pixel array shape {pixels.shape}")
    frozen = _freeze(pixels)
    return DocumentImage(
        pixels=frozen,
        width=int(frozen.shape[1]),
        height=int(frozen.shape[0]),
        channels=1 if frozen.ndim == 2 else 3,
        angle=angle % 360,
        source=source,
    )


def _normalise(image: Image.Image) -> np.ndarray:
    target = "L" if image.mode in _GRAYSCALE_MODES else "RGB"
    if image.mode != target:
        image = image.convert(target)
    return np.array(image, dtype=np.uint8)


def _decode_pdf(path: Path, dpi: int) -> Image.Image:
    try:
        pages = convert_from_path(str(path), dpi=dpi, first_page=1, last_page=1)
    except (PDFPageCountError, PDFSyntaxError, PDFInfoNotInstalledError) as exc:
        raise ImageDecodeError(str(path), str(exc)) from exc
    if not pages:
        raise ImageDecodeError(str(path), "PDF has no pages")
    return pages[0]


def load_image(path: Path | str, pdf_dpi: int = 300) -> DocumentImage:
    """Decode a file into a ``DocumentImage`` at orientation 0.

    Args:
        path: Image file (PNG, JPEG, TIFF, ...) or PDF. Only the first
            page of a PDF is rendered.
        pdf_dpi: Rendering resolution for PDF input.

    Returns:
        The decoded image with normalised colour depth.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ImageDecodeError: If the file is not a decodable image.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Document not found: {path}")

    if path.suffix.lower() == ".pdf":
        pixels = _normalise(_decode_pdf(path, pdf_dpi))
    else:
        try:
            with Image.open(path) as img:
                img.load()
                pixels = _normalise(img)
        except UnidentifiedImageError as exc:
            raise ImageDecodeError(str(path), "unrecognised image format") from exc
        except Image.DecompressionBombError as exc:
            raise ImageDecodeError(str(path), "image exceeds the pixel limit") from exc
        except (OSError, ValueError, SyntaxError, EOFError) as exc:
            raise ImageDecodeError(str(path), str(exc)) from exc

    image = from_array(pixels, source=str(path))
    logger.debug(
        "Loaded %s (%dx%d, %d channel(s))",
        path,
        image.width,
        image.height,
        image.channels,
    )
    return image


def rotate(image: DocumentImage, angle: int) -> DocumentImage:
    """Rotate an image clockwise by a cardinal angle.

    Args:
        image: Image to rotate. It is left untouched.
        angle: Multiple of 90 degrees; taken modulo 360.

    Returns:
        A new ``DocumentImage`` whose ``angle`` is the cumulative
        orientation.

    Raises:
        ValueError: If ``angle`` is not a multiple of 90.
    """
    step = angle % 360
    if step not in CARDINAL_ANGLES:
        raise ValueError(f"Only cardinal rotations are supported, got {angle}")

    pixels = image.pixels if step == 0 else cv2.rotate(image.pixels, _ROTATE_CODES[step])
    return from_array(pixels, source=image.source, angle=image.angle + step)
