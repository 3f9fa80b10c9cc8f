"""Image decoding and orientation helpers."""

from .loader import DocumentImage, load_image, rotate

__all__ = ["DocumentImage", "load_image", "rotate"]
