"""Image quality gate."""

from .sharpness import BlurCheckResult, BlurDetector, BlurReport, BlurStatus

__all__ = ["BlurCheckResult", "BlurDetector", "BlurReport", "BlurStatus"]
