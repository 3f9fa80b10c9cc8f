"""Configuration management for the tax document pipeline.

Loads and validates YAML configuration. The blur threshold is an
empirically chosen default and is meant to be tuned per deployment.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class BlurConfig(BaseModel):
    """Configuration for the Laplacian-variance blur gate."""

    threshold: float = Field(default=300.0, ge=0.0)


class OCRConfig(BaseModel):
    """Configuration for Tesseract and the rotation search."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    psm: int = 3
    pdf_dpi: int = 300
    min_text_length: int = Field(default=10, ge=0)
    max_workers: int = Field(default=4, ge=1)


class ExtractionConfig(BaseModel):
    """Configuration for field extraction."""

    matchers_path: str | None = None


class AppConfig(BaseModel):
    """Top-level application configuration."""

    blur: BlurConfig = Field(default_factory=BlurConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration, or defaults when the
        file does not exist.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
