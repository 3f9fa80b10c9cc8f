"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from taxdoc.utils.config import (
    AppConfig,
    BlurConfig,
    ExtractionConfig,
    OCRConfig,
    load_config,
)


class TestBlurConfig:
    """Tests for BlurConfig defaults and validation."""

    def test_default_threshold(self) -> None:
        assert BlurConfig().threshold == 300.0

    def test_override(self) -> None:
        assert BlurConfig(threshold=120.5).threshold == 120.5

    def test_negative_threshold_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BlurConfig(threshold=-1.0)


class TestOCRConfig:
    """Tests for OCRConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = OCRConfig()
        assert cfg.default_lang == "eng"
        assert cfg.psm == 3
        assert cfg.pdf_dpi == 300
        assert cfg.tesseract_cmd is None
        assert cfg.min_text_length == 10
        assert cfg.max_workers == 4

    def test_zero_workers_rejected(self) -> None:
        with pytest.raises(ValidationError):
            OCRConfig(max_workers=0)


class TestAppConfig:
    """Tests for the top-level AppConfig."""

    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert isinstance(cfg.blur, BlurConfig)
        assert isinstance(cfg.ocr, OCRConfig)
        assert isinstance(cfg.extraction, ExtractionConfig)
        assert cfg.extraction.matchers_path is None
        assert cfg.log_level == "INFO"

    def test_independent_instances(self) -> None:
        strict = AppConfig(blur=BlurConfig(threshold=500.0))
        lenient = AppConfig(blur=BlurConfig(threshold=50.0))
        assert strict.blur.threshold == 500.0
        assert lenient.blur.threshold == 50.0


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_shipped_config(self, config_dir: Path) -> None:
        cfg = load_config(config_dir / "config.yaml")
        assert cfg.blur.threshold == 300.0
        assert cfg.ocr.default_lang == "eng"

    def test_load_missing_file_returns_defaults(self) -> None:
        cfg = load_config(Path("/nonexistent/path/config.yaml"))
        assert cfg == AppConfig()

    def test_load_custom_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "blur": {"threshold": 150.0},
            "ocr": {"default_lang": "spa", "max_workers": 1},
            "log_level": "DEBUG",
        }
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump(config_data))

        cfg = load_config(config_file)
        assert cfg.blur.threshold == 150.0
        assert cfg.ocr.default_lang == "spa"
        assert cfg.ocr.max_workers == 1
        assert cfg.log_level == "DEBUG"

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        assert isinstance(load_config(config_file), AppConfig)
