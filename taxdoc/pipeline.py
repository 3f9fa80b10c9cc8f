"""Entry points used by the upload handler.

Ties the loader, blur gate, rotation search and field parser together for
the two processing modes, ``blur`` and ``ocr``. Each file runs as its own
independent pipeline; the batch helper reports one settled entry per file
so a single bad upload never sinks its siblings.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from taxdoc.extraction.parser import parse_ocr_result
from taxdoc.extraction.registry import MatcherRegistry, load_registry
from taxdoc.imaging.loader import load_image
from taxdoc.ocr.rotation_search import ProcessedRotatedImagesResult, RotationSearchEngine
from taxdoc.ocr.tesseract_engine import OCRCapability, TesseractEngine
from taxdoc.quality.sharpness import BlurCheckResult, BlurDetector
from taxdoc.utils.config import AppConfig
from taxdoc.utils.logger import get_logger

logger = get_logger(__name__)

ENGINES = ("blur", "ocr")
_MAX_BATCH_WORKERS = 8


@dataclass(frozen=True)
class FileOutcome:
    """Settled result of one file's pipeline."""

    file_path: str
    status: str
    value: dict[str, Any] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "fulfilled"


class DocumentProcessor:
    """Blur gate and OCR extraction for uploaded tax documents.

    The matcher registry is built here so that an invalid matcher
    definition stops start-up rather than failing a request.

    Args:
        config: Application configuration object.
        capability: OCR backend. Defaults to Tesseract configured from
            ``config.ocr``.
        registry: Document matchers. Defaults to the built-ins plus
            ``config.extraction.matchers_path``.
    """

    def __init__(
        self,
        config: AppConfig,
        capability: OCRCapability | None = None,
        registry: MatcherRegistry | None = None,
    ) -> None:
        self.config = config
        self.blur_detector = BlurDetector(
            threshold=config.blur.threshold,
            pdf_dpi=config.ocr.pdf_dpi,
        )
        if capability is None:
            capability = TesseractEngine(
                tesseract_cmd=config.ocr.tesseract_cmd,
                default_lang=config.ocr.default_lang,
                psm=config.ocr.psm,
            )
        self.ocr_engine = RotationSearchEngine(
            capability,
            min_text_length=config.ocr.min_text_length,
            max_workers=config.ocr.max_workers,
        )
        if registry is None:
            matchers_path = config.extraction.matchers_path
            registry = load_registry(Path(matchers_path) if matchers_path else None)
        self.registry = registry

    def run_blur_check(self, file_path: Path | str) -> BlurCheckResult:
        """Score a file for blur and tag it accepted or rejected."""
        return self.blur_detector.check(file_path)

    def run_ocr_extraction(self, file_path: Path | str) -> ProcessedRotatedImagesResult:
        """Load a file and recognise it at every cardinal rotation."""
        image = load_image(file_path, pdf_dpi=self.config.ocr.pdf_dpi)
        return self.ocr_engine.process_document(image)

    def extract_fields(self, text: str) -> dict[str, dict[str, Any]]:
        """Apply every registered matcher to recognised text."""
        return parse_ocr_result(text, self.registry.all())

    def process_file(self, file_path: Path | str, engine: str) -> dict[str, Any]:
        """Run one processing mode on a file and return a JSON-ready dict.

        Args:
            file_path: Saved upload to process.
            engine: ``"blur"`` or ``"ocr"``.

        Returns:
            For ``blur``: the blur status and report. For ``ocr``: the
            rotation search result and the extracted fields.

        Raises:
            ValueError: If ``engine`` is not a known mode.
            FileNotFoundError: If the file does not exist.
            ImageDecodeError: If the file cannot be decoded.
            OcrUnavailableError: If OCR failed at every rotation.
        """
        if engine == "blur":
            result = self.run_blur_check(file_path)
            return {"status": result.status.value, **asdict(result.report)}
        if engine == "ocr":
            processed = self.run_ocr_extraction(file_path)
            return {
                **asdict(processed),
                "fields": self.extract_fields(processed.best_text),
            }
        raise ValueError(f"Unknown engine '{engine}', expected one of {ENGINES}")

    def process_batch(
        self, file_paths: list[Path | str], engine: str
    ) -> list[FileOutcome]:
        """Process files independently and settle each outcome.

        Args:
            file_paths: Saved uploads to process.
            engine: ``"blur"`` or ``"ocr"``.

        Returns:
            One ``FileOutcome`` per input, in input order.
        """
        if engine not in ENGINES:
            raise ValueError(f"Unknown engine '{engine}', expected one of {ENGINES}")
        if not file_paths:
            return []

        with ThreadPoolExecutor(max_workers=min(len(file_paths), _MAX_BATCH_WORKERS)) as pool:
            futures = [pool.submit(self.process_file, path, engine) for path in file_paths]

        outcomes: list[FileOutcome] = []
        for path, future in zip(file_paths, futures):
            try:
                outcomes.append(
                    FileOutcome(file_path=str(path), status="fulfilled", value=future.result())
                )
            except Exception as exc:
                logger.error("Failed to process %s: %s", path, exc)
                outcomes.append(FileOutcome(file_path=str(path), status="rejected", error=str(exc)))

        logger.info(
            "Processed %d files with engine '%s': %d failed",
            len(outcomes),
            engine,
            sum(1 for o in outcomes if not o.ok),
        )
        return outcomes
