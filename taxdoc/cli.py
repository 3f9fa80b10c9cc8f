"""Command-line interface for blur screening and OCR field extraction.

Runs the same per-file pipelines as the upload handler over local files
and prints one settled JSON entry per file.
"""

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

from taxdoc.pipeline import ENGINES, DocumentProcessor
from taxdoc.utils.config import load_config
from taxdoc.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def run(
    engine: str,
    files: list[Path],
    config_path: Path | None = None,
) -> tuple[list[dict[str, object]], int]:
    """Process files with one engine.

    Args:
        engine: ``"blur"`` or ``"ocr"``.
        files: Files to process.
        config_path: YAML configuration file, or ``None`` for the default.

    Returns:
        Tuple of (settled results, number of failed files).
    """
    config = load_config(config_path)
    # stdout carries the JSON results.
    setup_logging(config.log_level, stream=sys.stderr)
    processor = DocumentProcessor(config)

    outcomes = processor.process_batch(list(files), engine)
    failed = sum(1 for o in outcomes if not o.ok)
    return [asdict(o) for o in outcomes], failed


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the selected engine.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Tax document blur check and OCR field extraction",
    )
    parser.add_argument("engine", choices=ENGINES, help="Processing mode")
    parser.add_argument("files", type=Path, nargs="+", help="Images or PDFs to process")
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="YAML config file (default: configs/config.yaml)",
    )
    parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    args = parser.parse_args(argv)

    results, failed = run(args.engine, args.files, args.config)
    output_str = json.dumps({"message": "Success!", "results": results}, indent=2)

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(output_str)
        print(f"Output written to {args.output}")
    else:
        print(output_str)

    if failed:
        logger.warning("%d of %d files could not be processed", failed, len(results))
        sys.exit(1)


if __name__ == "__main__":
    main()
