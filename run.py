"""Command-line entry point for the Question Import pipeline."""

import argparse
import json
import logging
import sys

from src.config import load_config
from src.ingestion.pipeline import DocumentImporter
from src.models.document import ImportMode, RawDocument

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Import exam papers and word lists as reviewable questions."
    )
    parser.add_argument("files", nargs="+", help="Word (.docx) or PDF files to import")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in ImportMode],
        default=ImportMode.MOCK_PAPER.value,
        help="Parsing mode (default: mock_paper)",
    )
    parser.add_argument(
        "--skip-ocr", action="store_true", help="Never fall back to OCR for PDFs"
    )
    parser.add_argument("--config", default="config.yaml", help="Path to config.yaml")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Import the given files and print the questions as JSON.

    Returns:
        Process exit code: 1 when no file could be imported.
    """
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    config = load_config(args.config)
    importer = DocumentImporter(config)

    docs = []
    for path in args.files:
        try:
            docs.append(RawDocument.from_path(path))
        except FileNotFoundError as exc:
            logger.error("%s", exc)

    result = importer.import_batch(docs, ImportMode(args.mode), skip_ocr=args.skip_ocr)
    print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))

    return 0 if result.imported_files else 1


if __name__ == "__main__":
    sys.exit(main())
