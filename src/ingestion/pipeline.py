"""Import pipeline: document in, reviewable question list out."""

import logging
from collections.abc import Iterable

from src.config import AppConfig
from src.errors import DocumentImportError
from src.ingestion.classifier import classify
from src.ingestion.cleaner import clean, strip_embedded_header
from src.ingestion.extractor import ProgressCallback, TextExtractor
from src.ingestion.recitation import parse_recitation
from src.ingestion.sections import isolate
from src.ingestion.segmenter import segment
from src.models.document import ImportMode, RawDocument
from src.models.question import SOURCE_TAG, ParsedQuestion, make_tag
from src.models.results import BatchImportResult, ImportFailure
from src.ocr.client import OCRClient

logger = logging.getLogger(__name__)


class DocumentImporter:
    """Runs uploaded documents through extraction and the mode's parser.

    ``mock_paper`` and ``error_set`` go through cleaning, section isolation,
    segmentation and classification. ``recitation`` hands the raw text to
    the word-list parser.

    Args:
        config: Root AppConfig.
        extractor: Optional pre-built TextExtractor. If None, one is built
            from config, with an OCR client when an endpoint is configured.
    """

    def __init__(self, config: AppConfig, extractor: TextExtractor | None = None) -> None:
        self._config = config
        if extractor is None:
            ocr_client = OCRClient(config.ocr) if config.ocr.api_url else None
            extractor = TextExtractor(config.extraction, ocr_client)
        self._extractor = extractor

    def parse_text(
        self,
        text: str,
        mode: ImportMode,
        source: str | None = None,
    ) -> list[ParsedQuestion]:
        """Parse already extracted text into questions.

        Args:
            text: Raw document text.
            mode: Parsing mode.
            source: Optional filename recorded as a ``Source:`` tag.

        Returns:
            Questions in document order.
        """
        if mode is ImportMode.RECITATION:
            questions = parse_recitation(text)
        else:
            questions = self._parse_paper(text)

        if source:
            tag = make_tag(SOURCE_TAG, source)
            for question in questions:
                question.add_tag(tag)

        logger.info("Parsed %d questions (%s)", len(questions), mode.value)
        return questions

    def _parse_paper(self, text: str) -> list[ParsedQuestion]:
        section = isolate(clean(text, truncate_answer_key_section=True))
        questions = []
        for unit in segment(section):
            unit = strip_embedded_header(unit)
            if unit:
                questions.append(classify(unit, self._config.classifier))
        return questions

    def import_document(
        self,
        doc: RawDocument,
        mode: ImportMode,
        skip_ocr: bool = False,
        progress: ProgressCallback | None = None,
    ) -> list[ParsedQuestion]:
        """Extract and parse one document.

        Raises:
            DocumentImportError: If the document cannot be read.
        """
        logger.info("Importing %s as %s", doc.filename or "<upload>", mode.value)
        text = self._extractor.extract(doc, progress=progress, skip_ocr=skip_ocr)
        return self.parse_text(text, mode, source=doc.filename or None)

    def import_batch(
        self,
        docs: Iterable[RawDocument],
        mode: ImportMode,
        skip_ocr: bool = False,
    ) -> BatchImportResult:
        """Import documents one at a time; a failed document never aborts the batch.

        Args:
            docs: Documents to import, processed sequentially.
            mode: Parsing mode applied to every document.
            skip_ocr: Never escalate PDFs to OCR.

        Returns:
            BatchImportResult with the questions of every imported document,
            in document order, and one ImportFailure per skipped document.
        """
        result = BatchImportResult()
        for doc in docs:
            name = doc.filename or "<upload>"
            try:
                questions = self.import_document(doc, mode, skip_ocr=skip_ocr)
            except DocumentImportError as exc:
                logger.error("Skipping %s: %s", name, exc)
                result.failures.append(ImportFailure(filename=name, error=str(exc)))
                continue
            result.questions.extend(questions)
            result.imported_files.append(name)

        logger.info(
            "Batch import finished: %d questions from %d files, %d failed",
            len(result.questions),
            len(result.imported_files),
            len(result.failures),
        )
        return result
