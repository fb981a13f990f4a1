"""Raw text extraction from Word and PDF documents with OCR fallback."""

import base64
import io
import logging
import re
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, TypeVar

from PIL import Image

from src.config import ExtractionConfig
from src.errors import (
    ExtractionError,
    ExtractionTimeoutError,
    PageOCRError,
    UnsupportedFormatError,
)
from src.models.document import DocumentKind, RawDocument
from src.models.results import ExtractionProgress
from src.ocr.client import OCRClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

ProgressCallback = Callable[[ExtractionProgress], None]

# Glyph soup left by PDFs with broken font encodings
GARBAGE_TEXT_RE = re.compile(r"\(cid:\d+\)|\ufffd{2,}|[\ue000-\uf8ff]{3,}")


def run_with_timeout(func: Callable[[], T], timeout: float, what: str) -> T:
    """Run ``func`` on a worker thread, giving up after ``timeout`` seconds.

    The worker is not joined on timeout; the abandoned call finishes (or
    hangs) in the background.

    Raises:
        ExtractionTimeoutError: If ``func`` does not return in time.
    """
    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(func)
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError as exc:
        raise ExtractionTimeoutError(f"Timed out after {timeout:g}s: {what}") from exc
    finally:
        executor.shutdown(wait=False)


def page_needs_ocr(text: str, min_length: int) -> bool:
    """True when a page's embedded text is too short or garbled to trust."""
    stripped = text.strip()
    return len(stripped) < min_length or GARBAGE_TEXT_RE.search(stripped) is not None


def ocr_failure_placeholder(page_number: int, reason: str) -> str:
    return f"[Page {page_number}: OCR failed ({reason})]"


class TextExtractor:
    """Extracts a raw text stream from an uploaded document.

    Word documents are read paragraph by paragraph. PDFs are read from their
    text layer; if any page has too little or garbled text, the text read so
    far is discarded and every page is rendered and sent to OCR instead.

    Args:
        config: ExtractionConfig with timeouts and OCR rendering settings.
        ocr_client: Client for the OCR endpoint. Without one, PDFs are always
            read from their text layer.
    """

    def __init__(self, config: ExtractionConfig, ocr_client: OCRClient | None = None) -> None:
        self._config = config
        self._ocr_client = ocr_client

    def extract(
        self,
        doc: RawDocument,
        progress: ProgressCallback | None = None,
        skip_ocr: bool = False,
    ) -> str:
        """Extract the text of a document.

        Args:
            doc: The uploaded document.
            progress: Optional callback receiving per-page progress.
            skip_ocr: Never escalate to OCR, even for poor text layers.

        Returns:
            The document text, pages separated by newlines.

        Raises:
            UnsupportedFormatError: If the document is neither Word nor PDF.
            ExtractionTimeoutError: If loading the document or a page times out.
            ExtractionError: If the document cannot be decoded.
        """
        kind = doc.kind
        if kind is None:
            raise UnsupportedFormatError(
                f"Unsupported file type: '{doc.mime_type}'. Supported: Word (.docx), PDF"
            )

        try:
            if kind is DocumentKind.WORD:
                return self._extract_word(doc)
            return self._extract_pdf(doc, progress, skip_ocr)
        except ExtractionError:
            raise
        except Exception as exc:
            logger.exception("Failed to extract text from %s", doc.filename or "<upload>")
            raise ExtractionError(f"Failed to extract text: {exc}") from exc

    def _extract_word(self, doc: RawDocument) -> str:
        """Extract raw text from a .docx file using python-docx.

        Non-empty paragraphs are separated by blank lines; table cells follow
        the body text, one row per line.
        """
        import docx

        document = run_with_timeout(
            lambda: docx.Document(io.BytesIO(doc.data)),
            self._config.document_load_timeout,
            "loading Word document",
        )
        paragraphs = [para.text for para in document.paragraphs if para.text.strip()]
        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    paragraphs.append("    ".join(cells))
        return "\n\n".join(paragraphs)

    def _extract_pdf(
        self,
        doc: RawDocument,
        progress: ProgressCallback | None,
        skip_ocr: bool,
    ) -> str:
        import fitz  # type: ignore[import-untyped]

        pdf = run_with_timeout(
            lambda: fitz.open(stream=doc.data, filetype="pdf"),
            self._config.document_load_timeout,
            "loading PDF document",
        )
        try:
            total = pdf.page_count
            _report(progress, ExtractionProgress(stage="load", total_pages=total))

            pages, needs_ocr = self._read_text_layer(pdf, total, progress, skip_ocr)
            if not needs_ocr:
                return "\n".join(pages)

            logger.info(
                "Text layer of %s is insufficient, switching all %d pages to OCR",
                doc.filename or "<upload>",
                total,
            )
            return "\n".join(self._ocr_pages(pdf, total, progress))
        finally:
            pdf.close()

    def _read_text_layer(
        self,
        pdf: Any,
        total: int,
        progress: ProgressCallback | None,
        skip_ocr: bool,
    ) -> tuple[list[str], bool]:
        """Read embedded text page by page.

        Returns:
            (page texts, whether the document must be OCR'd instead).
        """
        pages: list[str] = []
        for index in range(total):
            text = run_with_timeout(
                lambda i=index: pdf.load_page(i).get_text("text"),
                self._config.page_load_timeout,
                f"loading page {index + 1}",
            )
            _report(progress, ExtractionProgress(stage="text", page=index + 1, total_pages=total))

            if not skip_ocr and page_needs_ocr(text, self._config.min_page_text_length):
                if self._ocr_client is None:
                    logger.warning(
                        "Page %d needs OCR but no OCR endpoint is configured", index + 1
                    )
                    skip_ocr = True
                else:
                    logger.debug("Page %d has %d usable chars", index + 1, len(text.strip()))
                    return [], True
            pages.append(text)
        return pages, False

    def _ocr_pages(
        self,
        pdf: Any,
        total: int,
        progress: ProgressCallback | None,
    ) -> list[str]:
        """OCR every page in order; failed pages become placeholders."""
        texts: list[str] = []
        for index in range(total):
            page_number = index + 1
            try:
                texts.append(self._ocr_page(pdf, index))
            except PageOCRError as exc:
                logger.warning("OCR failed for page %d: %s", page_number, exc)
                texts.append(ocr_failure_placeholder(page_number, str(exc)))
            _report(
                progress,
                ExtractionProgress(stage="ocr", page=page_number, total_pages=total),
            )
        return texts

    def _ocr_page(self, pdf: Any, index: int) -> str:
        client = self._ocr_client
        if client is None:
            raise PageOCRError("no OCR endpoint configured")

        image_b64 = self._render_page(pdf, index)
        try:
            return run_with_timeout(
                lambda: client.recognize(image_b64),
                self._config.ocr_timeout,
                f"OCR of page {index + 1}",
            )
        except ExtractionTimeoutError as exc:
            raise PageOCRError(str(exc)) from exc

    def _render_page(self, pdf: Any, index: int) -> str:
        """Render a page to a base64 JPEG, retrying once at lower scale.

        Raises:
            PageOCRError: If every render attempt fails.
        """
        import fitz  # type: ignore[import-untyped]

        last_error: Exception | None = None
        for scale, quality in self._config.render_attempts:
            try:
                png = run_with_timeout(
                    lambda s=scale: pdf.load_page(index)
                    .get_pixmap(matrix=fitz.Matrix(s, s))
                    .tobytes("png"),
                    self._config.page_load_timeout,
                    f"rendering page {index + 1}",
                )
                return self._encode_jpeg(png, quality)
            except Exception as exc:
                logger.debug("Render of page %d at %.1fx failed: %s", index + 1, scale, exc)
                last_error = exc

        raise PageOCRError(f"render failed: {last_error}")

    def _encode_jpeg(self, png: bytes, quality: int) -> str:
        """Encode as JPEG, lowering quality until under the payload ceiling."""
        with Image.open(io.BytesIO(png)) as img:
            rgb = img.convert("RGB")

        while True:
            buf = io.BytesIO()
            rgb.save(buf, format="JPEG", quality=quality, optimize=True)
            encoded = base64.b64encode(buf.getvalue()).decode("ascii")
            if (
                len(encoded) <= self._config.max_image_base64_bytes
                or quality <= self._config.min_jpeg_quality
            ):
                return encoded
            quality = max(quality - self._config.jpeg_quality_step, self._config.min_jpeg_quality)


def _report(progress: ProgressCallback | None, event: ExtractionProgress) -> None:
    if progress is not None:
        progress(event)
