"""HTTP client for the external OCR / layout-parsing endpoint."""

import logging
import re
from typing import Any

import requests
from bs4 import BeautifulSoup

from src.config import OCRConfig
from src.errors import OCRServiceError
from src.models.ocr import LayoutBlock, MarkdownBlock, OCRBlock, TextLineBlock

logger = logging.getLogger(__name__)

_HEADING_MARK_RE = re.compile(r"^#+\s+", re.MULTILINE)
_LATEX_UNDERLINE_RE = re.compile(r"\$\s*\\underline\{\\text\{([^}]+)\}\}\s*\$")
_LATEX_EMPTY_UNDERLINE_RE = re.compile(r"\$\s*\\underline\{\\text\{\}\}\s*\$")
_LATEX_TEXT_RE = re.compile(r"\$\s*\\text\{([^}]*)\}\s*\$")
_STRAY_DOLLAR_RE = re.compile(r"\s\$\s")
_LONG_UNDERSCORE_RE = re.compile(r"_{5,}")
_TABLE_RE = re.compile(r"<table\b.*?</table>", re.IGNORECASE | re.DOTALL)

CELL_SEPARATOR = "    "


def _flatten_table(html: str) -> str:
    """Render an HTML table as text lines, one row per line."""
    soup = BeautifulSoup(html, "lxml")
    rows = []
    for tr in soup.find_all("tr"):
        cells = [cell.get_text(" ", strip=True) for cell in tr.find_all(["td", "th"])]
        cells = [c for c in cells if c]
        if cells:
            rows.append(CELL_SEPARATOR.join(cells))
    return "\n".join(rows)


def clean_ocr_text(text: str) -> str:
    """Remove markdown and LaTeX artifacts from OCR output.

    Underlined spans become ``<u>...</u>`` so the review UI can render them;
    empty underlines become a blank.

    Args:
        text: Text assembled from OCR blocks.

    Returns:
        Cleaned text with line structure preserved.
    """
    text = _TABLE_RE.sub(lambda m: "\n" + _flatten_table(m.group(0)) + "\n", text)
    text = _HEADING_MARK_RE.sub("", text)
    text = _LATEX_UNDERLINE_RE.sub(r"<u>\1</u>", text)
    text = _LATEX_EMPTY_UNDERLINE_RE.sub("____", text)
    text = _LATEX_TEXT_RE.sub(r"\1", text)
    text = _STRAY_DOLLAR_RE.sub(" ", text)
    text = _LONG_UNDERSCORE_RE.sub("____", text)
    return text.strip()


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "\n".join(_as_text(v) for v in value)
    return "" if value is None else str(value)


def _layout_blocks(entry: dict[str, Any]) -> list[OCRBlock]:
    markdown = entry.get("markdown")
    if isinstance(markdown, dict) and markdown.get("text"):
        return [MarkdownBlock(text=_as_text(markdown["text"]))]

    pruned = entry.get("prunedResult")
    parsing = (pruned or {}).get("parsing_res_list") if isinstance(pruned, dict) else None
    parsing = parsing or entry.get("parsing_res_list") or []
    return [
        LayoutBlock(
            text=_as_text(item.get("block_content")),
            label=str(item.get("block_label", "")),
            bbox=list(item.get("block_bbox") or []),
        )
        for item in parsing
        if isinstance(item, dict)
    ]


def _line_blocks(entry: dict[str, Any]) -> list[OCRBlock]:
    pruned = entry.get("prunedResult")
    if isinstance(pruned, dict) and pruned.get("rec_texts"):
        return [TextLineBlock(text=_as_text(t)) for t in pruned["rec_texts"]]
    return [TextLineBlock(text=_as_text(entry.get("words") or entry.get("text")))]


def normalize_response(payload: dict[str, Any]) -> list[OCRBlock]:
    """Convert a raw OCR JSON body into a flat list of typed blocks.

    Layout parsing results take priority over plain OCR lines.

    Args:
        payload: Decoded JSON body of the OCR endpoint.

    Returns:
        Blocks in reading order.

    Raises:
        OCRServiceError: If the body holds neither result shape.
    """
    if not isinstance(payload, dict):
        raise OCRServiceError("Invalid OCR response: not an object")
    result = payload.get("result")
    if not isinstance(result, dict):
        raise OCRServiceError("Invalid OCR response: missing 'result'")

    layout = result.get("layoutParsingResults")
    if isinstance(layout, list):
        return [b for entry in layout if isinstance(entry, dict) for b in _layout_blocks(entry)]

    lines = result.get("ocrResults")
    if isinstance(lines, list):
        return [b for entry in lines if isinstance(entry, dict) for b in _line_blocks(entry)]

    raise OCRServiceError("Invalid OCR response: no layoutParsingResults or ocrResults")


def blocks_to_text(blocks: list[OCRBlock]) -> str:
    """Join normalized blocks into one text."""
    markdown = [b.text for b in blocks if isinstance(b, MarkdownBlock) and b.text.strip()]
    if markdown:
        return "\n\n".join(markdown)
    return "\n".join(b.text for b in blocks if b.text.strip())


class OCRClient:
    """Submits base64 JPEG images to the OCR endpoint and returns plain text.

    Args:
        config: OCRConfig with the endpoint URL, token and timeout.
    """

    def __init__(self, config: OCRConfig) -> None:
        if not config.api_url:
            raise ValueError("OCR api_url is not configured")
        self._config = config

    def recognize(self, image_base64: str) -> str:
        """Run OCR on one image.

        Args:
            image_base64: Base64-encoded JPEG without a data-URL prefix.

        Returns:
            Cleaned recognized text.

        Raises:
            OCRServiceError: On transport failure, error status or error body.
        """
        payload = {
            "file": image_base64,
            "fileType": 1,
            "useDocOrientationClassify": False,
            "useDocUnwarping": False,
            "useChartRecognition": False,
        }
        headers = {"Content-Type": "application/json"}
        if self._config.token:
            headers["Authorization"] = f"token {self._config.token}"

        try:
            resp = requests.post(
                self._config.api_url,
                json=payload,
                headers=headers,
                timeout=self._config.timeout_seconds,
            )
        except requests.exceptions.RequestException as exc:
            raise OCRServiceError(f"OCR request failed: {exc}") from exc

        if resp.status_code == 429:
            raise OCRServiceError("OCR quota exceeded (429)")
        if resp.status_code in (401, 403):
            raise OCRServiceError("OCR API key invalid or expired")
        if resp.status_code >= 300:
            raise OCRServiceError(f"OCR API error {resp.status_code}: {resp.text[:100]}")

        try:
            body = resp.json()
        except ValueError as exc:
            raise OCRServiceError("OCR response is not JSON") from exc
        if not isinstance(body, dict):
            raise OCRServiceError("Invalid OCR response: not an object")

        for code_key, msg_key in (("errorCode", "errorMsg"), ("error_code", "error_msg")):
            code = body.get(code_key)
            if code is not None and code != 0:
                raise OCRServiceError(body.get(msg_key) or f"OCR error code {code}")

        text = clean_ocr_text(blocks_to_text(normalize_response(body)))
        logger.debug("OCR returned %d chars", len(text))
        return text
