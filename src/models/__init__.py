"""Data models for the Question Import pipeline."""

from src.models.document import DocumentKind, ImportMode, RawDocument
from src.models.ocr import LayoutBlock, MarkdownBlock, OCRBlock, TextLineBlock
from src.models.question import ParsedQuestion, QuestionType, make_tag
from src.models.results import (
    BatchImportResult,
    ExtractionProgress,
    ImportFailure,
    StitchImage,
)

__all__ = [
    "BatchImportResult",
    "DocumentKind",
    "ExtractionProgress",
    "ImportFailure",
    "ImportMode",
    "LayoutBlock",
    "MarkdownBlock",
    "OCRBlock",
    "ParsedQuestion",
    "QuestionType",
    "RawDocument",
    "StitchImage",
    "TextLineBlock",
    "make_tag",
]
