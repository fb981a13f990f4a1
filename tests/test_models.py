"""Tests for data models."""

from pathlib import Path

import pytest
from pydantic import TypeAdapter

from src.models import (
    BatchImportResult,
    DocumentKind,
    ImportMode,
    LayoutBlock,
    MarkdownBlock,
    OCRBlock,
    ParsedQuestion,
    QuestionType,
    RawDocument,
    TextLineBlock,
    make_tag,
)
from src.models.document import PDF_MIME_TYPE, WORD_MIME_TYPE


class TestParsedQuestion:
    def test_create_question(self) -> None:
        q = ParsedQuestion(content="21. ______ film was a success.")
        assert q.type == QuestionType.GRAMMAR
        assert q.answer == ""
        assert q.tags == []
        assert q.id  # UUID auto-generated

    def test_ids_are_unique(self) -> None:
        assert ParsedQuestion(content="a").id != ParsedQuestion(content="a").id

    def test_tags_are_deduplicated_in_order(self) -> None:
        q = ParsedQuestion(content="x", tags=["Family:bake", "Root:bake", "Family:bake"])
        assert q.tags == ["Family:bake", "Root:bake"]

    def test_add_tag_skips_duplicates(self) -> None:
        q = ParsedQuestion(content="x", tags=["Family:bake"])
        q.add_tag("Source:unit1.pdf")
        q.add_tag("Family:bake")
        assert q.tags == ["Family:bake", "Source:unit1.pdf"]

    def test_tag_value(self) -> None:
        q = ParsedQuestion(content="x", tags=[make_tag("Root", "operation")])
        assert q.tag_value("Root") == "operation"
        assert q.tag_value("Family") is None

    def test_serialization(self) -> None:
        q = ParsedQuestion(content="bake", type=QuestionType.VOCABULARY, answer="v. 烘焙")
        data = q.model_dump(mode="json")
        assert data["type"] == "vocabulary"
        restored = ParsedQuestion(**data)
        assert restored.id == q.id
        assert restored.type is QuestionType.VOCABULARY


class TestRawDocument:
    def test_kind_from_mime_type(self) -> None:
        assert RawDocument(data=b"", mime_type=PDF_MIME_TYPE).kind is DocumentKind.PDF
        assert RawDocument(data=b"", mime_type=WORD_MIME_TYPE).kind is DocumentKind.WORD
        assert RawDocument(data=b"", mime_type="text/plain").kind is None

    def test_from_path(self, tmp_path: Path) -> None:
        f = tmp_path / "Unit1.PDF"
        f.write_bytes(b"%PDF-1.7")

        doc = RawDocument.from_path(f)
        assert doc.data == b"%PDF-1.7"
        assert doc.mime_type == PDF_MIME_TYPE
        assert doc.filename == "Unit1.PDF"

    def test_from_path_unknown_extension(self, tmp_path: Path) -> None:
        f = tmp_path / "notes.txt"
        f.write_text("hello")
        assert RawDocument.from_path(f).kind is None

    def test_from_path_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            RawDocument.from_path(tmp_path / "missing.docx")


class TestImportMode:
    def test_values(self) -> None:
        assert ImportMode("mock_paper") is ImportMode.MOCK_PAPER
        assert ImportMode("error_set") is ImportMode.ERROR_SET
        assert ImportMode("recitation") is ImportMode.RECITATION


class TestOCRBlock:
    def test_discriminated_union(self) -> None:
        adapter = TypeAdapter(list[OCRBlock])
        blocks = adapter.validate_python([
            {"kind": "markdown", "text": "# Title"},
            {"kind": "layout", "text": "21. x", "label": "text", "bbox": [0, 0, 10, 10]},
            {"kind": "text_line", "text": "line"},
        ])
        assert isinstance(blocks[0], MarkdownBlock)
        assert isinstance(blocks[1], LayoutBlock)
        assert blocks[1].bbox == [0.0, 0.0, 10.0, 10.0]
        assert isinstance(blocks[2], TextLineBlock)


class TestBatchImportResult:
    def test_defaults(self) -> None:
        result = BatchImportResult()
        assert result.questions == []
        assert result.failures == []
        assert result.imported_files == []
