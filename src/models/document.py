"""Raw document data model."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel

WORD_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PDF_MIME_TYPE = "application/pdf"

# File extensions mapped to the MIME types the extractor accepts
EXTENSION_MIME_TYPES: dict[str, str] = {
    ".docx": WORD_MIME_TYPE,
    ".pdf": PDF_MIME_TYPE,
}


class DocumentKind(str, Enum):
    """Input formats the extractor can read."""

    WORD = "word"
    PDF = "pdf"


class ImportMode(str, Enum):
    """Caller-selected parsing mode."""

    MOCK_PAPER = "mock_paper"
    ERROR_SET = "error_set"
    RECITATION = "recitation"


class RawDocument(BaseModel):
    """An uploaded file, alive only for the duration of one import."""

    data: bytes
    mime_type: str
    filename: str = ""

    @property
    def kind(self) -> DocumentKind | None:
        """Document kind derived from the declared MIME type."""
        if self.mime_type == WORD_MIME_TYPE:
            return DocumentKind.WORD
        if self.mime_type == PDF_MIME_TYPE:
            return DocumentKind.PDF
        return None

    @classmethod
    def from_path(cls, file_path: str | Path) -> "RawDocument":
        """Read a document from disk, deriving its MIME type from the extension.

        Args:
            file_path: Path to the file.

        Returns:
            RawDocument holding the file bytes.

        Raises:
            FileNotFoundError: If file_path does not exist.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        mime_type = EXTENSION_MIME_TYPES.get(path.suffix.lower(), "application/octet-stream")
        return cls(data=path.read_bytes(), mime_type=mime_type, filename=path.name)
