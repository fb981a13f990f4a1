"""Progress and batch result data models."""

from pydantic import BaseModel, Field

from src.models.question import ParsedQuestion


class ExtractionProgress(BaseModel):
    """Progress report passed to the caller's callback during extraction."""

    stage: str  # "load", "text", "ocr"
    page: int = 0
    total_pages: int = 0
    message: str = ""


class ImportFailure(BaseModel):
    """A document that was skipped during a batch import."""

    filename: str
    error: str


class BatchImportResult(BaseModel):
    """Questions from every successfully imported document of a batch."""

    questions: list[ParsedQuestion] = Field(default_factory=list)
    failures: list[ImportFailure] = Field(default_factory=list)
    imported_files: list[str] = Field(default_factory=list)


class StitchImage(BaseModel):
    """One handwriting answer image to be stitched."""

    id: str
    data_url: str
