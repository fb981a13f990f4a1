"""Exception hierarchy for document import."""


class DocumentImportError(Exception):
    """Base class for failures that abort the import of one document."""


class UnsupportedFormatError(DocumentImportError, ValueError):
    """The document is neither a Word (.docx) file nor a PDF."""


class ExtractionError(DocumentImportError):
    """Text could not be extracted; wraps the underlying decode or I/O error."""


class ExtractionTimeoutError(ExtractionError):
    """A bounded extraction step did not finish in time."""


class PageOCRError(ExtractionError):
    """OCR of a single page failed. Recovered locally by the extractor."""


class OCRServiceError(PageOCRError):
    """The OCR endpoint returned an error status or an unusable body."""


class StitchError(ValueError):
    """Handwriting images could not be combined into one composite."""
