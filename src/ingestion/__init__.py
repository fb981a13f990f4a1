"""Document ingestion: extraction, cleaning, segmentation and classification."""

from src.ingestion.classifier import classify
from src.ingestion.cleaner import clean
from src.ingestion.extractor import TextExtractor
from src.ingestion.pipeline import DocumentImporter
from src.ingestion.recitation import parse_recitation
from src.ingestion.sections import isolate
from src.ingestion.segmenter import segment

__all__ = [
    "DocumentImporter",
    "TextExtractor",
    "classify",
    "clean",
    "isolate",
    "parse_recitation",
    "segment",
]
