"""External OCR service boundary."""

from src.ocr.client import OCRClient, blocks_to_text, clean_ocr_text, normalize_response

__all__ = ["OCRClient", "blocks_to_text", "clean_ocr_text", "normalize_response"]
