"""Handwriting answer capture: stitched OCR batches."""

from src.handwriting.stitcher import (
    marker_for,
    parse_stitched_ocr_result,
    recognize_stitched,
    stitch,
)

__all__ = ["marker_for", "parse_stitched_ocr_result", "recognize_stitched", "stitch"]
