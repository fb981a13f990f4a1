"""Configuration loader for the Question Import pipeline."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class AppInfo(BaseModel):
    """Application metadata."""

    name: str = "Question Import"
    version: str = "1.0.0"


class ExtractionConfig(BaseModel):
    """Text extraction and OCR fallback configuration."""

    document_load_timeout: float = 30.0
    page_load_timeout: float = 10.0
    ocr_timeout: float = 50.0
    min_page_text_length: int = 50
    # (scale, JPEG quality) pairs, tried in order
    render_attempts: list[tuple[float, int]] = Field(
        default_factory=lambda: [(1.5, 80), (1.0, 50)]
    )
    max_image_base64_bytes: int = 3 * 1024 * 1024
    min_jpeg_quality: int = 20
    jpeg_quality_step: int = 10


class OCRConfig(BaseModel):
    """External OCR endpoint configuration."""

    api_url: str | None = None
    token: str | None = None
    timeout_seconds: float = 50.0


class ClassifierPolicy(BaseModel):
    """Tunable thresholds of the question classifier."""

    long_unit_length: int = 80
    sentence_like_length: int = 50


class StitchConfig(BaseModel):
    """Handwriting image stitching configuration."""

    width: int = 600
    padding: int = 40
    marker_font_size: int = 20
    jpeg_quality: int = 80


class AppConfig(BaseModel):
    """Root application configuration."""

    app: AppInfo = Field(default_factory=AppInfo)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    classifier: ClassifierPolicy = Field(default_factory=ClassifierPolicy)
    stitch: StitchConfig = Field(default_factory=StitchConfig)


def load_config(config_path: str | Path = "config.yaml") -> AppConfig:
    """Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Fully populated AppConfig instance.
    """
    load_dotenv()

    yaml_data: dict = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file) as f:
            yaml_data = yaml.safe_load(f) or {}

    config = AppConfig(**yaml_data)

    # OCR endpoint and token from environment take precedence
    api_url = os.getenv("OCR_API_URL")
    if api_url:
        config.ocr.api_url = api_url
    token = os.getenv("PADDLE_OCR_TOKEN")
    if token:
        config.ocr.token = token

    return config
