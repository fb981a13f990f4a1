"""Tests for configuration loading."""

from pathlib import Path

import yaml

from src.config import AppConfig, load_config


class TestAppConfigDefaults:
    """Test that AppConfig provides sensible defaults."""

    def test_default_config_creates_successfully(self) -> None:
        config = AppConfig()
        assert config.app.name == "Question Import"
        assert config.app.version == "1.0.0"

    def test_default_extraction_config(self) -> None:
        config = AppConfig()
        assert config.extraction.document_load_timeout == 30.0
        assert config.extraction.page_load_timeout == 10.0
        assert config.extraction.ocr_timeout == 50.0
        assert config.extraction.min_page_text_length == 50
        assert config.extraction.render_attempts == [(1.5, 80), (1.0, 50)]
        assert config.extraction.max_image_base64_bytes == 3 * 1024 * 1024

    def test_default_classifier_policy(self) -> None:
        config = AppConfig()
        assert config.classifier.long_unit_length == 80
        assert config.classifier.sentence_like_length == 50

    def test_default_stitch_config(self) -> None:
        config = AppConfig()
        assert config.stitch.width == 600
        assert config.stitch.padding == 40

    def test_default_ocr_endpoint_is_none(self) -> None:
        config = AppConfig()
        assert config.ocr.api_url is None
        assert config.ocr.token is None


class TestLoadConfig:
    """Test loading config from YAML files."""

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        yaml_data = {
            "app": {"name": "Test App", "version": "0.1.0"},
            "classifier": {"long_unit_length": 120},
        }
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump(yaml_data))

        config = load_config(config_file)
        assert config.app.name == "Test App"
        assert config.app.version == "0.1.0"
        assert config.classifier.long_unit_length == 120
        # Other fields keep defaults
        assert config.classifier.sentence_like_length == 50
        assert config.extraction.min_page_text_length == 50

    def test_render_attempts_from_yaml_lists(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"extraction": {"render_attempts": [[2.0, 90]]}}))

        config = load_config(config_file)
        assert config.extraction.render_attempts == [(2.0, 90)]

    def test_load_missing_yaml_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "nonexistent.yaml")
        assert config.app.name == "Question Import"

    def test_env_vars_set_ocr_endpoint(self, tmp_path: Path, monkeypatch: object) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("{}")

        monkeypatch.setenv("OCR_API_URL", "https://ocr.example.com/layout-parsing")  # type: ignore[attr-defined]
        monkeypatch.setenv("PADDLE_OCR_TOKEN", "test-token-123")  # type: ignore[attr-defined]

        config = load_config(config_file)
        assert config.ocr.api_url == "https://ocr.example.com/layout-parsing"
        assert config.ocr.token == "test-token-123"

    def test_load_project_config_yaml(self, monkeypatch: object) -> None:
        """Test loading the actual project config.yaml."""
        monkeypatch.delenv("OCR_API_URL", raising=False)  # type: ignore[attr-defined]
        config_path = Path(__file__).parent.parent / "config.yaml"
        config = load_config(config_path)
        assert config.app.name == "Question Import"
        assert config.extraction.ocr_timeout == 50.0
        assert config.stitch.jpeg_quality == 80
