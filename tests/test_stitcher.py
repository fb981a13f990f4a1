"""Tests for handwriting image stitching and result demultiplexing."""

import base64
import io
from unittest.mock import MagicMock, patch

import pytest
from PIL import Image

from src.config import StitchConfig
from src.errors import StitchError
from src.handwriting.stitcher import (
    decode_data_url,
    marker_for,
    parse_stitched_ocr_result,
    recognize_stitched,
    stitch,
)
from src.models.results import StitchImage


def make_data_url(width: int, height: int, color: tuple[int, int, int] = (0, 0, 0)) -> str:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def open_data_url(data_url: str) -> Image.Image:
    return Image.open(io.BytesIO(decode_data_url(data_url)))


class TestStitch:
    def test_composite_layout(self) -> None:
        images = [
            StitchImage(id="q1", data_url=make_data_url(100, 50)),
            StitchImage(id="q2", data_url=make_data_url(200, 200)),
        ]
        result = stitch(images)

        assert result.startswith("data:image/jpeg;base64,")
        composite = open_data_url(result)
        assert composite.format == "JPEG"
        # Each entry: padding + marker + separator + image scaled to 600px wide
        header = 40 + 28 + 10
        assert composite.size == (600, (header + 300) + (header + 600) + 40)

    def test_custom_width(self) -> None:
        images = [StitchImage(id="a", data_url=make_data_url(50, 50))]
        composite = open_data_url(stitch(images, StitchConfig(width=300, padding=10)))
        assert composite.width == 300

    def test_default_font_fallback_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        images = [StitchImage(id="a", data_url=make_data_url(50, 50))]
        with patch("src.handwriting.stitcher.MONOSPACE_FONTS", ("no-such-font.ttf",)):
            composite = open_data_url(stitch(images))

        assert composite.width == 600
        assert "No monospace TrueType font found" in caplog.text

    def test_empty_input(self) -> None:
        with pytest.raises(StitchError):
            stitch([])

    @pytest.mark.parametrize("data_url", ["data:image/png;base64,!!!", "data:image/png;base64,aGVsbG8="])
    def test_undecodable_image_names_item(self, data_url: str) -> None:
        images = [
            StitchImage(id="ok", data_url=make_data_url(10, 10)),
            StitchImage(id="broken-7", data_url=data_url),
        ]
        with pytest.raises(StitchError, match="broken-7"):
            stitch(images)


class TestParseStitchedOcrResult:
    def test_splits_on_markers(self) -> None:
        text = "[[ID:q1]]\n---- ---\nHe went home.\n[[ID:q2]]__ She goes."
        assert parse_stitched_ocr_result(text) == {"q1": "He went home.", "q2": "She goes."}

    def test_tolerates_spaced_and_full_width_colon(self) -> None:
        assert parse_stitched_ocr_result("[[ ID ： a1 ]] text") == {"a1": "text"}

    def test_text_before_first_marker_ignored(self) -> None:
        assert parse_stitched_ocr_result("noise [[ID:x]] y") == {"x": "y"}

    def test_html_stripped(self) -> None:
        assert parse_stitched_ocr_result("<p>[[ID:x]] y</p>") == {"x": "y"}

    def test_less_than_sign_in_answer_kept(self) -> None:
        text = "[[ID:a]] x<y [[ID:b]] 42 [[ID:c]] 3 < 5"
        assert parse_stitched_ocr_result(text) == {"a": "x<y", "b": "42", "c": "3 < 5"}

    def test_underline_markup_stripped(self) -> None:
        text = "[[ID:a]] He <u>went</u> home [[ID:b]]<br/>x<y"
        assert parse_stitched_ocr_result(text) == {"a": "He  went  home", "b": "x<y"}

    def test_em_dash_separator_trimmed(self) -> None:
        assert parse_stitched_ocr_result("[[ID:x]] —— — answer") == {"x": "answer"}

    def test_repeated_id_joined(self) -> None:
        text = "[[ID:x]] a [[ID:y]] b [[ID:x]] c"
        assert parse_stitched_ocr_result(text) == {"x": "a c", "y": "b"}

    def test_no_markers(self) -> None:
        assert parse_stitched_ocr_result("just text") == {}

    def test_marker_round_trip_preserves_order(self) -> None:
        ids = ["q3", "q1", "q10", "q2"]
        text = "".join(f"{marker_for(i)}\n- - - - - -\nanswer {i}\n" for i in ids)
        result = parse_stitched_ocr_result(text)
        assert list(result) == ids
        assert result["q10"] == "answer q10"


class TestRecognizeStitched:
    def test_single_ocr_request(self) -> None:
        client = MagicMock()
        client.recognize.return_value = "[[ID:q1]] went [[ID:q2]] goes"
        images = [
            StitchImage(id="q1", data_url=make_data_url(30, 10)),
            StitchImage(id="q2", data_url=make_data_url(30, 10)),
        ]

        assert recognize_stitched(client, images) == {"q1": "went", "q2": "goes"}
        client.recognize.assert_called_once()
        sent = client.recognize.call_args.args[0]
        assert not sent.startswith("data:")
        assert base64.b64decode(sent)[:2] == b"\xff\xd8"
