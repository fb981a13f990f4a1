"""Batching of handwriting answer images into a single OCR request.

Each answer image is preceded by a text marker ``[[ID:<id>]]`` and a dashed
separator. The markers are ordinary text in the composite image, so they come
back in the OCR output and split it into per-answer spans.
"""

import base64
import binascii
import io
import logging
import re

from PIL import Image, ImageDraw, ImageFont

from src.config import StitchConfig
from src.errors import StitchError
from src.models.results import StitchImage
from src.ocr.client import OCRClient

logger = logging.getLogger(__name__)

MARKER_RE = re.compile(r"\[\[\s*ID\s*[:：]\s*([^\]\s]+?)\s*\]\]")
_SEPARATOR_ARTIFACT_RE = re.compile(r"^[\s\-_—–]+")
_DATA_URL_RE = re.compile(r"^data:image/[\w.+-]+;base64,", re.IGNORECASE)
# Markup the OCR endpoint wraps text in; a bare "<" in an answer is kept
_MARKUP_TAG_RE = re.compile(
    r"</?(?:u|p|br|div|span|table|thead|tbody|tr|td|th|b|i|sup|sub)\b[^<>]*>",
    re.IGNORECASE,
)

MONOSPACE_FONTS: tuple[str, ...] = ("DejaVuSansMono.ttf", "LiberationMono-Regular.ttf", "cour.ttf")
DASH_LENGTH = 12
DASH_GAP = 8


def marker_for(item_id: str) -> str:
    """Marker text rendered above an answer image."""
    return f"[[ID:{item_id}]]"


def decode_data_url(data_url: str) -> bytes:
    """Return the raw bytes of a base64 data URL (or bare base64 string)."""
    return base64.b64decode(_DATA_URL_RE.sub("", data_url.strip()), validate=True)


def _load_font(size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    for name in MONOSPACE_FONTS:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    logger.warning("No monospace TrueType font found, markers use Pillow's default font")
    return ImageFont.load_default(size=size)


def _load_image(item: StitchImage) -> Image.Image:
    try:
        with Image.open(io.BytesIO(decode_data_url(item.data_url))) as img:
            return img.convert("RGB")
    except (binascii.Error, ValueError, OSError) as exc:
        raise StitchError(f"Failed to load image for {item.id}") from exc


def _draw_dashed_line(draw: ImageDraw.ImageDraw, y: int, width: int) -> None:
    x = 0
    while x < width:
        draw.line([(x, y), (min(x + DASH_LENGTH, width), y)], fill=(160, 160, 160), width=2)
        x += DASH_LENGTH + DASH_GAP


def stitch(images: list[StitchImage], config: StitchConfig | None = None) -> str:
    """Stack answer images vertically, each under its ID marker.

    Args:
        images: Answer images in the order they should appear.
        config: Layout settings; defaults to ``StitchConfig()``.

    Returns:
        A ``data:image/jpeg;base64,...`` URL of the composite.

    Raises:
        StitchError: If the list is empty or an image cannot be decoded.
    """
    if not images:
        raise StitchError("No images to stitch")
    config = config or StitchConfig()

    scaled: list[Image.Image] = []
    for item in images:
        img = _load_image(item)
        height = max(1, round(img.height * config.width / img.width))
        scaled.append(img.resize((config.width, height), Image.LANCZOS))

    font = _load_font(config.marker_font_size)
    marker_height = config.marker_font_size + 8
    separator_height = 10
    header_height = config.padding + marker_height + separator_height

    total_height = sum(header_height + img.height for img in scaled) + config.padding
    canvas = Image.new("RGB", (config.width, total_height), (255, 255, 255))
    draw = ImageDraw.Draw(canvas)

    y = 0
    for item, img in zip(images, scaled):
        y += config.padding
        draw.text((10, y), marker_for(item.id), fill=(0, 0, 0), font=font)
        y += marker_height
        _draw_dashed_line(draw, y + separator_height // 2, config.width)
        y += separator_height
        canvas.paste(img, (0, y))
        y += img.height

    buf = io.BytesIO()
    canvas.save(buf, format="JPEG", quality=config.jpeg_quality)
    logger.debug("Stitched %d images into %dx%d", len(images), config.width, total_height)
    return "data:image/jpeg;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def parse_stitched_ocr_result(text: str) -> dict[str, str]:
    """Split OCR output of a stitched image back into per-answer text.

    Text after each marker, up to the next marker, belongs to that marker's
    id. Separator debris at the start of a span (dashes, underscores) is
    trimmed. Text before the first marker is discarded.

    Args:
        text: OCR text of the composite image.

    Returns:
        Mapping of id to recognized text, in marker order.
    """
    text = _MARKUP_TAG_RE.sub(" ", text)

    matches = list(MARKER_RE.finditer(text))
    if not matches:
        logger.warning("No ID markers found in stitched OCR result")
        return {}

    results: dict[str, str] = {}
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        span = _SEPARATOR_ARTIFACT_RE.sub("", text[match.end():end]).strip()
        item_id = match.group(1)
        if item_id in results and span:
            results[item_id] = f"{results[item_id]} {span}".strip()
        else:
            results.setdefault(item_id, span)
    return results


def recognize_stitched(
    client: OCRClient, images: list[StitchImage], config: StitchConfig | None = None
) -> dict[str, str]:
    """Stitch images, run one OCR request and demultiplex the result."""
    data_url = stitch(images, config)
    text = client.recognize(_DATA_URL_RE.sub("", data_url))
    results = parse_stitched_ocr_result(text)
    missing = [item.id for item in images if item.id not in results]
    if missing:
        logger.warning("No OCR text recovered for %d answers: %s", len(missing), missing)
    return results
