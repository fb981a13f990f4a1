"""Splitting of exam text into numbered question units."""

import logging
import re

logger = logging.getLogger(__name__)

# A question number: "21." "21," "21、" "21，" "(21)" "（21）." "[21]"
# A dot followed by a digit belongs to a decimal ("1.5 kilograms").
_NUMBER_MARKER = (
    r"(?:[(（\[]\d{1,3}[)）\]][.,，、．]?"
    r"|\d{1,3}(?:\.(?!\d)|[,，、．]))"
)

# Marker at text start, after a newline (indentation allowed), or after a
# run of 4+ whitespace characters where OCR merged two questions on a line.
QUESTION_DELIMITER_RE = re.compile(
    r"(?:^[ \t]*|\n[ \t]*|\s{4,})(?P<marker>" + _NUMBER_MARKER + r")"
)


def find_split_points(text: str) -> list[int]:
    """Return the offsets of every question number marker, in text order."""
    return [match.start("marker") for match in QUESTION_DELIMITER_RE.finditer(text)]


def segment(text: str) -> list[str]:
    """Split text into question units.

    Each unit runs from its numeric marker up to the next marker. Units that
    are empty after stripping are dropped; order is preserved and nothing is
    deduplicated. Text before the first marker is not a question.

    Args:
        text: Cleaned (and usually section-isolated) exam text.

    Returns:
        Question units, each starting with its number marker.
    """
    points = find_split_points(text)
    if not points:
        return []

    if text[: points[0]].strip():
        logger.debug("Skipping %d chars before the first question number", points[0])

    units: list[str] = []
    for i, start in enumerate(points):
        end = points[i + 1] if i + 1 < len(points) else len(text)
        unit = text[start:end].strip()
        if unit:
            units.append(unit)
    return units
