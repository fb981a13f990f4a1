"""Noise removal for extracted exam text.

Removes page numbers and page boilerplate, normalizes blank markers into a
single token, collapses blank-line runs and (for exam papers) cuts off the
answer key that usually closes the document.
"""

import logging
import re

logger = logging.getLogger(__name__)

# Canonical blank token every blank marker is normalized to
BLANK = "______"

_PAGE_NUMBER_LINE_RE = re.compile(r"^[ \t]*\d{1,4}[ \t]*$", re.MULTILINE)

_PAGE_BOILERPLATE_RES: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bPage\s+\d+\s*(?:of|/)\s*\d+\b", re.IGNORECASE),
    re.compile(r"第\s*\d+\s*页(?:\s*[,，]?\s*共\s*\d+\s*页)?"),
    re.compile(r"共\s*\d+\s*页\s*[,，]?\s*第\s*\d+\s*页"),
)

# Runs that stand in for redacted answer text
_BLANK_RUN_RES: tuple[re.Pattern[str], ...] = (
    re.compile(r"_{3,}"),
    re.compile(r"\.{3,}"),
    re.compile(r"…{2,}"),
    re.compile(r"[(（][ \t　]{3,}[)）]"),
)

_BLANK_LINES_RE = re.compile(r"\n[ \t]*\n(?:[ \t]*\n)+")

# Answer-key headers: at line start, or after a run of 4+ whitespace where
# OCR merged the header onto the last question's line
_HEADER_START = r"(?:^|(?<=\s{4}))"
ANSWER_KEY_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(_HEADER_START + r"[ \t#*【\[（(]*参考答案", re.MULTILINE),
    re.compile(_HEADER_START + r"[ \t#*【\[（(]*答案(?:与|及)?解析", re.MULTILINE),
    re.compile(_HEADER_START + r"[ \t#*\[(]*Reference\s+Answers?\b", re.MULTILINE | re.IGNORECASE),
    re.compile(
        _HEADER_START + r"[ \t#*\[(]*Keys?\s+to\s+(?:the\s+)?Exercises\b",
        re.MULTILINE | re.IGNORECASE,
    ),
    re.compile(_HEADER_START + r"[ \t#*\[(]*Answer\s+Keys?\b", re.MULTILINE | re.IGNORECASE),
)

# Section instructions glued onto the end of a question by OCR, e.g.
# "... D) What an #### III. Choose the proper words in the box ..."
_EMBEDDED_HEADER_RE = re.compile(
    r"\s*#{2,}\s*(?:[IVX]+|[A-Z])\.\s+"
    r"(?:Choose|Complete|Fill|Read|Write|Rewrite|Transform).*",
    re.IGNORECASE | re.DOTALL,
)


def normalize_blanks(text: str) -> str:
    """Replace underscore, ellipsis and empty-paren runs with ``BLANK``.

    Args:
        text: Text possibly containing raw blank markers.

    Returns:
        Text where every blank marker is the canonical token.
    """
    for pattern in _BLANK_RUN_RES:
        text = pattern.sub(BLANK, text)
    return text


def find_answer_key(text: str) -> int | None:
    """Return the offset of the first answer-key header, or None."""
    positions = [m.start() for p in ANSWER_KEY_PATTERNS if (m := p.search(text))]
    return min(positions) if positions else None


def truncate_answer_key(text: str) -> str:
    """Discard everything from the first answer-key header onward."""
    position = find_answer_key(text)
    if position is None:
        return text
    logger.debug("Answer key found at offset %d, discarding %d chars", position, len(text) - position)
    return text[:position]


def clean(text: str, truncate_answer_key_section: bool = False) -> str:
    """Remove non-content noise from extracted document text.

    Args:
        text: Raw extracted text.
        truncate_answer_key_section: Cut the text at the first answer-key
            header. Used for exam papers and error sets, where the key would
            otherwise be segmented as further questions.

    Returns:
        Cleaned text.
    """
    if truncate_answer_key_section:
        text = truncate_answer_key(text)

    for pattern in _PAGE_BOILERPLATE_RES:
        text = pattern.sub("", text)
    text = _PAGE_NUMBER_LINE_RE.sub("", text)
    text = normalize_blanks(text)
    text = _BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()


def strip_embedded_header(unit: str) -> str:
    """Remove a trailing section instruction merged into a question unit."""
    match = _EMBEDDED_HEADER_RE.search(unit)
    if match is None:
        return unit
    return unit[: match.start()].strip()
