"""Isolation of the grammar and vocabulary section of an exam paper."""

import logging
import re

logger = logging.getLogger(__name__)

# Optional decoration before a section title: markdown heading marks,
# "Part 2", "II." or "B."
_PREFIX = r"(?:^|\n)[ \t]*#{0,6}[ \t]*"
_NUMBERING = r"(?:Part\s*(?:[IVX]+|\d+|[A-Z])\.?|[IVX]+\.|[A-Z]\.)?\s*"

# Start-of-target-section headers, tried in order
SECTION_START_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(_PREFIX + _NUMBERING + r"Grammar\s*(?:and|&)\s*Vocabulary", re.IGNORECASE),
    re.compile(_PREFIX + r"Part\s*(?:2|II|Two)\b", re.IGNORECASE),
    re.compile(r"语法(?:和|与|及)?词汇"),
)

# Start-of-next-section headers, searched forward from the section start
SECTION_END_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"(?:^|\n|\s{3,}|(?<=[.!?])\s+)[ \t]*#{0,6}[ \t]*"
        r"(?:Part\s*(?:[IVX]+|\d+|[A-Z])\.?|[IVX]+\.|[A-Z]\.)\s*Reading\s*(?:and|&)\s*Writing",
        re.IGNORECASE,
    ),
    re.compile(_PREFIX + r"Reading\s*(?:and|&)\s*Writing", re.IGNORECASE),
    re.compile(_PREFIX + r"Part\s*(?:3|III|Three)\b", re.IGNORECASE),
    re.compile(_PREFIX + r"第三部分"),
    re.compile(_PREFIX + r"(?:[IVX]+\.|[A-Z]\.)?\s*(?:Reading|Writing)\b", re.IGNORECASE),
)


def _first_match(
    patterns: tuple[re.Pattern[str], ...], text: str
) -> re.Match[str] | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match
    return None


def _earliest_match(
    patterns: tuple[re.Pattern[str], ...], text: str, pos: int
) -> re.Match[str] | None:
    matches = [m for p in patterns if (m := p.search(text, pos))]
    return min(matches, key=lambda m: m.start(), default=None)


def find_section_bounds(text: str) -> tuple[int, int] | None:
    """Locate the target section.

    The first start pattern that matches anywhere wins (pattern order, not
    text position, decides). The end is the earliest next-section header
    after the start header.

    Args:
        text: Cleaned document text.

    Returns:
        (start, end) offsets, or None when no start header exists.
    """
    start_match = _first_match(SECTION_START_PATTERNS, text)
    if start_match is None:
        return None

    start = start_match.start()
    if text[start] == "\n":
        start += 1

    end_match = _earliest_match(SECTION_END_PATTERNS, text, start_match.end())
    end = end_match.start() if end_match else len(text)
    return start, end


def isolate(text: str) -> str:
    """Narrow an exam paper to its grammar and vocabulary section.

    Returns the input unchanged when no section header is found; downstream
    filtering then has to cope with non-target content.
    """
    bounds = find_section_bounds(text)
    if bounds is None:
        logger.warning("No grammar/vocabulary section header found, using full text")
        return text

    start, end = bounds
    logger.debug("Isolated section [%d:%d] of %d chars", start, end, len(text))
    return text[start:end]
