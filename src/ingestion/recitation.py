"""Word-list (recitation) parsing with word-family grouping.

Vocabulary handouts list one entry per line (``apply (v.) 申请``) or pack
several morphologically related forms onto a line, joined by hyphens and
separated by wide whitespace::

    bake (v.) 烘焙-baker (n.) 烘焙师-bakery (n.) 烘焙坊

Lines are consumed left to right by ``functools.reduce`` with an immutable
``RecitationState``. The state carries the current family tag and the
*anchor*, the head word of the previous entry, which is the only word a new
entry is compared with. Because the anchor moves on every entry while the
family tag only changes when an entry is unrelated, a run of words that each
resemble their predecessor stays in one family even when the last word has
nothing in common with the first.
"""

import logging
import re
from dataclasses import dataclass, replace
from functools import reduce

from src.models.question import (
    FAMILY_TAG,
    ROOT_TAG,
    ParsedQuestion,
    QuestionType,
    make_tag,
)

logger = logging.getLogger(__name__)

MIN_LINE_LENGTH = 3
HEADING_MARKERS: tuple[str, ...] = ("List", "Unit")

# Hyphen or en-dash that is not the shaft of an "->" arrow
_CHAIN_SEPARATOR_RE = re.compile(r"\s*[-–](?!>)\s*")
_WIDE_SPACE_RE = re.compile(r"\s{2,}|\t+")

# word (pos) definition
_STRICT_ENTRY_RE = re.compile(r"^(\d+[.\s]*)?([a-zA-Z\-\s/']+?)\s*\(([a-z.]+)\)\s*(.+)$")
# word definition
_LOOSE_ENTRY_RE = re.compile(r"^(\d+[.\s]*)?([a-zA-Z\-\s/']+)\s+(.+)$")
_POS_ONLY_RE = re.compile(r"^\(([a-z.]+)\)$")

# Optional number, word, separator, definition. The word may carry a glued
# part of speech, e.g. "apply(v) 申请".
_SINGLE_ENTRY_RE = re.compile(
    r"^(?:\d+[.)、\s]*)?"
    r"(?P<word>[a-zA-Z][a-zA-Z\-\s()'.]*?)"
    r"(?P<sep>\s*(?:->|→)\s*|\s*\.{2,}\s*|\s*…+\s*"
    r"|\s+(?:n|v|vt|vi|a|adj|adv|prep|conj|pron|num|art|int)\.\s*|\s+)"
    r"(?P<definition>[^\sa-zA-Z\->→].*)$"
)
_GLUED_POS_RE = re.compile(r"\s*\(([a-z.]+)\)\s*$")
_ARROW_RE = re.compile(r"^(?:\d+[.)、\s]*)?(?P<root>.+?)\s*(?:->|→)\s*(?P<derived>.+)$")
_INLINE_POS_RE = re.compile(r"^\s+(\w+\.)\s*$")
_LEADING_POS_RE = re.compile(r"^\(([a-z.]+)\)\s*")


@dataclass(frozen=True)
class Entry:
    """A parsed word with its definition (the answer)."""

    word: str
    definition: str
    question_type: QuestionType = QuestionType.VOCABULARY
    root: str | None = None


@dataclass(frozen=True)
class RecitationState:
    """Accumulator threaded through the line scan."""

    family: str | None = None
    anchor: str | None = None
    items: tuple[ParsedQuestion, ...] = ()


def _letters(word: str) -> str:
    return re.sub(r"[^a-z]", "", word.lower())


def is_related(root: str | None, candidate: str) -> bool:
    """Decide whether two words plausibly belong to one word family.

    Deliberately lenient: substring containment either way, or a shared
    prefix of at least three letters. Words shorter than three letters must
    match exactly.
    """
    if root is None:
        return False
    a, b = _letters(root), _letters(candidate)
    if len(a) < 3 or len(b) < 3:
        return a == b
    if a in b or b in a:
        return True
    prefix = 0
    for x, y in zip(a, b):
        if x != y:
            break
        prefix += 1
    return prefix >= 3


def is_skipped_line(line: str) -> bool:
    """Headings and fragments that carry no entry."""
    return len(line) < MIN_LINE_LENGTH or any(marker in line for marker in HEADING_MARKERS)


def is_packed_line(line: str) -> bool:
    return _CHAIN_SEPARATOR_RE.search(line) is not None or _WIDE_SPACE_RE.search(line) is not None


def parse_chain_element(part: str) -> Entry | None:
    """Parse one element of a hyphen chain: strict form first, then loose."""
    strict = _STRICT_ENTRY_RE.match(part)
    if strict:
        word = strict.group(2).strip()
        definition = f"{strict.group(3)} {strict.group(4).strip()}"
        return Entry(word=word, definition=definition) if word else None

    loose = _LOOSE_ENTRY_RE.match(part)
    if loose:
        word = loose.group(2).strip()
        definition = loose.group(3).strip()
        pos_only = _POS_ONLY_RE.match(definition)
        if pos_only:
            definition = pos_only.group(1)
        return Entry(word=word, definition=definition) if word else None

    return None


def parse_single_entry(line: str) -> Entry | None:
    """Parse a line holding one entry, falling back to ``root -> derived``."""
    match = _SINGLE_ENTRY_RE.match(line)
    if match:
        word = match.group("word").strip()
        definition = match.group("definition").strip()

        glued = _GLUED_POS_RE.search(word)
        if glued:
            word = word[: glued.start()].strip()
            definition = f"{glued.group(1)} {definition}"
        else:
            inline_pos = _INLINE_POS_RE.match(match.group("sep"))
            if inline_pos:
                definition = f"{inline_pos.group(1)} {definition}"
            else:
                # "apple (n.) 苹果" -> "n. 苹果"
                definition = _LEADING_POS_RE.sub(r"\1 ", definition).strip()

        if word:
            return Entry(word=word, definition=definition)

    arrow = _ARROW_RE.match(line)
    if arrow:
        root = arrow.group("root").strip()
        derived = arrow.group("derived").strip()
        if root and derived:
            return Entry(
                word=root,
                definition=derived,
                question_type=QuestionType.WORD_TRANSFORMATION,
                root=root,
            )

    return None


def _add_group(state: RecitationState, entries: list[Entry]) -> RecitationState:
    """Append a group of related entries headed by ``entries[0]``."""
    head = entries[0].word
    family = state.family if is_related(state.anchor, head) else head

    items = list(state.items)
    for entry in entries:
        tags = [make_tag(ROOT_TAG, entry.root)] if entry.root else []
        tags.append(make_tag(FAMILY_TAG, family))
        items.append(
            ParsedQuestion(
                content=entry.word,
                type=entry.question_type,
                answer=entry.definition,
                tags=tags,
            )
        )

    return replace(state, family=family, anchor=head, items=tuple(items))


def _parse_packed_line(state: RecitationState, line: str) -> RecitationState:
    for block in _WIDE_SPACE_RE.split(line):
        parts = [p.strip() for p in _CHAIN_SEPARATOR_RE.split(block) if p.strip()]
        entries = [entry for part in parts if (entry := parse_chain_element(part))]
        if len(entries) < len(parts):
            logger.debug("Dropped %d unparseable chain parts in %r", len(parts) - len(entries), block)
        if entries:
            state = _add_group(state, entries)
    return state


def consume_line(state: RecitationState, raw_line: str) -> RecitationState:
    """Reduction step: fold one input line into the state."""
    line = raw_line.strip()
    if is_skipped_line(line):
        return state

    if is_packed_line(line):
        return _parse_packed_line(state, line)

    entry = parse_single_entry(line)
    if entry is None:
        logger.debug("Unparseable recitation line: %r", line)
        return state
    return _add_group(state, [entry])


def parse_recitation(text: str) -> list[ParsedQuestion]:
    """Parse word-list text into vocabulary items.

    Args:
        text: Extracted word-list text, one or more entries per line.

    Returns:
        Items in input order with ``answer`` set to the definition and a
        ``Family:<root>`` tag on every item.
    """
    state = reduce(consume_line, text.splitlines(), RecitationState())
    logger.info("Parsed %d recitation items", len(state.items))
    return list(state.items)
