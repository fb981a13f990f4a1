"""Rule-based question type classification.

Each question unit is checked against ``CLASSIFICATION_RULES`` in order and
the first rule that matches decides the type. The order is a priority:
rewrite prompts also contain brackets and blanks, so they must be caught
before word transformation, which in turn must be caught before the
catch-all blank rule for collocations.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from src.config import ClassifierPolicy
from src.ingestion.cleaner import BLANK, normalize_blanks
from src.models.question import (
    COLLOCATION_TAG,
    ROOT_TAG,
    ParsedQuestion,
    QuestionType,
    make_tag,
)

logger = logging.getLogger(__name__)

# Chinese instructions that mark a sentence rewrite task
REWRITE_INSTRUCTION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"对划线部分提问"),
    re.compile(r"改写句子"),
    re.compile(r"保持句意"),
    re.compile(r"被动语态"),
    re.compile(r"连词成句"),
    re.compile(r"同义句"),
    re.compile(r"否定句"),
    re.compile(r"一般疑问句"),
    re.compile(r"反意疑问句"),
)

COLLOCATION_KEYWORDS: tuple[str, ...] = (
    "look forward",
    "interested in",
    "fond of",
    "succeed in",
    "keen on",
)

_PARENTHETICAL_RE = re.compile(r"[(（].*?[)）]")
# Hint word in brackets at the very end, else before trailing non-bracket text
_ROOT_AT_END_RE = re.compile(r"[(（]([a-zA-Z\s]+)[)）]\s*$")
_ROOT_BEFORE_TAIL_RE = re.compile(r"[(（]([a-zA-Z\s]+)[)）][^)）]*$")
_BARE_WORD_AT_END_RE = re.compile(r"[(（][a-zA-Z]+[)）]$")
_OPTIONS_RE = re.compile(r"\bA\s*[.．)）].*\bB\s*[.．)）]", re.DOTALL)


@dataclass(frozen=True)
class ClassificationRule:
    """A question type with the predicate that selects it.

    ``matches`` receives the blank-normalized unit and the active policy;
    ``tags`` computes the auxiliary tags for a unit the rule matched.
    """

    question_type: QuestionType
    matches: Callable[[str, ClassifierPolicy], bool]
    tags: Callable[[str], list[str]] = lambda unit: []


def has_blank(unit: str) -> bool:
    return BLANK in unit


def has_parenthetical(unit: str) -> bool:
    return _PARENTHETICAL_RE.search(unit) is not None


def extract_root_word(unit: str) -> str | None:
    """Return the bracketed hint word of a word transformation item."""
    match = _ROOT_AT_END_RE.search(unit) or _ROOT_BEFORE_TAIL_RE.search(unit)
    if match is None:
        return None
    return match.group(1).strip() or None


def _is_sentence_transformation(unit: str, policy: ClassifierPolicy) -> bool:
    if any(p.search(unit) for p in REWRITE_INSTRUCTION_PATTERNS):
        return True
    return (
        has_parenthetical(unit)
        and has_blank(unit)
        and ("?" in unit or "？" in unit or len(unit) > policy.long_unit_length)
    )


def _is_word_transformation(unit: str, policy: ClassifierPolicy) -> bool:
    if not (has_parenthetical(unit) and has_blank(unit)):
        return False
    if extract_root_word(unit):
        return True
    # Long bracketed sentences without a clean hint word still default here
    return len(unit) > policy.sentence_like_length and ("?" in unit or "." in unit)


def _is_collocation(unit: str, policy: ClassifierPolicy) -> bool:
    return has_blank(unit) and _BARE_WORD_AT_END_RE.search(unit.strip()) is None


def _root_tags(unit: str) -> list[str]:
    root = extract_root_word(unit)
    return [make_tag(ROOT_TAG, root)] if root else []


def _collocation_tags(unit: str) -> list[str]:
    if not _OPTIONS_RE.search(unit):
        return []
    lowered = unit.lower()
    return [make_tag(COLLOCATION_TAG, kw) for kw in COLLOCATION_KEYWORDS if kw in lowered]


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(QuestionType.SENTENCE_TRANSFORMATION, _is_sentence_transformation),
    ClassificationRule(QuestionType.WORD_TRANSFORMATION, _is_word_transformation, _root_tags),
    ClassificationRule(QuestionType.COLLOCATION, _is_collocation),
    ClassificationRule(QuestionType.GRAMMAR, lambda unit, policy: True, _collocation_tags),
)


def classify(unit: str, policy: ClassifierPolicy | None = None) -> ParsedQuestion:
    """Assign a question type and auxiliary tags to a question unit.

    Never fails: a unit no specific rule recognizes becomes ``grammar``.

    Args:
        unit: One question unit from the segmenter.
        policy: Length thresholds; defaults to ``ClassifierPolicy()``.

    Returns:
        ParsedQuestion with an empty answer.
    """
    policy = policy or ClassifierPolicy()
    content = unit.strip()
    normalized = normalize_blanks(content)

    for rule in CLASSIFICATION_RULES:
        if rule.matches(normalized, policy):
            logger.debug("Classified as %s: %.40s", rule.question_type.value, content)
            return ParsedQuestion(
                content=content,
                type=rule.question_type,
                answer="",
                tags=rule.tags(normalized),
            )

    # The grammar rule always matches; kept for type checkers
    return ParsedQuestion(content=content)
