"""Parsed question data model."""

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

ROOT_TAG = "Root"
FAMILY_TAG = "Family"
SOURCE_TAG = "Source"
COLLOCATION_TAG = "Collocation"


class QuestionType(str, Enum):
    """Question categories produced by the import pipeline."""

    GRAMMAR = "grammar"
    WORD_TRANSFORMATION = "word_transformation"
    SENTENCE_TRANSFORMATION = "sentence_transformation"
    COLLOCATION = "collocation"
    VOCABULARY = "vocabulary"


def make_tag(prefix: str, value: str) -> str:
    """Build a reserved-prefix tag such as ``Root:operation``."""
    return f"{prefix}:{value}"


class ParsedQuestion(BaseModel):
    """A question unit ready for human review.

    ``id`` is a client-side identifier only; the external store assigns a
    durable key when the reviewed questions are saved.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    content: str
    type: QuestionType = QuestionType.GRAMMAR
    answer: str = ""
    tags: list[str] = Field(default_factory=list)

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, tags: list[str]) -> list[str]:
        # Ordered set: first occurrence wins
        return list(dict.fromkeys(tags))

    def add_tag(self, tag: str) -> None:
        """Append a tag unless it is already present."""
        if tag not in self.tags:
            self.tags.append(tag)

    def tag_value(self, prefix: str) -> str | None:
        """Return the value of the first tag with the given reserved prefix."""
        marker = f"{prefix}:"
        for tag in self.tags:
            if tag.startswith(marker):
                return tag[len(marker):]
        return None
