"""OCR response block models.

The OCR endpoint answers in several shapes depending on the model behind it
(layout parsing with markdown, layout parsing with pruned block lists, or
plain text lines). Every shape is normalized into one of the block variants
below before any text is assembled.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class MarkdownBlock(BaseModel):
    """Markdown rendering of a whole page from layout parsing."""

    kind: Literal["markdown"] = "markdown"
    text: str


class LayoutBlock(BaseModel):
    """A single region from a layout parsing block list."""

    kind: Literal["layout"] = "layout"
    text: str
    label: str = ""
    bbox: list[float] = Field(default_factory=list)


class TextLineBlock(BaseModel):
    """A recognized text line from plain OCR."""

    kind: Literal["text_line"] = "text_line"
    text: str


OCRBlock = Annotated[
    Union[MarkdownBlock, LayoutBlock, TextLineBlock],
    Field(discriminator="kind"),
]
