"""Block-level structure detection for natural-language answers."""

from __future__ import annotations

import re
from enum import Enum

from nlq_console.render.inline import InlineFormatter
from nlq_console.types import Block, Document, Heading, ListBlock, Paragraph

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
# `.` does not cross newlines, so only a single-line paragraph can be wrapped.
_WRAPPED_BOLD = re.compile(r"\*\*.*\*\*")
_NUMBERED_BOLD = re.compile(r"\d+\.\s+\*\*")
_BULLET_MARKER = re.compile(r"[-*•]\s")
_NUMBER_MARKER = re.compile(r"\d+\.\s")


class ParagraphKind(str, Enum):
    HEADING = "heading"
    LIST = "list"
    PARAGRAPH = "paragraph"


def classify_paragraph(paragraph: str) -> ParagraphKind:
    """Classify one trimmed paragraph; the first matching rule wins.

    1. heading: wrapped in ``**`` or ``<n>. **``-prefixed
    2. list: first line starts with a bullet or ``<n>.`` marker
    3. paragraph: everything else
    """

    if _WRAPPED_BOLD.fullmatch(paragraph) or _NUMBERED_BOLD.match(paragraph):
        return ParagraphKind.HEADING
    if _BULLET_MARKER.match(paragraph) or _NUMBER_MARKER.match(paragraph):
        return ParagraphKind.LIST
    return ParagraphKind.PARAGRAPH


def split_paragraphs(text: str) -> list[str]:
    return [part.strip() for part in _PARAGRAPH_BREAK.split(text) if part.strip()]


def strip_list_marker(line: str) -> str:
    cleaned = line.strip()
    for marker in (_BULLET_MARKER, _NUMBER_MARKER):
        match = marker.match(cleaned)
        if match:
            cleaned = cleaned[match.end() :]
    return cleaned.strip()


class TextBlockParser:
    """Splits an answer into headings, lists and formatted paragraphs.

    Total over any string: blank paragraphs are skipped, everything else
    yields exactly one block in source order.
    """

    def __init__(self, formatter: InlineFormatter | None = None) -> None:
        self.formatter = formatter or InlineFormatter()

    def parse(self, text: str) -> Document:
        if not text:
            return Document()
        return Document(
            blocks=tuple(self._build_block(paragraph) for paragraph in split_paragraphs(text))
        )

    def _build_block(self, paragraph: str) -> Block:
        kind = classify_paragraph(paragraph)
        if kind is ParagraphKind.HEADING:
            return Heading(text=paragraph.replace("**", ""))
        if kind is ParagraphKind.LIST:
            lines = [line for line in paragraph.splitlines() if line.strip()]
            return ListBlock(
                items=tuple(self.formatter.format(strip_list_marker(line)) for line in lines)
            )
        return Paragraph(runs=self.formatter.format(paragraph))


_default_parser = TextBlockParser()


def parse_document(text: str) -> Document:
    return _default_parser.parse(text)
