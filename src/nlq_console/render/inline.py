"""Inline emphasis and code-span extraction."""

from __future__ import annotations

import re

from nlq_console.types import Bold, Code, InlineRun, InlineSpan, PlainText

_BOLD_SPLIT = re.compile(r"(\*\*.*?\*\*)")
_CODE_SPAN = re.compile(r"`([^`]+)`")


class InlineFormatter:
    """Turns one block's text into ordered plain/bold/code spans.

    Bold markers are matched across the whole text first. Code spans are then
    searched only inside the plain segments left between bold matches, so a
    backtick pair inside ``**...**`` stays part of the bold value. Markers
    without a partner never match and remain literal text.
    """

    def format(self, text: str) -> InlineRun:
        spans: list[InlineSpan] = []
        # re.split with one capture group puts matches at odd indexes.
        for index, segment in enumerate(_BOLD_SPLIT.split(text)):
            if index % 2 == 1:
                spans.append(Bold(segment[2:-2]))
            elif segment:
                spans.extend(self._code_spans(segment))
        return tuple(spans)

    @staticmethod
    def _code_spans(segment: str) -> list[InlineSpan]:
        spans: list[InlineSpan] = []
        last = 0
        for match in _CODE_SPAN.finditer(segment):
            if match.start() > last:
                spans.append(PlainText(segment[last : match.start()]))
            spans.append(Code(match.group(1)))
            last = match.end()
        if last < len(segment):
            spans.append(PlainText(segment[last:]))
        return spans


_default_formatter = InlineFormatter()


def format_inline(text: str) -> InlineRun:
    return _default_formatter.format(text)
