from __future__ import annotations

import re
from dataclasses import dataclass

from ..models import Span

QUOTE_MARKER_PATTERN = re.compile(r"^( {0,3})> ?")


@dataclass(frozen=True)
class QuoteFrame:
    """The inside of a block quote, with its markers removed."""

    lead: str
    inner: str

    def prefix_width(self, span: Span) -> int:
        return len(span.indent) + len(self.lead) + 2


def strip_quote(span: Span) -> QuoteFrame:
    """Remove one level of ``>`` markers from every line of ``span``.

    Lazy continuation lines (no marker) contribute their text without leading
    spaces.
    """
    first = QUOTE_MARKER_PATTERN.match(span.lines[0].content)
    lead = first.group(1) if first else ""
    inner = []
    for line in span.lines:
        marker = QUOTE_MARKER_PATTERN.match(line.content)
        if marker:
            inner.append(line.content[marker.end() :])
        else:
            inner.append(line.content.lstrip(" "))
    return QuoteFrame(lead=lead, inner="".join(inner))


def requote(span: Span, frame: QuoteFrame, inner: str) -> str:
    """Put the markers back in front of formatted quote content."""
    trailing = inner.endswith("\n")
    lines = inner[:-1].split("\n") if trailing else inner.split("\n")
    quoted = []
    for number, text in enumerate(lines):
        head = span.lines[0].prefix if number == 0 else span.indent
        marker = "> " if text.strip("\r") else ">"
        quoted.append(f"{head}{frame.lead}{marker}{text}")
    return "\n".join(quoted) + ("\n" if trailing else "")
