from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, Flag
from typing import List, Optional, Tuple


class SpanKind(Enum):
    TEXT = "text"
    PROTECTED = "protected"
    OPAQUE = "opaque"


class RegionKind(Enum):
    PARAGRAPH = "paragraph"
    BLANK = "blank"
    FRONT_MATTER = "front_matter"
    IGNORED_RANGE = "ignored_range"
    FOOTNOTE = "footnote"
    CODE_BLOCK = "code_block"
    HTML_BLOCK = "html_block"
    LINK_CATEGORY = "link_category"
    HEADING = "heading"
    THEMATIC_BREAK = "thematic_break"
    TABLE = "table"
    LINK_DEFINITION = "link_definition"
    BLOCK_QUOTE = "block_quote"


class TokenKind(Enum):
    WORD = "word"
    PROTECTED = "protected"
    LINEBREAK = "linebreak"


class LinkActions(Enum):
    NONE = "none"
    OUTSOURCE_INLINE = "outsource-inline"
    COLLATE_DEFS = "collate-defs"
    BOTH = "both"

    @property
    def outsources(self) -> bool:
        return self in (LinkActions.OUTSOURCE_INLINE, LinkActions.BOTH)

    @property
    def collates(self) -> bool:
        return self in (LinkActions.COLLATE_DEFS, LinkActions.BOTH)


class KeepWhitespace(Flag):
    NONE = 0
    IN_LINKS = 1
    LINEBREAKS = 2
    BOTH = IN_LINKS | LINEBREAKS

    @classmethod
    def parse(cls, value: str) -> "KeepWhitespace":
        mapping = {
            "none": cls.NONE,
            "in-links": cls.IN_LINKS,
            "linebreaks": cls.LINEBREAKS,
            "both": cls.BOTH,
        }
        try:
            return mapping[value.strip().lower()]
        except KeyError as exc:
            raise ValueError("possible values: none, in-links, linebreaks, both") from exc


class Case(Enum):
    IGNORE = "ignore"
    KEEP = "keep"


@dataclass(frozen=True)
class SourceLine:
    """One physical line of the input.

    ``raw`` is the line exactly as it appears in the document (line ending
    included); ``content`` is the suffix of ``raw`` left once the enclosing
    container markers (list indentation, footnote indentation) are removed.
    ``number`` counts lines from zero in the text being classified.
    """

    raw: str
    content: str
    number: int = 0

    @property
    def prefix(self) -> str:
        return self.raw[: len(self.raw) - len(self.content)]

    @property
    def is_blank(self) -> bool:
        return not self.content.strip(" \t\r\n")

    def shifted(self, columns: int) -> "SourceLine":
        return SourceLine(raw=self.raw, content=self.content[columns:], number=self.number)


@dataclass(frozen=True)
class Span:
    kind: SpanKind
    region: RegionKind
    lines: Tuple[SourceLine, ...]
    indent: str = ""

    @property
    def raw_text(self) -> str:
        return "".join(line.raw for line in self.lines)

    @property
    def leader(self) -> str:
        first = self.lines[0]
        content = first.content
        stripped = content.lstrip(" ")
        return first.raw[: len(first.raw) - len(stripped)]

    @property
    def ends_with_newline(self) -> bool:
        return bool(self.lines) and self.lines[-1].raw.endswith("\n")


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str = ""
    # First word on its source line, leading spaces aside.
    line_start: bool = field(default=False, compare=False)

    @property
    def is_word(self) -> bool:
        return self.kind is TokenKind.WORD


@dataclass
class SentenceFragment:
    words: List[Token]
    leading_indent: str = ""
    trailing_marker: Optional[str] = None
    hard_break: Optional[str] = None


@dataclass(frozen=True)
class LinkDefinition:
    label: str
    url: str
    category: Optional[str] = None
    title: str = ""

    def render(self) -> str:
        suffix = f" {self.title}" if self.title else ""
        return f"[{self.label}]: {self.url}{suffix}"


@dataclass(frozen=True)
class FormatResult:
    output_text: str
    changed: bool


@dataclass
class Document:
    spans: List[Span] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(span.raw_text for span in self.spans)
