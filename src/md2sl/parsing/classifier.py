from __future__ import annotations

import logging
import re
from typing import Callable, List, Optional, Tuple

from ..config import ResolvedConfig
from ..models import Document, RegionKind, SourceLine, Span, SpanKind
from .ignore import Directive, IgnoreDirectives
from .quotes import strip_quote

logger = logging.getLogger(__name__)


FENCE_OPEN_PATTERN = re.compile(r"^( {0,3})(`{3,}(?!.*`)|~{3,})(.*)$")
INDENTED_CODE_PATTERN = re.compile(r"^(?: {4}| {0,3}\t)")
ATX_HEADING_PATTERN = re.compile(r"^ {0,3}#{1,6}(?:[ \t].*)?$")
SETEXT_UNDERLINE_PATTERN = re.compile(r"^ {0,3}(?:=+|-+)[ \t]*$")
THEMATIC_BREAK_PATTERN = re.compile(r"^ {0,3}(?:(?:-[ \t]*){3,}|(?:_[ \t]*){3,}|(?:\*[ \t]*){3,})$")
BLOCKQUOTE_PATTERN = re.compile(r"^ {0,3}>")
LIST_ITEM_PATTERN = re.compile(r"^( {0,3})([*+-]|\d{1,9}[.)])([ \t]+|$)(.*)$")
FOOTNOTE_PATTERN = re.compile(r"^ {0,3}\[\^[^\]\s]+\]:[ \t]?")
LINK_DEFINITION_PATTERN = re.compile(
    r"^ {0,3}\[(?!\^)((?:[^\[\]\\]|\\.)+)\]:[ \t]*(<[^>\n]*>|\S+)"
    r"(?:[ \t]+(\"[^\"]*\"|'[^']*'|\([^)]*\)))?[ \t]*$"
)
LINK_CATEGORY_PATTERN = re.compile(r"^ {0,3}<!--\s*link-category:(.*?)-->\s*$")
TABLE_DELIMITER_PATTERN = re.compile(r"^ {0,3}\|?[ \t]*:?-+:?[ \t]*(?:\|[ \t]*:?-+:?[ \t]*)*\|?[ \t]*$")

HTML_BLOCK_TAGS = (
    "address|article|aside|base|basefont|blockquote|body|caption|center|col|colgroup|dd|details|"
    "dialog|dir|div|dl|dt|fieldset|figcaption|figure|footer|form|frame|frameset|h1|h2|h3|h4|h5|"
    "h6|head|header|hr|html|iframe|legend|li|link|main|menu|menuitem|nav|noframes|ol|optgroup|"
    "option|p|param|search|section|summary|table|tbody|td|tfoot|th|thead|title|tr|track|ul"
)
# CommonMark HTML block start conditions 1 to 6 with their end conditions; None means a blank line.
HTML_BLOCK_RULES: Tuple[Tuple[re.Pattern, Optional[re.Pattern]], ...] = (
    (
        re.compile(r"^ {0,3}<(?:script|pre|style|textarea)(?:\s|>|$)", re.IGNORECASE),
        re.compile(r"</(?:script|pre|style|textarea)>", re.IGNORECASE),
    ),
    (re.compile(r"^ {0,3}<!--"), re.compile(r"-->")),
    (re.compile(r"^ {0,3}<\?"), re.compile(r"\?>")),
    (re.compile(r"^ {0,3}<![A-Za-z]"), re.compile(r">")),
    (re.compile(r"^ {0,3}<!\[CDATA\["), re.compile(r"\]\]>")),
    (re.compile(rf"^ {{0,3}}</?(?:{HTML_BLOCK_TAGS})(?:\s|/?>|$)", re.IGNORECASE), None),
)
HTML_BLOCK_TYPE7_PATTERN = re.compile(
    r"^ {0,3}(?:<[A-Za-z][A-Za-z0-9-]*"
    r"(?:\s+[A-Za-z_:][\w.:-]*(?:\s*=\s*(?:[^\s\"'=<>`]+|'[^']*'|\"[^\"]*\"))?)*\s*/?>"
    r"|</[A-Za-z][A-Za-z0-9-]*\s*>)\s*$"
)

FOOTNOTE_CONTENT_WIDTH = 4

Consumer = Callable[[List[SourceLine], int, str], Tuple[List[Span], int]]


class _UnclosedIgnoreRange(Exception):
    """Raised when an ignore range has no end marker, however deep it opened.

    ``spans`` collects everything classified before ``line`` on the way back
    up to the top level, which protects the rest of the document.
    """

    def __init__(self, line: SourceLine) -> None:
        super().__init__(line.number)
        self.line = line
        self.spans: List[Span] = []


def split_lines(text: str) -> List[str]:
    """Split on ``\\n`` only, keeping line endings."""
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _numbered(texts: List[str]) -> List[SourceLine]:
    return [SourceLine(raw=text, content=text, number=number) for number, text in enumerate(texts)]


def _body(line: SourceLine) -> str:
    return line.content.rstrip("\r\n")


def _leading_spaces(text: str) -> int:
    return len(text) - len(text.lstrip(" "))


class RegionClassifier:
    """Partition a markdown document into typed, contiguous spans.

    Each block start is tried against an ordered transition table; the first
    matching entry consumes the block. Containers (list items, formattable
    footnotes) are classified recursively with their indent appended to the
    indent carried by the inner spans.
    """

    def __init__(self, config: ResolvedConfig) -> None:
        self._config = config
        self._ignore = IgnoreDirectives(config.ignore_markers)
        self._transitions: List[Tuple[Callable[[List[SourceLine], int], bool], Consumer]] = [
            (self._starts_blank, self._consume_blank),
            (self._starts_ignored_range, self._consume_ignored_range),
            (self._starts_fence, self._consume_fence),
            (self._starts_indented_code, self._consume_indented_code),
            (self._starts_link_category, self._consume_single(RegionKind.LINK_CATEGORY)),
            (self._starts_html_block, self._consume_html_block),
            (self._starts_atx_heading, self._consume_single(RegionKind.HEADING)),
            (self._starts_thematic_break, self._consume_single(RegionKind.THEMATIC_BREAK)),
            (self._starts_block_quote, self._consume_block_quote),
            (self._starts_footnote, self._consume_footnote),
            (self._starts_link_definition, self._consume_single(RegionKind.LINK_DEFINITION)),
            (self._starts_table, self._consume_table),
            (self._starts_list_item, self._consume_list_item),
        ]

    def classify(self, text: str) -> List[Span]:
        lines = _numbered(split_lines(text))
        try:
            spans = self._classify_lines(lines, "")
        except _UnclosedIgnoreRange as exc:
            logger.warning(
                "ignore range opened on line %d is never closed, protecting the rest of the document",
                exc.line.number + 1,
            )
            rest = Span(SpanKind.PROTECTED, RegionKind.IGNORED_RANGE, tuple(lines[exc.line.number :]))
            spans = exc.spans + [rest]
        logger.debug("classified %d lines into %d spans", len(lines), len(spans))
        return spans

    def _classify_lines(self, lines: List[SourceLine], indent: str) -> List[Span]:
        spans: List[Span] = []
        index = 0
        while index < len(lines):
            try:
                produced, index = self._consume_next(lines, index, indent)
            except _UnclosedIgnoreRange as exc:
                exc.spans[:0] = spans
                raise
            spans.extend(produced)
        return spans

    def _consume_next(self, lines: List[SourceLine], index: int, indent: str) -> Tuple[List[Span], int]:
        for starts, consume in self._transitions:
            if starts(lines, index):
                return consume(lines, index, indent)
        return self._consume_paragraph(lines, index, indent)

    # Block start predicates ------------------------------------------
    def _starts_blank(self, lines: List[SourceLine], index: int) -> bool:
        return lines[index].is_blank

    def _starts_ignored_range(self, lines: List[SourceLine], index: int) -> bool:
        return self._ignore.directive(_body(lines[index])) is Directive.START

    def _starts_fence(self, lines: List[SourceLine], index: int) -> bool:
        return FENCE_OPEN_PATTERN.match(_body(lines[index])) is not None

    def _starts_indented_code(self, lines: List[SourceLine], index: int) -> bool:
        return INDENTED_CODE_PATTERN.match(_body(lines[index])) is not None

    def _starts_link_category(self, lines: List[SourceLine], index: int) -> bool:
        return LINK_CATEGORY_PATTERN.match(_body(lines[index])) is not None

    def _starts_html_block(self, lines: List[SourceLine], index: int) -> bool:
        body = _body(lines[index])
        return self._html_rule(body) is not None or HTML_BLOCK_TYPE7_PATTERN.match(body) is not None

    def _starts_atx_heading(self, lines: List[SourceLine], index: int) -> bool:
        return ATX_HEADING_PATTERN.match(_body(lines[index])) is not None

    def _starts_thematic_break(self, lines: List[SourceLine], index: int) -> bool:
        return THEMATIC_BREAK_PATTERN.match(_body(lines[index])) is not None

    def _starts_block_quote(self, lines: List[SourceLine], index: int) -> bool:
        return BLOCKQUOTE_PATTERN.match(_body(lines[index])) is not None

    def _starts_footnote(self, lines: List[SourceLine], index: int) -> bool:
        return FOOTNOTE_PATTERN.match(_body(lines[index])) is not None

    def _starts_link_definition(self, lines: List[SourceLine], index: int) -> bool:
        return LINK_DEFINITION_PATTERN.match(_body(lines[index])) is not None

    def _starts_table(self, lines: List[SourceLine], index: int) -> bool:
        if index + 1 >= len(lines):
            return False
        header = _body(lines[index])
        delimiter = _body(lines[index + 1])
        return "|" in header and "|" in delimiter and TABLE_DELIMITER_PATTERN.match(delimiter) is not None

    def _starts_list_item(self, lines: List[SourceLine], index: int) -> bool:
        return LIST_ITEM_PATTERN.match(_body(lines[index])) is not None

    def _interrupts_paragraph(self, lines: List[SourceLine], index: int) -> bool:
        body = _body(lines[index])
        if (
            FENCE_OPEN_PATTERN.match(body)
            or ATX_HEADING_PATTERN.match(body)
            or THEMATIC_BREAK_PATTERN.match(body)
            or BLOCKQUOTE_PATTERN.match(body)
            or self._html_rule(body) is not None
            or self._starts_table(lines, index)
        ):
            return True
        item = LIST_ITEM_PATTERN.match(body)
        if item and item.group(4).strip():
            marker = item.group(2)
            return not marker[0].isdigit() or marker[:-1] == "1"
        return False

    def _html_rule(self, body: str) -> Optional[Tuple[re.Pattern, Optional[re.Pattern]]]:
        for start, end in HTML_BLOCK_RULES:
            if start.match(body):
                return start, end
        return None

    # Block consumers --------------------------------------------------
    def _consume_single(self, region: RegionKind) -> Consumer:
        def consume(lines: List[SourceLine], index: int, indent: str) -> Tuple[List[Span], int]:
            return [Span(SpanKind.OPAQUE, region, (lines[index],), indent)], index + 1

        return consume

    def _consume_blank(self, lines: List[SourceLine], index: int, indent: str) -> Tuple[List[Span], int]:
        end = index
        while end < len(lines) and lines[end].is_blank:
            end += 1
        return [Span(SpanKind.OPAQUE, RegionKind.BLANK, tuple(lines[index:end]), indent)], end

    def _consume_ignored_range(self, lines: List[SourceLine], index: int, indent: str) -> Tuple[List[Span], int]:
        end = index + 1
        while end < len(lines):
            end += 1
            if self._ignore.directive(_body(lines[end - 1])) is Directive.END:
                return [Span(SpanKind.PROTECTED, RegionKind.IGNORED_RANGE, tuple(lines[index:end]), indent)], end
        raise _UnclosedIgnoreRange(lines[index])

    def _consume_fence(self, lines: List[SourceLine], index: int, indent: str) -> Tuple[List[Span], int]:
        opening = FENCE_OPEN_PATTERN.match(_body(lines[index]))
        fence = opening.group(2)
        closing = re.compile(rf"^ {{0,3}}{re.escape(fence[0])}{{{len(fence)},}}[ \t]*$")
        end = index + 1
        while end < len(lines):
            if closing.match(_body(lines[end])):
                end += 1
                break
            end += 1
        else:
            logger.warning("code fence opened on line %d is never closed", index + 1)
        return [Span(SpanKind.OPAQUE, RegionKind.CODE_BLOCK, tuple(lines[index:end]), indent)], end

    def _consume_indented_code(self, lines: List[SourceLine], index: int, indent: str) -> Tuple[List[Span], int]:
        end = index + 1
        last_code = index
        while end < len(lines):
            if lines[end].is_blank:
                end += 1
                continue
            if not INDENTED_CODE_PATTERN.match(_body(lines[end])):
                break
            last_code = end
            end += 1
        end = last_code + 1
        return [Span(SpanKind.OPAQUE, RegionKind.CODE_BLOCK, tuple(lines[index:end]), indent)], end

    def _consume_html_block(self, lines: List[SourceLine], index: int, indent: str) -> Tuple[List[Span], int]:
        rule = self._html_rule(_body(lines[index]))
        end_pattern = rule[1] if rule is not None else None
        end = index
        if end_pattern is None:
            while end < len(lines) and not lines[end].is_blank:
                end += 1
        else:
            while end < len(lines):
                found = end_pattern.search(_body(lines[end]))
                end += 1
                if found:
                    break
        return [Span(SpanKind.OPAQUE, RegionKind.HTML_BLOCK, tuple(lines[index:end]), indent)], end

    def _consume_block_quote(self, lines: List[SourceLine], index: int, indent: str) -> Tuple[List[Span], int]:
        end = index + 1
        while end < len(lines):
            line = lines[end]
            if line.is_blank:
                break
            if not BLOCKQUOTE_PATTERN.match(_body(line)) and self._interrupts_paragraph(lines, end):
                break
            end += 1
        kind = SpanKind.TEXT if self._config.format_block_quotes else SpanKind.OPAQUE
        cut = self._unclosed_ignore_in_quote(lines[index:end])
        if cut is not None:
            exc = _UnclosedIgnoreRange(lines[index + cut])
            if cut:
                exc.spans.append(Span(kind, RegionKind.BLOCK_QUOTE, tuple(lines[index : index + cut]), indent))
            raise exc
        return [Span(kind, RegionKind.BLOCK_QUOTE, tuple(lines[index:end]), indent)], end

    def _unclosed_ignore_in_quote(self, quote_lines: List[SourceLine]) -> Optional[int]:
        """Offset of the quote line opening an ignore range that never closes, if any."""
        quote = Span(SpanKind.OPAQUE, RegionKind.BLOCK_QUOTE, tuple(quote_lines))
        try:
            self._classify_lines(_numbered(split_lines(strip_quote(quote).inner)), "")
        except _UnclosedIgnoreRange as exc:
            return exc.line.number
        return None

    def _consume_table(self, lines: List[SourceLine], index: int, indent: str) -> Tuple[List[Span], int]:
        end = index + 2
        while end < len(lines) and not lines[end].is_blank and not self._interrupts_paragraph(lines, end):
            end += 1
        return [Span(SpanKind.OPAQUE, RegionKind.TABLE, tuple(lines[index:end]), indent)], end

    def _consume_footnote(self, lines: List[SourceLine], index: int, indent: str) -> Tuple[List[Span], int]:
        end = self._container_end(lines, index, FOOTNOTE_CONTENT_WIDTH)
        marker = FOOTNOTE_PATTERN.match(_body(lines[index]))
        children = self._container_children(lines, index, end, marker.end(), FOOTNOTE_CONTENT_WIDTH)
        formatted = self._config.features.format_footnotes
        try:
            spans = self._classify_lines(children, indent + " " * FOOTNOTE_CONTENT_WIDTH)
        except _UnclosedIgnoreRange as exc:
            if not formatted:
                cut = next(position for position in range(index, end) if lines[position].number == exc.line.number)
                head = tuple(lines[index:cut])
                exc.spans = [Span(SpanKind.PROTECTED, RegionKind.FOOTNOTE, head, indent)] if head else []
            raise
        if not formatted:
            return [Span(SpanKind.PROTECTED, RegionKind.FOOTNOTE, tuple(lines[index:end]), indent)], end
        return spans, end

    def _consume_list_item(self, lines: List[SourceLine], index: int, indent: str) -> Tuple[List[Span], int]:
        lead, marker, spacing, rest = LIST_ITEM_PATTERN.match(_body(lines[index])).groups()
        marker_width = len(lead) + len(marker)
        if not rest or len(spacing) > 4:
            content_width = marker_width + 1
        else:
            content_width = marker_width + len(spacing)
        end = self._container_end(lines, index, content_width)
        children = self._container_children(lines, index, end, content_width, content_width)
        return self._classify_lines(children, indent + " " * content_width), end

    # Paragraphs ----------------------------------------------------------
    def _consume_paragraph(self, lines: List[SourceLine], index: int, indent: str) -> Tuple[List[Span], int]:
        end = index + 1
        while end < len(lines):
            line = lines[end]
            if line.is_blank:
                break
            if SETEXT_UNDERLINE_PATTERN.match(_body(line)):
                heading = tuple(lines[index : end + 1])
                return [Span(SpanKind.OPAQUE, RegionKind.HEADING, heading, indent)], end + 1
            if self._interrupts_paragraph(lines, end):
                break
            end += 1
        return [Span(SpanKind.TEXT, RegionKind.PARAGRAPH, tuple(lines[index:end]), indent)], end

    # Containers ------------------------------------------------------------
    def _container_end(self, lines: List[SourceLine], index: int, content_width: int) -> int:
        end = index + 1
        last_member = index
        while end < len(lines):
            line = lines[end]
            if line.is_blank:
                end += 1
                continue
            body = _body(line)
            if _leading_spaces(body) >= content_width:
                last_member = end
                end += 1
                continue
            previous_blank = lines[end - 1].is_blank
            if previous_blank or LIST_ITEM_PATTERN.match(body) or self._interrupts_paragraph(lines, end):
                break
            # Lazy continuation of the item's paragraph.
            last_member = end
            end += 1
        return last_member + 1

    def _container_children(
        self,
        lines: List[SourceLine],
        start: int,
        end: int,
        first_shift: int,
        content_width: int,
    ) -> List[SourceLine]:
        children = [lines[start].shifted(first_shift)]
        for line in lines[start + 1 : end]:
            if line.is_blank:
                children.append(SourceLine(raw=line.raw, content=line.content.lstrip(" \t"), number=line.number))
                continue
            shift = min(content_width, _leading_spaces(line.content))
            children.append(line.shifted(shift))
        return children


def classify(text: str, config: ResolvedConfig) -> Document:
    return Document(RegionClassifier(config).classify(text))
