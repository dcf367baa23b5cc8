from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

AUTOLINK_PATTERN = re.compile(r"<[A-Za-z][A-Za-z0-9+.-]{1,31}:[^<>\s]*>|<[^<>\s@]+@[^<>\s@]+>")
INLINE_HTML_PATTERN = re.compile(r"</?[A-Za-z][A-Za-z0-9-]*(?:\s[^<>]*)?/?>")
INLINE_DESTINATION_PATTERN = re.compile(
    r"\([ \t\n]*(<[^<>\n]*>|(?:[^\s()\\]|\\.|\([^\s()]*\))*)"
    r"(?:[ \t\n]+(\"(?:[^\"\\]|\\.)*\"|'(?:[^'\\]|\\.)*'|\((?:[^()\\]|\\.)*\)))?[ \t\n]*\)"
)
REFERENCE_LABEL_PATTERN = re.compile(r"\[((?:[^\[\]\\]|\\.){0,999})\]")


class LinkKind(Enum):
    INLINE = "inline"
    FULL = "full"
    COLLAPSED = "collapsed"
    SHORTCUT = "shortcut"


@dataclass(frozen=True)
class LinkMatch:
    kind: LinkKind
    start: int
    end: int
    text_start: int
    text_end: int
    text: str
    image: bool = False
    destination: str = ""
    title: str = ""
    label: str = ""


def normalize_label(label: str) -> str:
    """Case-fold and collapse whitespace, protected spaces included."""
    return " ".join(label.split()).casefold()


def _skip_code_span(source: str, index: int) -> int:
    run = len(source[index:]) - len(source[index:].lstrip("`"))
    closing = re.compile(rf"(?<!`)`{{{run}}}(?!`)").search(source, index + run)
    return closing.end() if closing else index + run


def split_code_spans(source: str) -> List[Tuple[str, bool]]:
    """Cut ``source`` into ``(piece, is_code)`` pairs."""
    pieces: List[Tuple[str, bool]] = []
    start = index = 0
    while index < len(source):
        char = source[index]
        if char == "\\":
            index += 2
        elif char == "`":
            end = _skip_code_span(source, index)
            run = len(source[index:]) - len(source[index:].lstrip("`"))
            if end > index + run:
                if start < index:
                    pieces.append((source[start:index], False))
                pieces.append((source[index:end], True))
                start = end
            index = end
        else:
            index += 1
    if start < len(source):
        pieces.append((source[start:], False))
    return pieces


def _closing_bracket(source: str, opening: int) -> Optional[int]:
    depth = 0
    index = opening
    while index < len(source):
        char = source[index]
        if char == "\\":
            index += 2
            continue
        if char == "`":
            index = _skip_code_span(source, index)
            continue
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return None


def find_links(source: str, is_defined: Callable[[str], bool]) -> List[LinkMatch]:
    """Find inline links, images and references whose label is defined.

    Code spans, autolinks and inline HTML tags are skipped. Footnote
    references are never links.
    """
    links: List[LinkMatch] = []
    index = 0
    while index < len(source):
        char = source[index]
        if char == "\\":
            index += 2
            continue
        if char == "`":
            index = _skip_code_span(source, index)
            continue
        if char == "<":
            tag = AUTOLINK_PATTERN.match(source, index) or INLINE_HTML_PATTERN.match(source, index)
            index = tag.end() if tag else index + 1
            continue
        image = char == "!" and source.startswith("[", index + 1)
        if char != "[" and not image:
            index += 1
            continue
        opening = index + 1 if image else index
        closing = _closing_bracket(source, opening)
        if closing is None:
            index = opening + 1
            continue
        text = source[opening + 1 : closing]
        after = closing + 1
        if text.startswith("^"):
            index = after
            continue
        inline = INLINE_DESTINATION_PATTERN.match(source, after)
        if inline:
            links.append(
                LinkMatch(
                    LinkKind.INLINE,
                    index,
                    inline.end(),
                    opening + 1,
                    closing,
                    text,
                    image=image,
                    destination=inline.group(1),
                    title=inline.group(2) or "",
                )
            )
            index = inline.end()
            continue
        reference = REFERENCE_LABEL_PATTERN.match(source, after)
        if reference:
            label = reference.group(1) or text
            kind = LinkKind.FULL if reference.group(1) else LinkKind.COLLAPSED
            if is_defined(label):
                links.append(LinkMatch(kind, index, reference.end(), opening + 1, closing, text, image, label=label))
                index = reference.end()
                continue
        elif is_defined(text):
            links.append(LinkMatch(LinkKind.SHORTCUT, index, after, opening + 1, closing, text, image, label=text))
            index = after
            continue
        index = opening + 1
    return links
