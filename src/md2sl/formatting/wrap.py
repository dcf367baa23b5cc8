from __future__ import annotations

import re
from typing import List, Optional

from ..models import SentenceFragment, TokenKind

# Words that would open a new block, or read as a sentence end marker, if they
# started a continuation line.
BLOCK_START_WORD_PATTERN = re.compile(
    r"^(?:[^\w\s]|=+|-+|_{3,}|\*{3,}|#{1,6}|1[.)]|>.*|`{3,}.*|~{3,}.*|<[A-Za-z/!?].*)$"
)


def _groups(fragment: SentenceFragment) -> List[str]:
    """Join every protected-space token to the word in front of it."""
    groups: List[str] = []
    for token in fragment.words:
        if token.kind is TokenKind.PROTECTED and groups:
            groups[-1] = f"{groups[-1]} {token.text}"
        else:
            groups.append(token.text)
    return groups


def starts_block(group: str) -> bool:
    return BLOCK_START_WORD_PATTERN.match(group.split(" ", 1)[0]) is not None


def wrap_fragment(fragment: SentenceFragment, max_width: int, first_indent: Optional[str] = None) -> List[str]:
    """Greedily pack a fragment into lines of at most ``max_width`` codepoints.

    The width includes the indent. A group wider than the limit sits alone on
    its line. ``max_width == 0`` puts the whole fragment on one line. No
    continuation line starts with a word that markdown would read as a block
    marker.
    """
    groups = _groups(fragment)
    if not groups:
        return []
    indent = fragment.leading_indent
    prefix = indent if first_indent is None else first_indent
    lines: List[List[str]] = [[groups[0]]]
    prefixes = [prefix]
    for group in groups[1:]:
        current = lines[-1]
        length = len(prefixes[-1]) + sum(len(part) + 1 for part in current) + len(group)
        if max_width == 0 or length <= max_width:
            current.append(group)
            continue
        carried = [group]
        while starts_block(carried[0]) and len(current) > 1:
            carried.insert(0, current.pop())
        if starts_block(carried[0]):
            current.extend(carried)
        else:
            lines.append(carried)
            prefixes.append(indent)
    rendered = [line_prefix + " ".join(parts) for line_prefix, parts in zip(prefixes, lines)]
    if fragment.hard_break is not None:
        rendered[-1] += fragment.hard_break
    return rendered


def merge_block_starts(fragments: List[SentenceFragment]) -> List[SentenceFragment]:
    """Fold fragments starting with a block marker into the fragment before them."""
    merged: List[SentenceFragment] = []
    for fragment in fragments:
        groups = _groups(fragment)
        previous = merged[-1] if merged else None
        if previous is not None and previous.hard_break is None and groups and starts_block(groups[0]):
            previous.words = previous.words + fragment.words
            previous.trailing_marker = fragment.trailing_marker
            previous.hard_break = fragment.hard_break
            continue
        merged.append(
            SentenceFragment(
                list(fragment.words),
                fragment.leading_indent,
                fragment.trailing_marker,
                fragment.hard_break,
            )
        )
    return merged


def wrap_fragments(
    fragments: List[SentenceFragment],
    max_width: int,
    first_indent: Optional[str] = None,
) -> List[str]:
    lines: List[str] = []
    for fragment in merge_block_starts(fragments):
        lines.extend(wrap_fragment(fragment, max_width, first_indent if not lines else None))
    return lines
