from __future__ import annotations

import re
from typing import Callable

from .scanner import find_links, split_code_spans

NBSP = "\u00a0"
WHITESPACE_RUN_PATTERN = re.compile(r"[^\S\u00a0\u202f]+")


def protect_spaces(text: str) -> str:
    """Replace each run of ordinary whitespace outside code spans by one non-breaking space."""
    return "".join(
        piece if is_code else WHITESPACE_RUN_PATTERN.sub(NBSP, piece)
        for piece, is_code in split_code_spans(text)
    )


def inline_link_texts(source: str, is_defined: Callable[[str], bool]) -> str:
    """Make the texts of all links in ``source`` unbreakable.

    Images and references to undefined labels are left alone.
    """
    parts = []
    position = 0
    for link in find_links(source, is_defined):
        if link.image:
            continue
        parts.append(source[position : link.text_start])
        parts.append(protect_spaces(link.text))
        position = link.text_end
    parts.append(source[position:])
    return "".join(parts)
