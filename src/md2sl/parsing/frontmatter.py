from __future__ import annotations

import logging
import re
from typing import Tuple

from .classifier import split_lines

logger = logging.getLogger(__name__)

FRONTMATTER_PATTERN = re.compile(r"^---\r?\n?$")


def split_frontmatter(text: str) -> Tuple[str, str]:
    """Split a leading YAML front matter block off ``text``.

    The block has to start at the very first byte and be closed by a second
    ``---`` line. Without the closing line there is no front matter.
    """
    lines = split_lines(text)
    if not lines or not FRONTMATTER_PATTERN.match(lines[0]):
        return "", text
    length = len(lines[0])
    for line in lines[1:]:
        length += len(line)
        if FRONTMATTER_PATTERN.match(line):
            logger.debug("found %d characters of front matter", length)
            return text[:length], text[length:]
    logger.warning("front matter opened on line 1 is never closed, formatting it as markdown")
    return "", text
