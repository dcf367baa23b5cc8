from __future__ import annotations

from enum import Enum
from typing import Optional, Sequence, Tuple


class Directive(Enum):
    START = "start"
    END = "end"


def is_html_comment(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith("<!--") and stripped.endswith("-->")


class IgnoreDirectives:
    """Recognises ignore-range comments of every configured vocabulary.

    Any start marker opens a range and any end marker closes it, so the two
    vocabularies can be mixed. A comment carrying both markers closes.
    """

    def __init__(self, markers: Sequence[Tuple[str, str]]) -> None:
        self._starts = tuple(start for start, _ in markers)
        self._ends = tuple(end for _, end in markers)

    def directive(self, line: str) -> Optional[Directive]:
        if not is_html_comment(line):
            return None
        if any(end in line for end in self._ends):
            return Directive.END
        if any(start in line for start in self._starts):
            return Directive.START
        return None
