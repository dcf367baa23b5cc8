from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, List

from ..config import ResolvedConfig
from ..models import Token, TokenKind

HARD_BREAK_SPACES = "  "


@dataclass(frozen=True)
class WhitespacePolicy:
    protected_spaces: FrozenSet[str] = frozenset()
    keep_linebreaks: bool = False

    @classmethod
    def from_config(cls, config: ResolvedConfig) -> "WhitespacePolicy":
        return cls(protected_spaces=config.protected_spaces, keep_linebreaks=config.keep_linebreaks)

    def is_ordinary(self, char: str) -> bool:
        return char.isspace() and char not in self.protected_spaces


def _ends_with_escape(word: str) -> bool:
    backslashes = len(word) - len(word.rstrip("\\"))
    return backslashes % 2 == 1


def normalize_whitespace(text: str, policy: WhitespacePolicy) -> List[Token]:
    """Turn paragraph text into a token stream.

    Every run of ordinary whitespace becomes a token boundary. A chunk made only
    of protected spaces becomes a ``PROTECTED`` token, anything else a
    ``WORD``. Line breaks survive as ``LINEBREAK`` tokens when they are hard
    breaks, when the preceding chunk ends in a protected space, or when the
    policy keeps line breaks. Whitespace at either end of ``text`` is dropped.
    """
    tokens: List[Token] = []
    word: List[str] = []
    gap: List[str] = []
    line_start = True

    def close_gap() -> None:
        nonlocal line_start
        line_start = "\n" in gap
        if tokens and "\n" in gap:
            before_newline = "".join(gap).split("\n", 1)[0]
            previous = tokens[-1].text
            if previous.endswith("\\") and not before_newline and _ends_with_escape(previous):
                tokens.append(Token(TokenKind.LINEBREAK))
            elif before_newline.endswith(HARD_BREAK_SPACES) and not before_newline.strip(" "):
                tokens.append(Token(TokenKind.LINEBREAK, HARD_BREAK_SPACES))
            elif previous[-1:] in policy.protected_spaces or policy.keep_linebreaks:
                tokens.append(Token(TokenKind.LINEBREAK))
        gap.clear()

    def close_word() -> None:
        chunk = "".join(word)
        if all(char in policy.protected_spaces for char in chunk):
            tokens.append(Token(TokenKind.PROTECTED, chunk))
        else:
            tokens.append(Token(TokenKind.WORD, chunk, line_start=line_start))
        word.clear()

    for char in text:
        if policy.is_ordinary(char):
            if word:
                close_word()
            gap.append(char)
        else:
            if gap:
                close_gap()
            word.append(char)
    if word:
        close_word()
    return tokens
