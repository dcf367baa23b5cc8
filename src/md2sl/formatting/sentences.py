from __future__ import annotations

import logging
import re
from typing import FrozenSet, List, Optional

from ..config import FeatureSet, ResolvedConfig
from ..models import SentenceFragment, Token, TokenKind

logger = logging.getLogger(__name__)

LEADING_PUNCTUATION_PATTERN = re.compile(r"^[^\w]+")


class SentenceSplitter:
    """Single left-to-right pass cutting a token stream at sentence ends."""

    def __init__(
        self,
        end_markers: FrozenSet[str],
        suppression_words: FrozenSet[str],
        case_sensitive: bool = False,
        features: Optional[FeatureSet] = None,
    ) -> None:
        self.end_markers = end_markers
        self.suppression_words = suppression_words
        self.case_sensitive = case_sensitive
        self.features = features or FeatureSet()

    @classmethod
    def from_config(cls, config: ResolvedConfig) -> "SentenceSplitter":
        return cls(
            end_markers=config.end_markers,
            suppression_words=config.suppression_words,
            case_sensitive=config.case_sensitive,
            features=config.features,
        )

    def split(self, tokens: List[Token], indent: str = "") -> List[SentenceFragment]:
        fragments: List[SentenceFragment] = []
        current: List[Token] = []
        for position, token in enumerate(tokens):
            if token.kind is TokenKind.LINEBREAK:
                if current:
                    fragments.append(SentenceFragment(current, indent, hard_break=token.text))
                    current = []
                elif fragments and fragments[-1].hard_break is None:
                    fragments[-1].hard_break = token.text
                continue
            if self._is_line_start_marker(token):
                # Keep the marker first on its line so the next run reads it the same way.
                if current:
                    fragments.append(SentenceFragment(current, indent, hard_break=""))
                    current = []
                elif fragments and fragments[-1].hard_break is None:
                    fragments[-1].hard_break = ""
            current.append(token)
            following = tokens[position + 1] if position + 1 < len(tokens) else None
            if token.is_word and self._breaks_after(token, following):
                fragments.append(SentenceFragment(current, indent, trailing_marker=token.text[-1]))
                current = []
        if current:
            fragments.append(SentenceFragment(current, indent))
        logger.debug("split %d tokens into %d fragments", len(tokens), len(fragments))
        return fragments

    def is_suppressed(self, word: str) -> bool:
        candidate = LEADING_PUNCTUATION_PATTERN.sub("", word)
        if not candidate:
            return False
        if not self.case_sensitive:
            candidate = candidate.casefold()
        return candidate in self.suppression_words or candidate[:-1] in self.suppression_words

    def _is_line_start_marker(self, token: Token) -> bool:
        """A lone end marker opening a source line, which does not end a sentence by default."""
        return (
            token.is_word
            and token.line_start
            and len(token.text) == 1
            and token.text in self.end_markers
            and not self.features.break_start_marker
        )

    def _breaks_after(self, token: Token, following: Optional[Token]) -> bool:
        word = token.text
        if word[-1] not in self.end_markers:
            return False
        # Protected spaces glue the next token to this one.
        if following is not None and following.kind is TokenKind.PROTECTED:
            return False
        if not self.features.break_multiple_markers and len(word) > 1 and word[-2] in self.end_markers:
            return False
        if self._is_line_start_marker(token):
            return False
        return not self.is_suppressed(word)
