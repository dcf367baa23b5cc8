"""Whitespace normalization, sentence splitting and line wrapping."""

from .sentences import SentenceSplitter
from .whitespace import WhitespacePolicy, normalize_whitespace
from .wrap import merge_block_starts, wrap_fragment, wrap_fragments

__all__ = [
    "SentenceSplitter",
    "WhitespacePolicy",
    "merge_block_starts",
    "normalize_whitespace",
    "wrap_fragment",
    "wrap_fragments",
]
