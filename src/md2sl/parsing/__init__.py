"""Splitting markdown documents into typed spans."""

from .classifier import RegionClassifier, classify, split_lines
from .frontmatter import split_frontmatter
from .ignore import Directive, IgnoreDirectives
from .quotes import QuoteFrame, requote, strip_quote

__all__ = [
    "Directive",
    "IgnoreDirectives",
    "QuoteFrame",
    "RegionClassifier",
    "classify",
    "requote",
    "split_frontmatter",
    "split_lines",
    "strip_quote",
]
