"""Sentence-per-line Markdown formatting."""

from .config import FeatureSet, ResolvedConfig, build_config, parse_features
from .conversion import format_document
from .errors import ConfigError, EncodingError, Md2slError
from .models import FormatResult, KeepWhitespace, LinkActions

__all__ = [
    "ConfigError",
    "EncodingError",
    "FeatureSet",
    "FormatResult",
    "KeepWhitespace",
    "LinkActions",
    "Md2slError",
    "ResolvedConfig",
    "build_config",
    "format_document",
    "parse_features",
]
