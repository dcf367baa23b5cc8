from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable, Optional, Sequence, Tuple, Union

from .errors import ConfigError
from .lang import build_suppression_set, unknown_languages
from .models import Case, KeepWhitespace, LinkActions

logger = logging.getLogger(__name__)

DEFAULT_MAX_WIDTH = 80
DEFAULT_END_MARKERS = "?!:."
DEFAULT_LANG = "ac"
DEFAULT_IGNORE_MARKERS: Tuple[Tuple[str, str], ...] = (
    ("md2sl-ignore-start", "md2sl-ignore-end"),
    ("prettier-ignore-start", "prettier-ignore-end"),
)
# Non-breaking space, narrow non-breaking space, zero-width non-breaking space.
PROTECTED_SPACES = frozenset("\u00a0\u202f\ufeff")


@dataclass(frozen=True)
class FeatureSet:
    break_multiple_markers: bool = False
    break_start_marker: bool = False
    break_nbsp: bool = False
    format_footnotes: bool = False


_FEATURE_FLAGS = {
    "breaking-multiple-markers": "break_multiple_markers",
    "breaking-start-marker": "break_start_marker",
    "modify-nbsp": "break_nbsp",
    "format-footnotes": "format_footnotes",
}


def parse_features(value: str) -> FeatureSet:
    """Parse a comma and/or whitespace separated feature list."""
    enabled = {}
    unknown = []
    for token in value.replace(",", " ").split():
        attribute = _FEATURE_FLAGS.get(token)
        if attribute is None:
            unknown.append(token)
        else:
            enabled[attribute] = True
    if unknown:
        raise ConfigError(f"unknown features: {', '.join(unknown)}")
    features = FeatureSet(**enabled)
    logger.debug("loaded features: %s", features)
    return features


@dataclass(frozen=True)
class ResolvedConfig:
    max_width: int = DEFAULT_MAX_WIDTH
    end_markers: FrozenSet[str] = frozenset(DEFAULT_END_MARKERS)
    suppression_words: FrozenSet[str] = frozenset()
    case_sensitive: bool = False
    link_actions: LinkActions = LinkActions.NONE
    keep_whitespace: KeepWhitespace = KeepWhitespace.NONE
    format_block_quotes: bool = False
    features: FeatureSet = field(default_factory=FeatureSet)
    ignore_markers: Tuple[Tuple[str, str], ...] = DEFAULT_IGNORE_MARKERS

    @property
    def keep_linebreaks(self) -> bool:
        return bool(self.keep_whitespace & KeepWhitespace.LINEBREAKS)

    @property
    def keep_spaces_in_links(self) -> bool:
        return bool(self.keep_whitespace & KeepWhitespace.IN_LINKS)

    @property
    def protected_spaces(self) -> FrozenSet[str]:
        if self.features.break_nbsp:
            return frozenset()
        return PROTECTED_SPACES

    def with_width(self, max_width: int) -> "ResolvedConfig":
        return replace(self, max_width=max_width)


def _parse_bool(value: Union[bool, str], name: str) -> bool:
    if isinstance(value, bool):
        return value
    lowered = value.strip().lower()
    if lowered in {"true", "yes", "1", "on"}:
        return True
    if lowered in {"false", "no", "0", "off"}:
        return False
    raise ConfigError(f"{name}: expected a boolean, got '{value}'")


def _parse_width(value: Union[int, str]) -> int:
    try:
        width = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"max-width: expected a non-negative integer, got '{value}'") from exc
    if width < 0:
        raise ConfigError(f"max-width: expected a non-negative integer, got {width}")
    return width


def _parse_end_markers(value: Union[str, Iterable[str]]) -> FrozenSet[str]:
    markers = frozenset("".join(value))
    if not markers:
        raise ConfigError("end-markers: at least one end marker is required")
    if any(marker.isspace() for marker in markers):
        raise ConfigError("end-markers: whitespace cannot end a sentence")
    return markers


def _parse_choice(value, enum_type, name: str):
    if isinstance(value, enum_type):
        return value
    if enum_type is KeepWhitespace:
        try:
            return KeepWhitespace.parse(value)
        except ValueError as exc:
            raise ConfigError(f"{name}: {exc}") from exc
    try:
        return enum_type(value.strip().lower())
    except ValueError as exc:
        choices = ", ".join(member.value for member in enum_type)
        raise ConfigError(f"{name}: possible values: {choices}") from exc


def _parse_ignore_markers(pairs: Sequence[Tuple[str, str]]) -> Tuple[Tuple[str, str], ...]:
    resolved = tuple((start.strip(), end.strip()) for start, end in pairs)
    if not resolved or any(not start or not end for start, end in resolved):
        raise ConfigError("ignore-markers: every vocabulary needs a start and an end marker")
    return resolved


def build_config(
    *,
    max_width: Union[int, str] = DEFAULT_MAX_WIDTH,
    end_markers: Union[str, Iterable[str]] = DEFAULT_END_MARKERS,
    lang: str = DEFAULT_LANG,
    suppressions: str = "",
    ignores: str = "",
    case: Union[Case, str] = Case.IGNORE,
    link_actions: Union[LinkActions, str] = LinkActions.NONE,
    keep_whitespace: Union[KeepWhitespace, str] = KeepWhitespace.NONE,
    format_block_quotes: Union[bool, str] = False,
    features: Union[FeatureSet, str] = "",
    ignore_markers: Optional[Sequence[Tuple[str, str]]] = None,
) -> ResolvedConfig:
    """Validate raw option values and resolve them into a ``ResolvedConfig``.

    Raises ``ConfigError`` before any document is touched.
    """
    languages = lang.split()
    missing = unknown_languages(languages)
    if missing:
        raise ConfigError(f"unknown or unsupported language(s): {' '.join(missing)}")
    resolved_case = _parse_choice(case, Case, "case")
    case_sensitive = resolved_case is Case.KEEP
    feature_set = features if isinstance(features, FeatureSet) else parse_features(features)
    config = ResolvedConfig(
        max_width=_parse_width(max_width),
        end_markers=_parse_end_markers(end_markers),
        suppression_words=build_suppression_set(
            languages,
            suppressions.split(),
            ignores.split(),
            case_sensitive=case_sensitive,
        ),
        case_sensitive=case_sensitive,
        link_actions=_parse_choice(link_actions, LinkActions, "link-actions"),
        keep_whitespace=_parse_choice(keep_whitespace, KeepWhitespace, "keep-whitespace"),
        format_block_quotes=_parse_bool(format_block_quotes, "format-block-quotes"),
        features=feature_set,
        ignore_markers=_parse_ignore_markers(ignore_markers or DEFAULT_IGNORE_MARKERS),
    )
    logger.debug(
        "resolved configuration: width=%d, %d suppression words, link actions %s",
        config.max_width,
        len(config.suppression_words),
        config.link_actions.value,
    )
    return config
