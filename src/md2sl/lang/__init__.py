"""Bundled sentence-break suppression word lists."""

from __future__ import annotations

import logging
from functools import partial
from importlib import resources
from typing import FrozenSet, Iterable, List

from ..plugins import available_languages, get_language, register_language

logger = logging.getLogger(__name__)

BUNDLED_LANGUAGES = ("ac", "de", "en", "es", "fr", "it")


def _load_word_list(name: str) -> FrozenSet[str]:
    data = resources.files(__name__).joinpath("data").joinpath(f"{name}.txt").read_text(encoding="utf-8")
    words = frozenset(
        word
        for line in data.splitlines()
        if not line.lstrip().startswith("#")
        for word in line.split()
    )
    logger.debug("loaded %d suppression words for language %s", len(words), name)
    return words


def _empty_word_list() -> FrozenSet[str]:
    return frozenset()


for _name in BUNDLED_LANGUAGES:
    register_language(_name, partial(_load_word_list, _name))
register_language("none", _empty_word_list)


def unknown_languages(names: Iterable[str]) -> List[str]:
    known = set(available_languages())
    return [name for name in names if name not in known]


def build_suppression_set(
    languages: Iterable[str],
    suppressions: Iterable[str],
    ignores: Iterable[str],
    *,
    case_sensitive: bool,
) -> FrozenSet[str]:
    """Merge language lists and explicit additions, then drop explicit removals.

    Without ``case_sensitive`` every entry is case-folded; lookups must fold the
    candidate word the same way.
    """
    fold = (lambda word: word) if case_sensitive else str.casefold
    words = set()
    for name in languages:
        words.update(get_language(name))
    words.update(suppressions)
    removed = {fold(word) for word in ignores}
    return frozenset(fold(word) for word in words if fold(word) not in removed)


__all__ = ["BUNDLED_LANGUAGES", "build_suppression_set", "unknown_languages"]
