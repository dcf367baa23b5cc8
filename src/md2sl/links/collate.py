from __future__ import annotations

import logging
import re
from typing import AbstractSet, Dict, List, Optional

from ..config import ResolvedConfig
from ..models import LinkDefinition, RegionKind, SourceLine, Span, SpanKind
from ..parsing.classifier import LINK_CATEGORY_PATTERN, LINK_DEFINITION_PATTERN, RegionClassifier
from .scanner import normalize_label

logger = logging.getLogger(__name__)

TRAILING_BLANK_LINES_PATTERN = re.compile(r"(?:\n[ \t]*)+\Z")
SEPARATOR = Span(SpanKind.OPAQUE, RegionKind.BLANK, (SourceLine(raw="\n", content="\n"),))


def category_header(name: str) -> str:
    return f"<!-- link-category: {name} -->"


def _parse_definition(span: Span, category: Optional[str]) -> LinkDefinition:
    match = LINK_DEFINITION_PATTERN.match(span.lines[0].content.rstrip("\r\n"))
    return LinkDefinition(label=match.group(1), url=match.group(2), category=category, title=match.group(3) or "")


def _is_top_level(span: Span, region: RegionKind) -> bool:
    return span.region is region and not span.indent and not span.lines[0].prefix


def collate_definitions(text: str, config: ResolvedConfig, minted: AbstractSet[str] = frozenset()) -> str:
    """Move every top-level link definition into one sorted block at the end.

    Definitions are grouped by the nearest preceding category comment, except
    those whose label is in ``minted``, which are always uncategorized.
    Uncategorized definitions come first, then categories ordered by name.
    A definition whose label is already taken is dropped.
    """
    spans = RegionClassifier(config).classify(text)
    kept: List[Span] = []
    categories: Dict[str, List[LinkDefinition]] = {}
    uncategorized: List[LinkDefinition] = []
    seen: Dict[str, LinkDefinition] = {}
    category: Optional[str] = None
    found = removed = False
    for span in spans:
        is_category = _is_top_level(span, RegionKind.LINK_CATEGORY)
        is_definition = _is_top_level(span, RegionKind.LINK_DEFINITION)
        if not is_category and not is_definition:
            if removed:
                if span.region is RegionKind.BLANK:
                    if not kept or kept[-1].region is RegionKind.BLANK:
                        continue
                elif kept and kept[-1].region is not RegionKind.BLANK:
                    kept.append(SEPARATOR)
            kept.append(span)
            removed = False
            continue
        found = removed = True
        if is_category:
            category = LINK_CATEGORY_PATTERN.match(span.lines[0].content).group(1).strip()
            categories.setdefault(category, [])
            continue
        definition = _parse_definition(span, category)
        key = normalize_label(definition.label)
        if key in seen:
            logger.warning(
                "dropping duplicate definition for link label '%s' (%s), keeping %s",
                definition.label,
                definition.url,
                seen[key].url,
            )
            continue
        seen[key] = definition
        if category is None or key in minted:
            uncategorized.append(definition)
        else:
            categories[category].append(definition)
    if not found:
        return text

    groups = []
    if uncategorized:
        groups.append(_render(uncategorized))
    for name in sorted(categories, key=str.casefold):
        members = categories[name]
        groups.append(category_header(name) + ("\n\n" + _render(members) if members else ""))
    block = "\n\n".join(groups)
    body = TRAILING_BLANK_LINES_PATTERN.sub("", "".join(span.raw_text for span in kept))
    ending = "\n" if text.endswith("\n") else ""
    logger.debug("collated %d link definitions into %d groups", len(seen), len(groups))
    if not body.strip():
        return block + ending
    return body + "\n\n" + block + ending


def _render(definitions: List[LinkDefinition]) -> str:
    ordered = sorted(definitions, key=lambda definition: definition.label.casefold())
    return "\n".join(definition.render() for definition in ordered)
