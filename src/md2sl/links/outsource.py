from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Set, Tuple

from ..models import LinkDefinition, RegionKind, Span
from ..parsing.classifier import LINK_DEFINITION_PATTERN, RegionClassifier
from ..parsing.quotes import strip_quote
from .scanner import LinkKind, find_links, normalize_label

logger = logging.getLogger(__name__)

TRAILING_BLANK_LINES_PATTERN = re.compile(r"(?:\n[ \t]*)+\Z")


@dataclass
class LinkState:
    """Definitions known while one document is formatted.

    Labels minted for outsourced links come from ``counter``, which only ever
    grows and skips labels the document already defines. ``minted`` keeps the
    normalized labels handed out that way.
    """

    url_labels: Dict[str, str] = field(default_factory=dict)
    defined_labels: Set[str] = field(default_factory=set)
    minted: Set[str] = field(default_factory=set)
    pending: List[LinkDefinition] = field(default_factory=list)
    counter: int = 0

    @classmethod
    def from_text(cls, text: str, classifier: RegionClassifier) -> "LinkState":
        state = cls()
        state.scan(text, classifier)
        return state

    def scan(self, text: str, classifier: RegionClassifier) -> None:
        """Record the definitions of ``text``, including those inside block quotes."""
        for label, url in _definitions(classifier.classify(text), classifier):
            self.defined_labels.add(normalize_label(label))
            self.url_labels.setdefault(url, label)
        logger.debug("found %d link definitions", len(self.defined_labels))

    def is_defined(self, label: str) -> bool:
        return normalize_label(label) in self.defined_labels

    def label_for(self, url: str, title: str = "") -> str:
        existing = self.url_labels.get(url)
        if existing is not None:
            return existing
        while True:
            self.counter += 1
            label = str(self.counter)
            if label not in self.defined_labels:
                break
        self.defined_labels.add(label)
        self.minted.add(label)
        self.url_labels[url] = label
        self.pending.append(LinkDefinition(label=label, url=url, title=title))
        return label

    def take_pending(self, mark: int = 0) -> List[LinkDefinition]:
        """Remove and return the definitions minted since ``mark``."""
        taken = self.pending[mark:]
        del self.pending[mark:]
        return taken


def _definitions(spans: List[Span], classifier: RegionClassifier) -> Iterator[Tuple[str, str]]:
    for span in spans:
        if span.region is RegionKind.LINK_DEFINITION:
            match = LINK_DEFINITION_PATTERN.match(span.lines[0].content.rstrip("\r\n"))
            yield match.group(1), match.group(2)
        elif span.region is RegionKind.BLOCK_QUOTE:
            yield from _definitions(classifier.classify(strip_quote(span).inner), classifier)


def outsource_links(source: str, state: LinkState) -> str:
    """Rewrite inline links ``[text](url)`` as ``[text][label]``.

    Images, in-document anchors and links without text stay inline.
    """
    parts = []
    position = 0
    for link in find_links(source, state.is_defined):
        if link.kind is not LinkKind.INLINE or link.image:
            continue
        destination = link.destination.strip("<>")
        if not link.text.strip() or not destination or destination.startswith("#"):
            continue
        label = state.label_for(link.destination, link.title)
        parts.append(source[position : link.start])
        parts.append(f"[{link.text}][{label}]")
        position = link.end
    parts.append(source[position:])
    return "".join(parts)


def append_definitions(text: str, definitions: List[LinkDefinition]) -> str:
    """Append ``definitions`` after ``text``, separated by a blank line.

    No blank line is added when ``text`` already ends with a definition.
    """
    if not definitions:
        return text
    block = "\n".join(definition.render() for definition in definitions)
    body = TRAILING_BLANK_LINES_PATTERN.sub("", text)
    if not body.strip():
        return block + "\n"
    last_line = body.rsplit("\n", 1)[-1]
    separator = "\n" if LINK_DEFINITION_PATTERN.match(last_line) else "\n\n"
    logger.info("appending %d outsourced link definitions", len(definitions))
    return body + separator + block + "\n"
