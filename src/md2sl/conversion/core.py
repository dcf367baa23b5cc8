from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Protocol

from ..config import ResolvedConfig
from ..errors import EncodingError
from ..formatting import SentenceSplitter, WhitespacePolicy, normalize_whitespace, wrap_fragments
from ..links import LinkState, append_definitions, collate_definitions, inline_link_texts, outsource_links
from ..models import FormatResult, RegionKind, Span, SpanKind
from ..parsing import RegionClassifier, requote, split_frontmatter, strip_quote

logger = logging.getLogger(__name__)


class TextPass(Protocol):
    def __call__(self, text: str, config: ResolvedConfig, links: LinkState) -> str:
        ...


class DocumentFormatter:
    """Reflows the formattable spans of one document, one sentence per line.

    Everything that is not formattable text is emitted exactly as it was read.
    Formattable block quotes are formatted recursively with the width reduced
    by their prefix; links minted inside a quote get their definitions at the
    end of that quote.
    """

    def __init__(self, config: ResolvedConfig) -> None:
        self.config = config
        self.classifier = RegionClassifier(config)
        self.splitter = SentenceSplitter.from_config(config)
        self.policy = WhitespacePolicy.from_config(config)

    def reflow(self, text: str, state: Optional[LinkState] = None) -> str:
        if state is None:
            state = LinkState()
        state.scan(text, self.classifier)
        return self._reflow(text, self.config.max_width, state)

    def _reflow(self, text: str, width: int, state: LinkState) -> str:
        mark = len(state.pending)
        parts = [self._emit(span, width, state) for span in self.classifier.classify(text)]
        return append_definitions("".join(parts), state.take_pending(mark))

    def _emit(self, span: Span, width: int, state: LinkState) -> str:
        if span.kind is not SpanKind.TEXT:
            return span.raw_text
        if span.region is RegionKind.BLOCK_QUOTE:
            return self._format_quote(span, width, state)
        return self._format_paragraph(span, width, state)

    def _format_quote(self, span: Span, width: int, state: LinkState) -> str:
        frame = strip_quote(span)
        inner_width = max(1, width - frame.prefix_width(span)) if width else 0
        return requote(span, frame, self._reflow(frame.inner, inner_width, state))

    def _format_paragraph(self, span: Span, width: int, state: LinkState) -> str:
        first, *rest = span.lines
        text = first.content.lstrip(" ") + "".join(line.content for line in rest)
        if not self.config.keep_spaces_in_links:
            text = inline_link_texts(text, state.is_defined)
        if self.config.link_actions.outsources:
            text = outsource_links(text, state)
        tokens = normalize_whitespace(text, self.policy)
        fragments = self.splitter.split(tokens, span.indent)
        lines = wrap_fragments(fragments, width, first_indent=span.leader)
        if not lines:
            return span.raw_text
        newline = "\r\n" if first.raw.endswith("\r\n") else "\n"
        return newline.join(lines) + (newline if span.ends_with_newline else "")


def reflow_pass(text: str, config: ResolvedConfig, links: LinkState) -> str:
    return DocumentFormatter(config).reflow(text, links)


def collate_pass(text: str, config: ResolvedConfig, links: LinkState) -> str:
    if not config.link_actions.collates:
        return text
    # Outsourced definitions belong to no category, wherever they were appended.
    return collate_definitions(text, config, links.minted)


DEFAULT_PASSES: List[TextPass] = [reflow_pass, collate_pass]


def run_pipeline(text: str, config: ResolvedConfig, passes: Optional[List[TextPass]] = None) -> str:
    links = LinkState()
    for text_pass in passes or DEFAULT_PASSES:
        text = text_pass(text, config, links)
    return text


def format_document(document_text: str, config: ResolvedConfig) -> FormatResult:
    """Format one document: ``(output_text, changed)``.

    Pure and deterministic; front matter is carried over untouched.
    """
    frontmatter, body = split_frontmatter(document_text)
    output_text = frontmatter + run_pipeline(body, config)
    changed = output_text != document_text
    logger.debug("formatted %d characters, changed=%s", len(document_text), changed)
    return FormatResult(output_text=output_text, changed=changed)


def decode_document(data: bytes, path: Optional[Path] = None) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise EncodingError(path, exc.start, exc.reason) from exc


def read_document(path: Path) -> str:
    return decode_document(path.read_bytes(), path)


def write_document(path: Path, text: str) -> None:
    path.write_bytes(text.encode("utf-8"))
