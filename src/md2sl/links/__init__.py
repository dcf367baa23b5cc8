"""Link rewrites: unbreakable link texts, outsourcing and collation."""

from .collate import category_header, collate_definitions
from .nbsp import NBSP, inline_link_texts, protect_spaces
from .outsource import LinkState, append_definitions, outsource_links
from .scanner import LinkKind, LinkMatch, find_links, normalize_label

__all__ = [
    "LinkKind",
    "LinkMatch",
    "LinkState",
    "NBSP",
    "append_definitions",
    "category_header",
    "collate_definitions",
    "find_links",
    "inline_link_texts",
    "normalize_label",
    "outsource_links",
    "protect_spaces",
]
