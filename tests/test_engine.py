"""
Tests for whole-document formatting.

Run: pytest tests/test_engine.py -v
"""

import pytest

from md2sl import EncodingError, build_config, format_document
from md2sl.conversion import decode_document, run_pipeline
from md2sl.formatting.wrap import starts_block

from test_classifier import MIXED_DOCUMENT

NBSP = "\u00a0"

LINKS_AND_CONTAINERS = """# Title

This is a fairly long sentence that will need wrapping at narrow widths. Short one! And a question? Yes.

- A list item with quite a lot of words in it. Second sentence.
  - Nested item text. More.
1. Ordered item one. Done.

> Quoted text that is long enough to wrap. Another sentence.
> > Nested quote. Here.

See [the docs](https://example.com/docs "Docs") and [home](https://example.com).
Also [the docs again](https://example.com/docs).

[^1]: A footnote. With two sentences.

[ref]: https://example.com/ref
"""

PROSE = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit. Sed do eiusmod tempor incididunt "
    "ut labore et dolore magna aliqua. Ut enim ad minim veniam, quis nostrud exercitation "
    "ullamco laboris nisi ut aliquip ex ea commodo consequat! Duis aute irure dolor in "
    "reprehenderit in voluptate velit esse cillum dolore eu fugiat nulla pariatur?\n"
)


def fmt(text, **options):
    return format_document(text, build_config(**options)).output_text


CONFIGS = [
    {},
    {"max_width": 0},
    {"max_width": 20},
    {"max_width": 20, "format_block_quotes": True, "link_actions": "both", "features": "format-footnotes"},
    {"max_width": 20, "keep_whitespace": "both"},
    {"max_width": 30, "format_block_quotes": True, "features": "breaking-multiple-markers breaking-start-marker"},
]


class TestIdempotence:
    @pytest.mark.parametrize("options", CONFIGS)
    @pytest.mark.parametrize("document", [MIXED_DOCUMENT, LINKS_AND_CONTAINERS, PROSE])
    def test_second_pass_changes_nothing(self, document, options):
        once = fmt(document, **options)
        result = format_document(once, build_config(**options))
        assert result.output_text == once
        assert not result.changed


class TestSentences:
    def test_one_sentence_per_line(self):
        assert fmt("Hello world. This is a test.\n") == "Hello world.\nThis is a test.\n"

    def test_lines_inside_a_sentence_are_joined(self):
        assert fmt("One sentence\nspread over. Two.\n") == "One sentence spread over.\nTwo.\n"

    def test_suppressed_abbreviation(self):
        assert fmt("See e.g. the map.", end_markers=".", lang="none", suppressions="e.g") == "See e.g. the map."

    def test_bundled_abbreviations(self):
        assert fmt("See e.g. the map. Done.\n") == "See e.g. the map.\nDone.\n"

    def test_block_marker_never_starts_a_line(self):
        text = "Done. - not a list.\n"
        result = format_document(text, build_config())
        assert result.output_text == text
        assert not result.changed

    def test_hard_break_preserved(self):
        assert fmt("one  \ntwo. three\n") == "one  \ntwo.\nthree\n"

    def test_keep_linebreaks(self):
        assert fmt("a\nb. c\n", keep_whitespace="linebreaks") == "a\nb.\nc\n"

    def test_missing_final_newline_stays_missing(self):
        assert fmt("A. B.") == "A.\nB."

    def test_crlf_line_endings(self):
        assert fmt("A. B.\r\n") == "A.\r\nB.\r\n"

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("a\n. b. c\n", "a\n. b.\nc\n"),
            ("Hi.\n! there\n", "Hi.\n! there\n"),
            ("Hi. ! there\n", "Hi. !\nthere\n"),
        ],
    )
    def test_lone_markers_are_stable(self, text, expected):
        once = fmt(text)
        assert once == expected
        assert fmt(once) == once


class TestWidth:
    @pytest.mark.parametrize("width", [10, 20, 37, 80])
    def test_lines_fit_unless_single_word(self, width):
        for line in fmt(PROSE, max_width=width).splitlines():
            assert len(line) <= width or " " not in line

    def test_block_marker_may_overflow_the_width(self):
        assert fmt("x yyyyyyyyy - z.\n", max_width=10) == "x\nyyyyyyyyy -\nz.\n"

    def test_lines_fit_once_trailing_block_markers_are_set_aside(self):
        for line in fmt("Aaaa bbbb - cccc dddd. Eeee * ffff # gggg.\n", max_width=9).splitlines():
            parts = line.split(" ")
            while len(parts) > 1 and starts_block(parts[-1]):
                parts.pop()
            assert len(" ".join(parts)) <= 9 or len(parts) == 1

    @pytest.mark.parametrize("width", [0, 10, 25])
    def test_words_are_never_split_or_reordered(self, width):
        assert fmt(PROSE, max_width=width).split() == PROSE.split()

    def test_zero_width_keeps_sentences_whole(self):
        lines = fmt(PROSE, max_width=0).splitlines()
        assert len(lines) == 4
        assert lines[0] == "Lorem ipsum dolor sit amet, consectetur adipiscing elit."

    def test_list_item_width_counts_leader(self):
        assert fmt("- aaa bbb ccc ddd.\n", max_width=10) == "- aaa bbb\n  ccc ddd.\n"


class TestOpaqueRegions:
    def test_fenced_code_is_byte_identical(self):
        code = "```\nkeep.   this. as is.\n\tTabs.  too.\n```\n"
        assert fmt(code) == code
        assert fmt(code, max_width=5, format_block_quotes=True, link_actions="both") == code
        assert fmt(code + "\nA. B.\n").startswith(code)

    def test_heading_table_and_html_untouched(self):
        text = "# A. B.\n\n| a. b. | c |\n|---|---|\n\n<div>\nx. y.\n</div>\n"
        assert fmt(text) == text

    def test_ignored_range_untouched(self):
        text = "<!-- md2sl-ignore-start -->\nA. B.\n<!-- md2sl-ignore-end -->\n\nC. D.\n"
        assert fmt(text) == "<!-- md2sl-ignore-start -->\nA. B.\n<!-- md2sl-ignore-end -->\n\nC.\nD.\n"

    @pytest.mark.parametrize(
        "text",
        [
            "- a\n  <!-- md2sl-ignore-start -->\n  A. B.\n\nC. D.\n",
            "> a\n> <!-- md2sl-ignore-start -->\n> A. B.\n\nC. D.\n",
        ],
    )
    def test_unclosed_ignore_range_protects_rest_of_document(self, text):
        assert fmt(text, format_block_quotes=True) == text

    def test_front_matter_untouched(self):
        text = "---\ntitle: A. B.\n---\nOne. Two.\n"
        assert fmt(text) == "---\ntitle: A. B.\n---\nOne.\nTwo.\n"

    def test_footnotes_protected_by_default(self):
        text = "[^1]: A. B.\n"
        assert fmt(text) == text
        assert fmt(text, features="format-footnotes") == "[^1]: A.\n    B.\n"


class TestContainers:
    def test_list_items(self):
        assert fmt("- One. Two.\n- Three.\n") == "- One.\n  Two.\n- Three.\n"

    def test_ordered_list_item(self):
        assert fmt("1. One. Two.\n") == "1. One.\n   Two.\n"

    def test_quotes_opaque_by_default(self):
        assert fmt("> One. Two.\n") == "> One. Two.\n"

    def test_formatted_quote(self):
        assert fmt("> One. Two.\n", format_block_quotes=True) == "> One.\n> Two.\n"

    def test_quote_width_excludes_prefix(self):
        assert fmt("> aaa bbb ccc ddd.\n", max_width=12, format_block_quotes=True) == "> aaa bbb\n> ccc ddd.\n"


class TestLinks:
    def test_link_text_made_unbreakable(self):
        assert fmt("A [b c](u) d.\n") == f"A [b{NBSP}c](u) d.\n"

    def test_keep_spaces_in_links(self):
        assert fmt("A [b c](u) d.\n", keep_whitespace="in-links") == "A [b c](u) d.\n"

    def test_outsourced_links_share_a_definition(self):
        text = "See [here](http://x) and [there](http://x).\n"
        assert fmt(text, link_actions="outsource-inline") == "See [here][1] and [there][1].\n\n[1]: http://x\n"

    def test_quote_links_defined_inside_quote(self):
        text = "> See [a](http://x).\n\nAfter [b](http://y).\n"
        assert fmt(text, format_block_quotes=True, link_actions="outsource-inline") == (
            "> See [a][1].\n>\n> [1]: http://x\n\nAfter [b][2].\n\n[2]: http://y\n"
        )

    def test_collated_definitions(self):
        assert fmt("[b]: u1\n[a]: u2\n", link_actions="collate-defs") == "[a]: u2\n[b]: u1\n"

    def test_definitions_not_collated_by_default(self):
        assert fmt("[b]: u1\n[a]: u2\n") == "[b]: u1\n[a]: u2\n"

    def test_definition_inside_code_is_not_reused(self):
        text = "See [here](http://x).\n\n```\n[a]: http://x\n```\n"
        assert fmt(text, link_actions="outsource-inline") == (
            "See [here][1].\n\n```\n[a]: http://x\n```\n\n[1]: http://x\n"
        )

    def test_outsourced_definitions_are_uncategorized(self):
        text = "See [x](http://q).\n\n<!-- link-category: k -->\n\n[z]: u\n"
        once = fmt(text, link_actions="both")
        assert once == "See [x][1].\n\n[1]: http://q\n\n<!-- link-category: k -->\n\n[z]: u\n"
        assert fmt(once, link_actions="both") == once


class TestPipeline:
    def test_custom_passes(self):
        assert run_pipeline("x", build_config(), passes=[lambda text, config, links: text.upper()]) == "X"

    def test_invalid_utf8(self):
        with pytest.raises(EncodingError, match="<stdin>: invalid UTF-8 at byte 2"):
            decode_document(b"ok\xff")
