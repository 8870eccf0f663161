#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for whitespace collapsing and Markdown escaping."""

import pytest

from markturn.nodes import Element, Text, parse_html
from markturn.normalizer import collapse_whitespace, escape_markdown, escape_preformatted, flanking_whitespace
from markturn.options import ConversionOptions


@pytest.mark.unit
class TestEscapeMarkdown:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("a *b* c", "a \\*b\\* c"),
            ("snake_case", "snake\\_case"),
            ("`tick`", "\\`tick\\`"),
            ("[link](url)", "\\[link\\]\\(url\\)"),
            ("~tilde~", "\\~tilde\\~"),
            ("back\\slash", "back\\\\slash"),
            ("# heading", "\\# heading"),
            ("- item", "\\- item"),
            ("+ item", "\\+ item"),
            ("> quote", "\\> quote"),
            ("=====", "\\====="),
            ("1. first", "1\\. first"),
            ("2020. A year", "2020\\. A year"),
            ("1) first", "1\\) first"),
            ("<b>", "\\<b>"),
            ("</b>", "\\</b>"),
            ("<https://x.com>", "\\<https://x.com>"),
            ("<!-- c -->", "\\<!-- c -->"),
            ("&amp;", "\\&amp;"),
            ("&#42; &#x2A;", "\\&#42; \\&#x2A;"),
            ("\\<b>", "\\\\\\<b>"),
        ],
    )
    def test_escapes(self, text, expected):
        assert escape_markdown(text) == expected

    @pytest.mark.parametrize(
        "text",
        ["a # b", "a - b", "x + y", "a > b", "1 + 1 = 2", "v1.2", "#hashtag", "a < b", "1<2", "a & b", "&&", "&;", "R&D"],
    )
    def test_mid_line_characters_left_alone(self, text):
        assert escape_markdown(text) == text

    def test_line_start_after_newline(self):
        assert escape_markdown("a\n# b") == "a\n\\# b"

    @pytest.mark.parametrize("prefix", ["1", "42", "  7"])
    def test_period_after_number_on_line(self, prefix):
        assert escape_markdown(". item", line_prefix=prefix) == "\\. item"
        assert escape_markdown(".", line_prefix=prefix) == "\\."

    @pytest.mark.parametrize("prefix,text", [("", ". item"), ("v1", ". item"), ("1 ", ". item"), ("1", ".5 more")])
    def test_period_not_completing_a_marker(self, prefix, text):
        assert escape_markdown(text, line_prefix=prefix) == text


@pytest.mark.unit
class TestEscapePreformatted:
    def test_escapes_everything_keeps_whitespace(self):
        assert escape_preformatted("a  |b|\n  # c") == "a  \\|b\\|\n  \\# c"

    def test_ordered_list_marker(self):
        assert escape_preformatted("1. x") == "1\\. x"

    def test_tags_and_entities(self):
        assert escape_preformatted("<em>  &lt;") == "\\<em\\>  \\&lt;"

    def test_period_after_number_on_line(self):
        assert escape_preformatted(". x", line_prefix="3") == "\\. x"


@pytest.mark.unit
class TestFlankingWhitespace:
    @pytest.mark.parametrize(
        "content,expected",
        [
            ("  a b ", ("  ", "a b", " ")),
            ("a", ("", "a", "")),
            ("\tx", ("\t", "x", "")),
            ("   ", ("   ", "", "")),
            ("", ("", "", "")),
        ],
    )
    def test_split(self, content, expected):
        assert flanking_whitespace(content) == expected

    def test_newlines_are_not_flanking(self):
        assert flanking_whitespace("\na\n") == ("", "\na\n", "")


def _texts(document):
    return [node for node in document.iter_descendants() if isinstance(node, Text)]


@pytest.mark.unit
class TestCollapseWhitespace:
    def test_runs_collapse(self):
        document = parse_html("<p>  a \n\t b  </p>")
        normalized = collapse_whitespace(document, ConversionOptions())
        assert [normalized[id(text)] for text in _texts(document)] == ["a b"]

    def test_space_not_doubled_across_inline_elements(self):
        document = parse_html("<p>a <b> b</b> c</p>")
        normalized = collapse_whitespace(document, ConversionOptions())
        assert [normalized[id(text)] for text in _texts(document)] == ["a ", "b", " c"]

    def test_trimmed_around_blocks_and_br(self):
        document = parse_html("<div> a <p> b </p> c <br> d </div>")
        normalized = collapse_whitespace(document, ConversionOptions())
        assert [normalized[id(text)] for text in _texts(document)] == ["a", "b", "c", "d"]

    def test_whitespace_kept_after_void(self):
        document = parse_html("<p>a<img src='x'> b</p>")
        normalized = collapse_whitespace(document, ConversionOptions())
        assert [normalized[id(text)] for text in _texts(document)] == ["a", " b"]

    def test_pre_collapsed_without_preformatted_code(self):
        document = parse_html("<pre>a   b</pre>")
        normalized = collapse_whitespace(document, ConversionOptions())
        assert [normalized[id(text)] for text in _texts(document)] == ["a b"]

    def test_pre_preserved_with_preformatted_code(self):
        document = parse_html("<p>x</p><pre>a   b</pre><code> c  d </code>")
        normalized = collapse_whitespace(document, ConversionOptions(preformatted_code=True))
        texts = _texts(document)
        assert normalized[id(texts[0])] == "x"
        assert id(texts[1]) not in normalized
        assert id(texts[2]) not in normalized

    def test_root_element(self):
        root = Element("span", children=[Text("  a  ")])
        assert collapse_whitespace(root, ConversionOptions()) == {id(root.children[0]): "a"}
