#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the explicit-stack Markdown renderer."""

import sys

import pytest

from markturn.exceptions import MalformedInputError
from markturn.nodes import Comment, Document, Element, Text, parse_html
from markturn.options import ConversionOptions
from markturn.renderer import MarkdownRenderer, join
from markturn.rules import RuleTable


@pytest.fixture
def renderer():
    return MarkdownRenderer(RuleTable(), ConversionOptions())


@pytest.mark.unit
class TestJoin:
    @pytest.mark.parametrize(
        "left,right,expected",
        [
            ("a", "b", "ab"),
            ("a\n", "b", "a\nb"),
            ("a", "\nb", "a\nb"),
            ("a\n\n", "\n\nb", "a\n\nb"),
            ("a\n\n\n\n", "b", "a\n\nb"),
            ("a\n", "\n\n\nb", "a\n\nb"),
            ("", "\n\nb", "\n\nb"),
            ("a\n", "", "a\n"),
        ],
    )
    def test_newline_merging(self, left, right, expected):
        assert join(left, right) == expected


@pytest.mark.unit
class TestRender:
    def test_document_body_only(self, renderer):
        document = parse_html("<html><head><title>T</title></head><body><p>x</p></body></html>")
        assert renderer.render(document) == "x"

    def test_document_without_body(self, renderer):
        assert renderer.render(parse_html("<p>a</p><p>b</p>")) == "a\n\nb"

    def test_element_root(self, renderer):
        assert renderer.render(Element("p", children=[Text("x")])) == "x"

    def test_text_root_is_escaped(self, renderer):
        assert renderer.render(Text("a*b")) == "a\\*b"

    def test_empty_document(self, renderer):
        assert renderer.render(Document()) == ""
        assert renderer.render(parse_html("<p>\n</p>")) == ""

    def test_comment_children_ignored(self, renderer):
        root = Element("p", children=[Text("a"), Comment("x"), Text("b")])
        assert renderer.render(root) == "ab"

    def test_state_not_shared_between_calls(self):
        renderer = MarkdownRenderer(RuleTable(), ConversionOptions(link_style="referenced"))
        document = parse_html('<a href="u">a</a>')
        assert renderer.render(document) == renderer.render(document) == "[a][1]\n\n[1]: u"

    def test_rules_see_list_and_quote_context(self):
        def context(content, node, options, state):
            return f"{state.list_depth}:{state.block_indent.replace(' ', '.')}"

        table = RuleTable()
        table.add_rule("context", "span", context)
        renderer = MarkdownRenderer(table, ConversionOptions())
        document = parse_html("<ul><li><blockquote><p><span>x</span></p></blockquote></li></ul>")
        assert renderer.render(document) == "* > 1:..>."

    def test_deep_nesting_without_recursion(self, renderer):
        depth = sys.getrecursionlimit() * 2
        node = Element("span", children=[Text("x")])
        for _ in range(depth):
            node = Element("span", children=[node])
        assert renderer.render(Element("p", children=[node])) == "x"

    def test_deep_blockquotes(self, renderer):
        node = Element("p", children=[Text("x")])
        for _ in range(1500):
            node = Element("blockquote", children=[node])
        assert renderer.render(node) == "> " * 1500 + "x"


@pytest.mark.unit
class TestMalformedInput:
    def test_element_without_name(self, renderer):
        with pytest.raises(MalformedInputError):
            renderer.render(Element("p", children=[Element("")]))

    def test_non_string_text(self, renderer):
        with pytest.raises(MalformedInputError):
            renderer.render(Element("p", children=[Text(None)]))  # type: ignore[arg-type]

    def test_foreign_child(self, renderer):
        root = Element("p")
        root.children.append("not a node")  # type: ignore[arg-type]
        with pytest.raises(MalformedInputError):
            renderer.render(root)

    def test_unsupported_root(self, renderer):
        with pytest.raises(MalformedInputError):
            renderer.render(Comment("x"))  # type: ignore[arg-type]
