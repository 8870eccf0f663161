#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for HTML to Markdown conversion with the CommonMark rules."""

import pytest
from bs4 import BeautifulSoup

from markturn import HTMLToMarkdown, html_to_markdown
from markturn.exceptions import ConversionError, MalformedInputError, PluginError, ValidationError
from markturn.nodes import Element, Text
from markturn.options import ConversionOptions
from markturn.plugins import PluginMetadata


@pytest.mark.unit
class TestHeadings:
    def test_title_and_paragraph(self):
        assert html_to_markdown("<h1>Title</h1><p>Hello <b>world</b></p>") == "# Title\n\nHello **world**"

    @pytest.mark.parametrize("level", range(1, 7))
    def test_atx_levels(self, level):
        assert html_to_markdown(f"<h{level}>Head</h{level}>") == "#" * level + " Head"

    def test_setext(self):
        html = "<h1>Hello World</h1><h2>Sub</h2><h3>Three</h3>"
        expected = "Hello World\n===========\n\nSub\n---\n\n### Three"
        assert html_to_markdown(html, heading_style="setext") == expected

    def test_setext_underline_spans_wide_characters(self):
        assert html_to_markdown("<h1>日本語</h1>", heading_style="setext") == "日本語\n======"
        assert html_to_markdown("<h2>ｗｉｄｅ x</h2>", heading_style="setext") == "ｗｉｄｅ x\n" + "-" * 10

    def test_inline_markup_in_heading(self):
        assert html_to_markdown("<h2>a <em>b</em></h2>") == "## a _b_"

    def test_heading_whitespace_collapsed(self):
        assert html_to_markdown("<h1>\n  Spread\n  out\n</h1>") == "# Spread out"


@pytest.mark.unit
class TestBlocks:
    def test_paragraphs(self):
        assert html_to_markdown("<p>one</p><p>two</p>") == "one\n\ntwo"

    @pytest.mark.parametrize("marker,expected", [("*", "* * *"), ("-", "- - -"), ("_", "_ _ _")])
    def test_horizontal_rule(self, marker, expected):
        assert html_to_markdown("<p>a</p><hr><p>b</p>", hr=marker) == f"a\n\n{expected}\n\nb"

    def test_blockquote(self):
        assert html_to_markdown("<blockquote><p>a</p><p>b</p></blockquote>") == "> a\n>\n> b"

    def test_nested_blockquote(self):
        html = "<blockquote><p>a</p><blockquote><p>b</p></blockquote></blockquote>"
        assert html_to_markdown(html) == "> a\n>\n> > b"

    def test_line_break(self):
        assert html_to_markdown("<p>a<br>b</p>") == "a  \nb"
        assert html_to_markdown("<p>a<br>b</p>", br="\\") == "a\\\nb"

    def test_unknown_block_element(self):
        assert html_to_markdown("<div>a</div><div>b</div>") == "a\n\nb"

    def test_unknown_inline_element(self):
        assert html_to_markdown("<p><span>a</span><span>b</span></p>") == "ab"

    def test_script_and_style_removed(self):
        html = "<style>p { color: red }</style><p>a</p><script>alert(1)</script>"
        assert html_to_markdown(html) == "a"


@pytest.mark.unit
class TestLists:
    def test_unordered(self):
        assert html_to_markdown("<ul><li>one</li><li>two</li></ul>") == "* one\n* two"

    def test_source_whitespace_ignored(self):
        html = "<ul>\n  <li>one</li>\n  <li>two</li>\n</ul>"
        assert html_to_markdown(html, bullet_list_marker="+") == "+ one\n+ two"

    def test_ordered_with_start(self):
        assert html_to_markdown('<ol start="3"><li>a</li><li>b</li></ol>') == "3. a\n4. b"

    def test_nested_bullets_indent_two_spaces(self):
        html = "<ul><li>a<ul><li>b</li></ul></li><li>c</li></ul>"
        assert html_to_markdown(html, bullet_list_marker="-") == "- a\n  - b\n- c"

    def test_nested_ordered_indent_by_marker_width(self):
        html = "<ol><li>a<ol><li>b</li></ol></li></ol>"
        assert html_to_markdown(html) == "1. a\n   1. b"

    def test_item_with_paragraphs(self):
        assert html_to_markdown("<ul><li><p>a</p><p>b</p></li></ul>") == "* a\n\n  b"


@pytest.mark.unit
class TestCode:
    def test_indented_block(self):
        html = "<pre><code>def f():\n    return 1\n</code></pre>"
        assert html_to_markdown(html) == "    def f():\n        return 1"

    def test_fenced_block_with_language(self):
        html = '<pre><code class="language-python">print(1)\n</code></pre>'
        assert html_to_markdown(html, code_block_style="fenced") == "```python\nprint(1)\n```"
        assert html_to_markdown(html, code_block_style="fenced", fence="~") == "~~~python\nprint(1)\n~~~"

    def test_fence_grows_past_fences_in_code(self):
        html = "<pre><code>```\nx\n```</code></pre>"
        assert html_to_markdown(html, code_block_style="fenced") == "````\n```\nx\n```\n````"

    def test_fence_grows_past_indented_fence_in_code(self):
        html = "<pre><code>a\n  ```\nb</code></pre>"
        assert html_to_markdown(html, code_block_style="fenced") == "````\na\n  ```\nb\n````"

    def test_fence_grows_past_mid_line_run(self):
        html = "<pre><code>x = '```'</code></pre>"
        assert html_to_markdown(html, code_block_style="fenced") == "````\nx = '```'\n````"
        html = "<pre><code>y = '~~~~'</code></pre>"
        assert html_to_markdown(html, code_block_style="fenced", fence="~") == "~~~~~\ny = '~~~~'\n~~~~~"

    def test_code_block_content_not_escaped(self):
        html = "<pre><code>a_b * [c]</code></pre>"
        assert html_to_markdown(html) == "    a_b * [c]"

    def test_inline_code(self):
        assert html_to_markdown("<p>Use <code>a*b</code> now</p>") == "Use `a*b` now"

    def test_inline_code_with_backticks(self):
        assert html_to_markdown("<p><code>a`b</code></p>") == "``a`b``"
        assert html_to_markdown("<p><code>`x</code></p>") == "`` `x ``"

    def test_preformatted_without_code(self):
        assert html_to_markdown("<pre>a  *b*\n  c</pre>") == "a \\*b\\* c"

    def test_preformatted_code_keeps_whitespace(self):
        html = "<pre>a  *b*\n  c</pre>"
        assert html_to_markdown(html, preformatted_code=True) == "a  \\*b\\*\n  c"

    def test_preformatted_inline_code(self):
        assert html_to_markdown("<p><code>a   b</code></p>") == "`a b`"
        assert html_to_markdown("<p><code>a   b</code></p>", preformatted_code=True) == "`a   b`"


@pytest.mark.unit
class TestInline:
    def test_emphasis_delimiters(self):
        assert html_to_markdown("<em>x</em>") == "_x_"
        assert html_to_markdown("<i>x</i>", em_delimiter="*") == "*x*"
        assert html_to_markdown("<strong>x</strong>", strong_delimiter="__") == "__x__"

    def test_emphasis_collision_uses_alternate(self):
        assert html_to_markdown("<em>snake_case</em>") == "*snake\\_case*"

    def test_strong_collision_uses_alternate(self):
        assert html_to_markdown("<b>a**b</b>") == "__a\\*\\*b__"

    def test_empty_emphasis_dropped(self):
        assert html_to_markdown("<p>a<em></em>b</p>") == "ab"

    def test_flanking_whitespace_moves_outside(self):
        assert html_to_markdown("<p>a<b> bold </b>c</p>") == "a **bold** c"

    def test_blank_inline_keeps_single_space(self):
        assert html_to_markdown("<p>a <span> </span> b</p>") == "a b"

    def test_link(self):
        assert html_to_markdown('<a href="https://x.com" title="T">x</a>') == '[x](https://x.com "T")'

    def test_link_destination_parentheses_escaped(self):
        assert html_to_markdown('<a href="https://x.com/a_(b)">x</a>') == "[x](https://x.com/a_\\(b\\))"

    def test_link_without_href(self):
        assert html_to_markdown("<p><a>x</a></p>") == "x"

    def test_image(self):
        assert html_to_markdown('<img src="a.png" alt="A" title="T">') == '![A](a.png "T")'
        assert html_to_markdown('<p>x<img alt="A"></p>') == "x"


@pytest.mark.unit
class TestReferenceLinks:
    html = '<p><a href="http://a.com">x</a> and <a href="http://b.com">x</a></p>'

    def test_full_numbers_each_target(self):
        expected = "[x][1] and [x][2]\n\n[1]: http://a.com\n[2]: http://b.com"
        assert html_to_markdown(self.html, link_style="referenced") == expected

    def test_full_reuses_number_for_same_target(self):
        html = '<p><a href="http://a.com">x</a> <a href="http://a.com">y</a></p>'
        assert html_to_markdown(html, link_style="referenced") == "[x][1] [y][1]\n\n[1]: http://a.com"

    def test_collapsed(self):
        options = {"link_style": "referenced", "link_reference_style": "collapsed"}
        assert html_to_markdown('<a href="u1">docs</a>', options) == "[docs][]\n\n[docs]: u1"

    def test_shortcut_with_label_collision(self):
        expected = "[x] and [x][x 2]\n\n[x]: http://a.com\n[x 2]: http://b.com"
        assert html_to_markdown(self.html, link_style="referenced", linkReferenceStyle="shortcut") == expected

    def test_referenced_image(self):
        assert html_to_markdown('<img src="a.png" alt="pic">', link_style="referenced") == "![pic][1]\n\n[1]: a.png"

    def test_definitions_do_not_leak_between_conversions(self):
        referenced = HTMLToMarkdown(link_style="referenced")
        assert referenced.convert('<a href="u">a</a>') == "[a][1]\n\n[1]: u"
        assert referenced.convert('<a href="v">b</a>') == "[b][1]\n\n[1]: v"


@pytest.mark.unit
class TestEscaping:
    @pytest.mark.parametrize(
        "html,expected",
        [
            ("<p>1. not a list</p>", "1\\. not a list"),
            ("<p># not a heading</p>", "\\# not a heading"),
            ("<p>*stars* and _underscores_</p>", "\\*stars\\* and \\_underscores\\_"),
            ("<p>a &amp; b &lt;c&gt;</p>", "a & b \\<c>"),
            ("<p>use &lt;em&gt;x&lt;/em&gt; literally</p>", "use \\<em>x\\</em> literally"),
            ("<p>&amp;lt;tag&amp;gt;</p>", "\\&lt;tag\\&gt;"),
            ("<p>&lt;!-- note --&gt; &lt;?php</p>", "\\<!-- note --> \\<?php"),
            ("<p>1 &lt; 2 &amp;&amp; 3 &gt; 2</p>", "1 < 2 && 3 > 2"),
            ("<p>1) not a list</p>", "1\\) not a list"),
            ("<p>1<span>. item</span></p>", "1\\. item"),
            ("<p><span>12</span>. item</p>", "12\\. item"),
            ("<p>1<b>.</b> item</p>", "1**\\.** item"),
            ("<p>v1<span>. next</span></p>", "v1. next"),
        ],
    )
    def test_text_escaping(self, html, expected):
        assert html_to_markdown(html) == expected

    def test_escape_method(self, converter):
        assert converter.escape("- [x]") == "\\- \\[x\\]"

    def test_comments_ignored(self):
        assert html_to_markdown("<p>a<!-- hidden -->b</p>") == "ab"


@pytest.mark.unit
class TestHTMLToMarkdown:
    def test_options_mapping_and_overrides(self):
        converter = HTMLToMarkdown({"headingStyle": "setext", "b": "2"}, hr="_")
        assert converter.options.heading_style == "setext"
        assert converter.options.bullet_list_marker == "-"
        assert converter.options.hr == "_"

    def test_options_instance(self):
        options = ConversionOptions(bullet_list_marker="+")
        assert HTMLToMarkdown(options).options is options

    def test_add_rule_takes_precedence(self, converter):
        converter.add_rule("mark", "mark", lambda content, node, options, state: f"=={content}==")
        converter.add_rule("shout", "b", lambda content, node, options, state: content.upper())
        assert converter.convert("<p><mark>hi</mark> <b>loud</b></p>") == "==hi== LOUD"

    def test_keep_and_remove_chain(self, converter):
        converter.keep(["kbd"]).remove("aside")
        html = "<p>Press <kbd>Ctrl</kbd></p><aside>ad</aside>"
        assert converter.convert(html) == "Press <kbd>Ctrl</kbd>"

    def test_keep_block_element(self, converter):
        converter.keep("table")
        html = "<p>a</p><table><tr><td>1</td></tr></table>"
        assert converter.convert(html) == "a\n\n<table><tr><td>1</td></tr></table>"

    def test_use_callable_and_list(self, converter):
        calls = []

        def first(rules):
            calls.append("first")

        def second(rules):
            calls.append("second")

        assert converter.use(first) is converter
        converter.use([second, first])
        assert calls == ["first", "second", "first"]

    def test_use_plugin_metadata(self, converter):
        metadata = PluginMetadata(
            name="upper-code",
            description="",
            plugin=lambda rules: rules.add_rule("upper-code", "code", lambda c, n, o, s: c.upper()),
        )
        assert converter.use(metadata).convert("<code>x</code>") == "X"

    def test_use_unknown_name(self, converter):
        with pytest.raises(PluginError) as exc_info:
            converter.use("no-such-plugin")
        assert exc_info.value.plugin_name == "no-such-plugin"

    def test_use_non_plugin(self, converter):
        with pytest.raises(PluginError):
            converter.use(42)

    def test_failing_plugin_wrapped(self, converter):
        def broken(rules):
            raise ValueError("boom")

        with pytest.raises(PluginError) as exc_info:
            converter.use(broken)
        assert isinstance(exc_info.value.original_error, ValueError)

    def test_convert_beautifulsoup(self, converter):
        soup = BeautifulSoup("<p><em>x</em></p>", "html.parser")
        assert converter.convert(soup) == "_x_"
        assert converter.convert(soup.p) == "_x_"

    def test_convert_node(self, converter):
        assert converter.convert(Element("h2", children=[Text("x")])) == "## x"

    def test_convert_rejects_other_types(self, converter):
        with pytest.raises(ValidationError):
            converter.convert(123)  # type: ignore[arg-type]

    def test_malformed_input_not_wrapped(self, converter):
        with pytest.raises(MalformedInputError):
            converter.convert(Element("p", children=[Text(5)]))  # type: ignore[arg-type]

    def test_unexpected_failure_wrapped(self, converter):
        def explode(content, node, options, state):
            raise RuntimeError("bad rule")

        converter.add_rule("explode", "p", explode)
        with pytest.raises(ConversionError) as exc_info:
            converter.convert("<p>x</p>")
        assert exc_info.value.conversion_stage == "rendering"
        assert isinstance(exc_info.value.original_error, RuntimeError)

    def test_html_to_markdown_plugins(self):
        assert html_to_markdown("<p><s>x</s></p>", plugins=["strikethrough"]) == "~~x~~"
