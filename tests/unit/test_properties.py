"""Property-based tests for conversion invariants.

Test Coverage:
- Plain text survives conversion with collapsed whitespace
- ATX and setext heading shape
- Escaped text reads back as the original text through a CommonMark parser
- Arbitrary nested markup converts without errors
"""

import string

import mistune
import pytest
from bs4 import BeautifulSoup
from hypothesis import given, strategies as st

from markturn import html_to_markdown
from markturn.normalizer import escape_markdown

WORD_ALPHABET = string.ascii_letters + string.digits
PUNCTUATION = "\\*_`[]()~#+->=.!,:;?'\"/<&"
WIDE_ALPHABET = "日本語漢字ｗｉｄｅ" + string.ascii_lowercase

words = st.lists(st.text(alphabet=WORD_ALPHABET, min_size=1, max_size=10), min_size=1, max_size=8)
punctuated_words = st.lists(
    st.text(alphabet=WORD_ALPHABET + PUNCTUATION, min_size=1, max_size=10), min_size=1, max_size=8
)


@pytest.mark.unit
@pytest.mark.property
class TestTextProperties:
    @given(st.text(alphabet=WORD_ALPHABET + " \n\t", max_size=80))
    def test_plain_text_whitespace_collapsed(self, text):
        assert html_to_markdown(f"<p>{text}</p>") == " ".join(text.split())

    @given(st.integers(min_value=1, max_value=6), words)
    def test_atx_heading(self, level, parts):
        text = " ".join(parts)
        assert html_to_markdown(f"<h{level}>{text}</h{level}>") == f"{'#' * level} {text}"

    @given(st.integers(min_value=1, max_value=2), words)
    def test_setext_underline_matches_text(self, level, parts):
        text = " ".join(parts)
        markdown = html_to_markdown(f"<h{level}>{text}</h{level}>", heading_style="setext")
        heading, underline = markdown.split("\n")
        assert heading == text
        assert underline == ("=" if level == 1 else "-") * len(text)

    @given(st.lists(st.text(alphabet=WIDE_ALPHABET, min_size=1, max_size=6), min_size=1, max_size=4))
    def test_setext_underline_covers_display_width(self, parts):
        text = " ".join(parts)
        heading, underline = html_to_markdown(f"<h1>{text}</h1>", heading_style="setext").split("\n")
        assert heading == text
        assert len(underline) == sum(1 if char.isascii() else 2 for char in text)

    @given(punctuated_words)
    def test_escaped_text_reads_back_literally(self, parts):
        text = " ".join(parts)
        rendered = mistune.html(escape_markdown(text))
        assert BeautifulSoup(rendered, "html.parser").get_text().strip() == text


def _wrap(tag):
    return lambda inner: f"<{tag}>{inner}</{tag}>"


html_fragments = st.recursive(
    st.text(alphabet=WORD_ALPHABET + PUNCTUATION + " \n", max_size=20),
    lambda children: st.one_of(
        st.lists(children, max_size=3).map("".join),
        st.builds(
            lambda tag, inner: _wrap(tag)(inner),
            st.sampled_from(["p", "em", "b", "a", "code", "blockquote", "li", "ul", "ol", "h2", "span", "div", "del"]),
            children,
        ),
    ),
    max_leaves=15,
)


@pytest.mark.unit
@pytest.mark.property
class TestStructureProperties:
    @given(html_fragments, st.sampled_from(["inlined", "referenced"]), st.sampled_from(["atx", "setext"]))
    def test_arbitrary_markup_converts(self, html, link_style, heading_style):
        markdown = html_to_markdown(html, link_style=link_style, heading_style=heading_style, plugins=["gfm"])
        assert isinstance(markdown, str)
        assert not markdown.startswith("\n")
        assert markdown == markdown.rstrip()
