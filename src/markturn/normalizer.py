#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Whitespace collapsing and Markdown escaping for text nodes.

HTML treats runs of whitespace as a single space and ignores whitespace next
to block boundaries; Markdown does not. ``collapse_whitespace`` walks the tree
once before rendering and records the normalized text of every text node, so
the renderer never has to reason about source indentation.

Escaping is applied to literal text so that characters like ``*`` or a
leading ``1.`` stay literal when the Markdown is read back.
"""

from __future__ import annotations

import re
from typing import Callable, Optional

from markturn.constants import MARKDOWN_INLINE_SPECIAL_CHARS, MARKDOWN_SPECIAL_CHARS
from markturn.nodes import Comment, DocumentNode, Element, Text, _ParentMixin
from markturn.options import ConversionOptions

_WHITESPACE_RUN = re.compile(r"[ \r\n\t]+")

# Characters that only carry meaning at the start of a line
_LINE_START_ESCAPES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^(#{1,6})(?=[ \t]|$)", re.MULTILINE), r"\\\1"),
    (re.compile(r"^-", re.MULTILINE), r"\\-"),
    (re.compile(r"^\+(?=[ \t]|$)", re.MULTILINE), r"\\+"),
    (re.compile(r"^>", re.MULTILINE), r"\\>"),
    (re.compile(r"^(=+)", re.MULTILINE), r"\\\1"),
    (re.compile(r"^(\d+)\.(?=[ \t]|$)", re.MULTILINE), r"\1\\."),
)

# "<" opening a tag, autolink, comment or declaration; "&" opening an entity
_TAG_START = re.compile(r"<(?=[A-Za-z/!?])")
_ENTITY_START = re.compile(r"&(?=#[0-9]+;|#[xX][0-9a-fA-F]+;|\w+;)")

# Digits already on the line that a following "." would turn into a list marker
_MARKER_NUMBER = re.compile(r"[ \t]*\d+")
_MARKER_PERIOD = re.compile(r"\.(?=[ \t\n]|$)")

_LEADING_SPACE = re.compile(r"^[ \t]+")
_TRAILING_SPACE = re.compile(r"[ \t]+\Z")


def _backslash_chars(text: str, chars: str) -> str:
    return "".join(f"\\{char}" if char in chars else char for char in text)


def _escape_html(text: str) -> str:
    return _ENTITY_START.sub(r"\\&", _TAG_START.sub(r"\\<", text))


def _escape_split_marker(escaped: str, line_prefix: str) -> str:
    if line_prefix and _MARKER_NUMBER.fullmatch(line_prefix) and _MARKER_PERIOD.match(escaped):
        return "\\" + escaped
    return escaped


def escape_markdown(text: str, line_prefix: str = "") -> str:
    r"""Escape Markdown syntax in literal text.

    Parameters
    ----------
    text : str
        Normalized text from a text node
    line_prefix : str, default = ""
        Output already rendered on the line this text continues. Digits there
        make a leading ``.`` part of an ordered-list marker.

    Returns
    -------
    str
        Text with ``\ * _ ` [ ] ( ) ~`` escaped everywhere, ``<`` escaped
        where it would open a tag and ``&`` where it would open an entity,
        and ``# - + > =`` and ordered-list numbers escaped at the start of a
        line

    Examples
    --------
        >>> escape_markdown("1. not a list")
        '1\\. not a list'
        >>> escape_markdown("a *b* c")
        'a \\*b\\* c'
        >>> escape_markdown("<em> &amp; a < b")
        '\\<em> \\&amp; a < b'
        >>> escape_markdown(". item", line_prefix="1")
        '\\. item'

    """
    escaped = _escape_html(_backslash_chars(text, MARKDOWN_INLINE_SPECIAL_CHARS))
    for pattern, replacement in _LINE_START_ESCAPES:
        escaped = pattern.sub(replacement, escaped)
    return _escape_split_marker(escaped, line_prefix)


def escape_preformatted(text: str, line_prefix: str = "") -> str:
    """Escape every Markdown-significant character, keeping whitespace as is."""
    escaped = _escape_html(_backslash_chars(text, MARKDOWN_SPECIAL_CHARS))
    escaped = re.sub(r"^(\d+)\.", r"\1\\.", escaped, flags=re.MULTILINE)
    return _escape_split_marker(escaped, line_prefix)


def flanking_whitespace(content: str) -> tuple[str, str, str]:
    """Split leading and trailing spaces off inline content.

    ``<b> bold </b>`` must become `` **bold** ``: Markdown delimiters do not
    work when they touch whitespace on the inner side.

    Returns
    -------
    tuple of str
        (leading, trimmed content, trailing)

    """
    leading_match = _LEADING_SPACE.search(content)
    leading = leading_match.group(0) if leading_match else ""
    rest = content[len(leading) :]
    trailing_match = _TRAILING_SPACE.search(rest)
    trailing = trailing_match.group(0) if trailing_match else ""
    trimmed = rest[: len(rest) - len(trailing)] if trailing else rest
    return leading, trimmed, trailing


def _preformatted_predicate(options: ConversionOptions) -> Callable[[Element], bool]:
    if options.preformatted_code:
        return lambda element: element.tag in ("pre", "code")
    return lambda element: False


def collapse_whitespace(root: DocumentNode, options: ConversionOptions) -> dict[int, str]:
    """Compute the whitespace-normalized text of every text node under ``root``.

    Runs of ASCII whitespace collapse to one space. A space is dropped when
    the previous text already ends in one, and trimmed next to block elements
    and ``<br>``. With ``preformatted_code`` enabled, ``<pre>`` and ``<code>``
    subtrees are left untouched.

    Parameters
    ----------
    root : DocumentNode
        Root of the tree to normalize
    options : ConversionOptions
        Conversion options

    Returns
    -------
    dict[int, str]
        Normalized text keyed by ``id()`` of each text node. Text nodes that
        collapse to nothing map to an empty string; nodes inside preserved
        subtrees are absent.

    """
    is_pre = _preformatted_predicate(options)
    normalized: dict[int, str] = {}

    if not isinstance(root, _ParentMixin):
        return normalized
    if isinstance(root, Element) and is_pre(root):
        return normalized

    prev_text: Optional[Text] = None
    keep_leading_ws = False

    def trim_prev() -> None:
        if prev_text is not None:
            normalized[id(prev_text)] = normalized[id(prev_text)].rstrip(" ")

    # Each element with children is visited on the way in and on the way out
    stack: list[tuple[DocumentNode, bool]] = [(child, True) for child in reversed(root.children)]
    while stack:
        node, entering = stack.pop()

        if isinstance(node, Text):
            text = _WHITESPACE_RUN.sub(" ", node.data)
            previous = normalized.get(id(prev_text), "") if prev_text is not None else None
            if (previous is None or previous.endswith(" ")) and not keep_leading_ws and text.startswith(" "):
                text = text[1:]
            normalized[id(node)] = text
            if text:
                prev_text = node
            continue

        if isinstance(node, Comment) or not isinstance(node, Element):
            continue

        if node.is_block or node.tag == "br":
            trim_prev()
            prev_text = None
            keep_leading_ws = False
        elif node.is_void or is_pre(node):
            prev_text = None
            keep_leading_ws = True
        elif prev_text is not None:
            keep_leading_ws = False

        if entering and node.children and not is_pre(node):
            stack.append((node, False))
            stack.extend((child, True) for child in reversed(node.children))

    trim_prev()
    return normalized


__all__ = [
    "collapse_whitespace",
    "escape_markdown",
    "escape_preformatted",
    "flanking_whitespace",
]
